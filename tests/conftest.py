"""Pytest configuration and fixtures for assetflow tests."""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from assetflow.config.build_config_loader import BuildConfig
from assetflow.pipeline.base import FileTransformStage, SourceFile
from assetflow.pipeline.pipeline_builder import PipelineBuilder

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# Output extension each stub compiler renames to, as the real steps do
STUB_SUFFIXES = {
    "pug": ".html",
    "scss": ".css",
    "sass": ".css",
    "ts": ".js",
}


class RecordingStage(FileTransformStage):
    """Stand-in for a compiler: tags the text and records every file it sees"""

    def __init__(self, module_id: str, calls: List[str], is_development: bool = True, fail_on: Optional[str] = None):
        super().__init__(f"stub-{module_id}")
        self.module_id = module_id
        self.calls = calls
        self.is_development = is_development
        self.fail_on = fail_on

    def transform(self, source_file: SourceFile) -> SourceFile:
        self.calls.append(source_file.original_relative)
        if self.fail_on and source_file.original_relative.endswith(self.fail_on):
            raise ValueError(f"cannot compile {self.fail_on}")
        mode = "dev" if self.is_development else "prod"
        if source_file.suffix in (".png", ".jpg", ".gif", ".woff2"):
            return source_file
        source_file.text = f"/* {self.module_id}:{mode} */\n" + source_file.text
        suffix = STUB_SUFFIXES.get(self.module_id)
        if suffix:
            source_file.with_suffix(suffix)
        return source_file


class StubPipelineBuilder(PipelineBuilder):
    """PipelineBuilder whose every module runs a single RecordingStage"""

    def __init__(self, config: BuildConfig, fail_on: Optional[str] = None):
        super().__init__(config)
        self.calls: List[str] = []
        self.modes: List[bool] = []
        self.fail_on = fail_on

    def steps_for(self, module_id: str, is_development: bool):
        self.modes.append(is_development)
        return [RecordingStage(module_id, self.calls, is_development, self.fail_on)]


def write_file(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def all_files(root: Path) -> List[str]:
    if not root.exists():
        return []
    return sorted(
        str(p.relative_to(root)).replace(os.sep, "/")
        for p in root.rglob("*") if p.is_file()
    )


@pytest.fixture
def make_config(tmp_path):
    """Factory for a BuildConfig rooted at tmp_path"""
    def _make(modules: Optional[Dict[str, bool]] = None, **overrides: Any) -> BuildConfig:
        data: Dict[str, Any] = {
            'src_dir': 'src',
            'dest_dir': 'dist',
            'modules': {
                'html': False, 'pug': False, 'css': False, 'scss': False, 'sass': False,
                'js': False, 'ts': False, 'images': False, 'other': False, 'server': False,
                **(modules or {}),
            },
        }
        data.update(overrides)
        return BuildConfig.from_dict(data, root=str(tmp_path))
    return _make


@pytest.fixture
def dist(tmp_path) -> Path:
    return tmp_path / "dist"
