import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, AsyncIterator, Dict, List, Optional

from ..core.exceptions import TransformError


@dataclass
class SourceFile:
    """A file flowing through a module pipeline.

    ``path`` is the current (possibly renamed) path; ``relative`` is what
    gets written under the output directory.
    """
    path: str
    base: str
    contents: bytes
    mtime: float = 0.0
    original_path: str = ""
    # Set by SourceMapInitStage; steps may store a provider map in source_map
    sourcemap_tracking: bool = False
    original_text: Optional[str] = None
    source_map: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.original_path:
            self.original_path = self.path

    @property
    def relative(self) -> str:
        return str(PurePosixPath(self.path).relative_to(PurePosixPath(self.base)))

    @property
    def original_relative(self) -> str:
        return str(PurePosixPath(self.original_path).relative_to(PurePosixPath(self.base)))

    @property
    def suffix(self) -> str:
        return PurePosixPath(self.path).suffix

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")

    @text.setter
    def text(self, value: str) -> None:
        self.contents = value.encode("utf-8")

    def with_suffix(self, suffix: str) -> 'SourceFile':
        self.path = str(PurePosixPath(self.path).with_suffix(suffix))
        return self


@dataclass
class PipelineStats:
    """Statistics for one pipeline run"""
    files_read: int = 0
    files_written: int = 0
    stage_stats: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def record(self, stage_name: str, key: str, amount: int = 1) -> None:
        stats = self.stage_stats.setdefault(stage_name, {})
        stats[key] = stats.get(key, 0) + amount


class PipelineStage(ABC):
    """Base class for all pipeline stages"""

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(f"{__name__}.{name}")
        self.module = ""
        self.stats: Optional[PipelineStats] = None

    def bind(self, module: str, stats: PipelineStats) -> None:
        """Attach the running pipeline's module label and stats"""
        self.module = module
        self.stats = stats

    def record(self, key: str, amount: int = 1) -> None:
        if self.stats is not None:
            self.stats.record(self.name, key, amount)

    @abstractmethod
    def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        """Process the input stream and yield output"""
        pass


class FileTransformStage(PipelineStage):
    """Stage that rewrites one file at a time.

    Any exception raised by ``transform`` aborts the stream and surfaces as
    a TransformError naming the module, the file and this stage.
    """

    async def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        async for source_file in input_stream:
            yield await self.process_file(source_file)

    async def process_file(self, source_file: SourceFile) -> SourceFile:
        self.logger.debug(f"{self.name}: {source_file.relative}")
        try:
            result = self.transform(source_file)
        except TransformError:
            raise
        except Exception as e:
            raise TransformError(self.module, source_file.original_path, self.name, e) from e
        self.record("files")
        # Let sibling module pipelines run between files
        await asyncio.sleep(0)
        return result

    @abstractmethod
    def transform(self, source_file: SourceFile) -> SourceFile:
        """Transform a single file"""
        pass


class Pipeline:
    """Chains stages over a stream of files and drives it to completion"""

    def __init__(self, name: str, stages: List[PipelineStage], logger: Optional[logging.Logger] = None):
        self.name = name
        self.stages = list(stages)
        self.logger = logger or logging.getLogger(f"{__name__}.pipeline.{name}")
        self.stats = PipelineStats()

    def add_stage(self, stage: PipelineStage) -> 'Pipeline':
        """Add a stage to the pipeline"""
        self.stages.append(stage)
        return self

    async def execute(self) -> PipelineStats:
        """Run every stage over the stream; the first error aborts the run"""
        self.stats.start_time = datetime.now()

        current_stream = self._create_empty_stream()
        for stage in self.stages:
            stage.bind(self.name, self.stats)
            current_stream = stage.process(current_stream)

        try:
            async for _ in current_stream:
                pass
        finally:
            self.stats.end_time = datetime.now()
            await current_stream.aclose()

        self.logger.debug(
            f"Pipeline {self.name} read {self.stats.files_read} and wrote "
            f"{self.stats.files_written} file(s) in {self.stats.duration_seconds:.3f}s"
        )
        return self.stats

    async def _create_empty_stream(self) -> AsyncIterator[SourceFile]:
        """Initial stream; the source stage produces the actual files"""
        return
        yield
