"""
Source map tracking for development builds.

Init remembers each file's original path and text; write emits a
``<output>.map`` next to the output and points the output at it. Steps
that produce their own map (libsass, Babel) leave it on
``SourceFile.source_map``; files without one get a map that carries only
the original sources.
"""
import json
from pathlib import PurePosixPath
from typing import Any, AsyncIterator, Dict

from ..base import PipelineStage, SourceFile


SOURCE_MAP_VERSION = 3


def source_mapping_comment(suffix: str, map_name: str) -> str:
    if suffix == ".css":
        return f"\n/*# sourceMappingURL={map_name} */\n"
    return f"\n//# sourceMappingURL={map_name}\n"


class SourceMapInitStage(PipelineStage):

    def __init__(self, logger=None):
        super().__init__("sourcemaps.init", logger)

    async def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        async for source_file in input_stream:
            source_file.sourcemap_tracking = True
            source_file.original_text = source_file.contents.decode("utf-8", errors="replace")
            yield source_file


class SourceMapWriteStage(PipelineStage):

    def __init__(self, logger=None):
        super().__init__("sourcemaps.write", logger)

    def build_map(self, source_file: SourceFile) -> Dict[str, Any]:
        output_name = PurePosixPath(source_file.path).name
        source_map = dict(source_file.source_map or {})
        source_map["version"] = SOURCE_MAP_VERSION
        source_map["file"] = output_name
        source_map.setdefault("names", [])
        source_map.setdefault("mappings", "")
        # Provider maps for files with imports list every source; keep those
        if len(source_map.get("sources") or []) <= 1:
            source_map["sources"] = [PurePosixPath(source_file.original_path).name]
            source_map["sourcesContent"] = [source_file.original_text or ""]
        source_map.pop("sourceRoot", None)
        return source_map

    async def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        async for source_file in input_stream:
            if not source_file.sourcemap_tracking:
                yield source_file
                continue

            source_map = self.build_map(source_file)
            map_path = f"{source_file.path}.map"
            map_name = PurePosixPath(map_path).name
            source_file.text = source_file.text.rstrip("\n") + source_mapping_comment(source_file.suffix, map_name)
            yield source_file

            yield SourceFile(
                path=map_path,
                base=source_file.base,
                contents=json.dumps(source_map).encode("utf-8"),
                mtime=source_file.mtime,
            )
