"""
Reading sources from and writing results to disk.
"""
import asyncio
import os
from typing import AsyncIterator, List, Sequence, Union

from ..base import PipelineStage, SourceFile
from ...utils.paths import as_pattern_list, glob_base, is_negated, iter_matching_files, matches


class SourceStage(PipelineStage):
    """Emits every file matching the resolved source globs"""

    def __init__(self, patterns: Union[str, Sequence[str]], logger=None):
        super().__init__("src", logger)
        self.patterns: List[str] = as_pattern_list(patterns)
        self.positives = [p for p in self.patterns if not is_negated(p)]

    def base_for(self, path: str) -> str:
        """Static base of the first positive pattern that selects path"""
        for pattern in self.positives:
            if matches(path, pattern):
                return glob_base(pattern)
        return glob_base(self.positives[0]) if self.positives else "."

    async def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        async for source_file in input_stream:
            yield source_file

        for path in iter_matching_files(self.patterns):
            with open(path, 'rb') as f:
                contents = f.read()
            source_file = SourceFile(
                path=path,
                base=self.base_for(path),
                contents=contents,
                mtime=os.stat(path).st_mtime,
            )
            if self.stats is not None:
                self.stats.files_read += 1
            yield source_file
            await asyncio.sleep(0)


class DestStage(PipelineStage):
    """Writes each file to ``<dest_dir>/<relative path>``"""

    def __init__(self, dest_dir: str, logger=None):
        super().__init__("dest", logger)
        self.dest_dir = dest_dir

    def target_path(self, source_file: SourceFile) -> str:
        return os.path.join(self.dest_dir, source_file.relative)

    async def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        async for source_file in input_stream:
            target = self.target_path(source_file)
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, 'wb') as f:
                f.write(source_file.contents)
            if self.stats is not None:
                self.stats.files_written += 1
            self.logger.debug(f"Wrote {target}")
            yield source_file
