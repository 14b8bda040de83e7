import os
from pathlib import PurePosixPath
from typing import AsyncIterator, Optional

from ..base import PipelineStage, SourceFile


class ChangedStage(PipelineStage):
    """Drops files whose output is already at least as new as the source.

    The output name is the source's relative path under ``dest_dir``, with
    the extension replaced when the module declares an output extension.
    """

    def __init__(self, dest_dir: str, extension: Optional[str] = None, logger=None):
        super().__init__("changed", logger)
        self.dest_dir = dest_dir
        self.extension = extension

    def target_path(self, source_file: SourceFile) -> str:
        relative = PurePosixPath(source_file.relative)
        if self.extension:
            relative = relative.with_suffix(self.extension)
        return os.path.join(self.dest_dir, str(relative))

    def is_changed(self, source_file: SourceFile) -> bool:
        try:
            target_mtime = os.stat(self.target_path(source_file)).st_mtime
        except FileNotFoundError:
            return True
        return source_file.mtime > target_mtime

    async def process(self, input_stream: AsyncIterator[SourceFile]) -> AsyncIterator[SourceFile]:
        skipped = 0
        async for source_file in input_stream:
            if self.is_changed(source_file):
                yield source_file
            else:
                skipped += 1
                self.record("skipped")
        if skipped:
            self.logger.debug(f"[{self.module}] skipped {skipped} unchanged file(s)")
