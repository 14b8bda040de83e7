import asyncio
import logging
import os
from typing import Callable, List, Optional, Set, Tuple

from watchfiles import Change, awatch

from ..tasks.task_builder import ModuleTask
from ..utils.paths import matches


ChangeListener = Callable[[Change, str], None]


class ModuleWatcher:
    """Re-runs one module's task whenever a file matching its globs changes.

    Every change batch schedules a new task run without waiting for the
    previous one, and every change is also passed to ``on_change`` (the
    dev server's reload hook when the server is enabled).
    """

    def __init__(
        self,
        module_id: str,
        watch_dir: str,
        patterns: List[str],
        task: ModuleTask,
        on_change: Optional[ChangeListener] = None,
    ):
        self.module_id = module_id
        self.watch_dir = watch_dir
        self.patterns = list(patterns)
        self.task = task
        self.on_change = on_change
        self.logger = logging.getLogger(f"{__name__}.{module_id}")
        self.stop_event = asyncio.Event()
        self._running_tasks: Set[asyncio.Task] = set()

    def matches(self, change: Change, path: str) -> bool:
        """watchfiles filter: only paths selected by this module's globs"""
        return matches(path.replace("\\", "/"), self.patterns)

    async def run(self) -> None:
        """Watch until stopped; a watcher failure ends this module's watcher only"""
        self.logger.info(f"Watching '{self.module_id}' sources under {self.watch_dir}")
        try:
            async for changes in awatch(self.watch_dir, watch_filter=self.matches, stop_event=self.stop_event):
                self.handle_changes(changes)
        except Exception as e:
            self.logger.error(f"Watcher for '{self.module_id}' stopped: {e}")

    def handle_changes(self, changes: Set[Tuple[Change, str]]) -> asyncio.Task:
        for change, path in sorted(changes, key=lambda item: item[1]):
            self.logger.info(f"'{os.path.relpath(path, self.watch_dir)}' was {change.name}")
            if self.on_change is not None:
                self.on_change(change, path)

        run = asyncio.get_running_loop().create_task(self.task(self._task_done))
        self._running_tasks.add(run)
        run.add_done_callback(self._running_tasks.discard)
        return run

    def _task_done(self, error: Optional[BaseException]) -> None:
        if error is not None:
            self.logger.error(f"'{self.module_id}' rebuild failed: {error}")

    def stop(self) -> None:
        self.stop_event.set()
