import asyncio
import logging
import os
import shutil
from typing import Callable, Dict, List, Optional

from .config.build_config_loader import BuildConfig
from .config.module_registry import ModuleRegistry
from .core.exceptions import BuildError
from .core.models import BuildMode
from .pipeline.base import PipelineStats
from .pipeline.pipeline_builder import PipelineBuilder
from .server.dev_server import DevServer
from .tasks.task_builder import ModuleTask, TaskBuilder
from .watch.module_watcher import ModuleWatcher


class BuildManager:
    """Composes module tasks into clean, build, watch, dev and prod"""

    def __init__(
        self,
        config: BuildConfig,
        mode: Optional[BuildMode] = None,
        pipeline_builder: Optional[PipelineBuilder] = None,
    ):
        self.config = config
        self.mode = mode or BuildMode()
        self.registry = ModuleRegistry.from_config(config)
        self.task_builder = TaskBuilder(config, self.registry, self.mode, pipeline_builder)
        self.logger = logging.getLogger(f"{__name__}.BuildManager")

        # Only enabled modules get an entry
        self.tasks: Dict[str, ModuleTask] = {
            module.identifier: self.task_builder.build_registered_task(module.identifier)
            for module in self.registry
        }

        self.server: Optional[DevServer] = None
        if self.registry.server_enabled:
            self.server = DevServer(
                root_dir=config.dest_root,
                index_file=config.server_index,
                host=config.server.host,
                port=config.server.port,
                notify=config.server.notify,
            )
        self.watchers: List[ModuleWatcher] = []

    async def clean(self) -> None:
        """Remove everything under the output root, keeping the root itself"""
        dest_root = self.config.dest_root
        if not os.path.isdir(dest_root):
            return
        removed = 0
        for entry in os.scandir(dest_root):
            if entry.is_dir(follow_symlinks=False):
                shutil.rmtree(entry.path)
            else:
                os.remove(entry.path)
            removed += 1
        self.logger.info(f"Cleaned {removed} entr{'y' if removed == 1 else 'ies'} from {dest_root}")

    async def build(self) -> Dict[str, PipelineStats]:
        """
        Clean, then run every enabled module task concurrently.

        Returns:
            Stats per module

        Raises:
            BuildError: if any module task failed (after all tasks settle)
        """
        await self.clean()
        self.logger.info(f"Building {len(self.tasks)} module(s) in {self.mode.label} mode")

        names = list(self.tasks)
        results = await asyncio.gather(
            *(self.tasks[name].run() for name in names),
            return_exceptions=True,
        )

        stats: Dict[str, PipelineStats] = {}
        errors: Dict[str, BaseException] = {}
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                errors[name] = result
            else:
                stats[name] = result

        if errors:
            raise BuildError(errors)
        return stats

    def create_watchers(self) -> List[ModuleWatcher]:
        """One watcher per registered task; every change also reloads the browser"""
        on_change: Optional[Callable] = self.server.reload if self.server is not None else None
        watchers = []
        for module_id, task in self.tasks.items():
            module = self.registry.get(module_id)
            watchers.append(ModuleWatcher(
                module_id=module_id,
                watch_dir=self.config.src_root,
                patterns=self.task_builder.source_patterns(module_id),
                task=task,
                on_change=on_change if module.participates_in_server else None,
            ))
        return watchers

    async def watch(self) -> None:
        """Watch every enabled module until all watchers stop"""
        self.watchers = self.create_watchers()
        if not self.watchers:
            self.logger.warning("No enabled modules to watch")
            return
        await asyncio.gather(*(watcher.run() for watcher in self.watchers))

    async def serve(self) -> None:
        """Start the dev server and keep serving"""
        if self.server is None:
            self.logger.info("Dev server is disabled")
            return
        await self.server.start()
        try:
            await asyncio.Event().wait()
        finally:
            await self.server.stop()

    def stop(self) -> None:
        for watcher in self.watchers:
            watcher.stop()

    async def dev(self) -> None:
        """Build once, then watch and serve concurrently; does not return"""
        await self.build()
        await asyncio.gather(self.watch(), self.serve())

    async def prod(self, callback: Optional[Callable[[Optional[BaseException]], None]] = None) -> Optional[Dict[str, PipelineStats]]:
        """
        Switch to production mode and build once.

        Args:
            callback: Receives None on success or the exception on failure;
                without a callback the exception propagates
        """
        self.mode.to_production()
        try:
            stats = await self.build()
        except Exception as e:
            if callback is None:
                raise
            callback(e)
            return None
        if callback is not None:
            callback(None)
        return stats
