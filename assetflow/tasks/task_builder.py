"""
Turns a registered module into a runnable task.
"""
import logging
import time
from typing import Awaitable, Callable, List, Optional

from ..config.build_config_loader import BuildConfig
from ..config.module_registry import ModuleRegistry
from ..core.models import BuildMode
from ..pipeline.base import Pipeline, PipelineStage, PipelineStats
from ..pipeline.pipeline_builder import PipelineBuilder
from ..pipeline.stages.changed import ChangedStage
from ..pipeline.stages.io import DestStage, SourceStage
from ..pipeline.stages.sourcemaps import SourceMapInitStage, SourceMapWriteStage
from ..utils.paths import path_join


TaskCallback = Callable[[Optional[BaseException]], None]


class ModuleTask:
    """One module's complete build unit: read, filter, transform, write.

    ``name`` is a display label only; the work lives in the bound runner.
    Awaiting ``run()`` raises on failure, while ``await task(callback)``
    reports the outcome to the callback instead.
    """

    def __init__(self, name: str, runner: Callable[[], Awaitable[PipelineStats]]):
        self._name = name
        self._runner = runner
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @property
    def name(self) -> str:
        return self._name

    async def run(self) -> PipelineStats:
        self.logger.info(f"Starting '{self.name}'...")
        started = time.monotonic()
        try:
            stats = await self._runner()
        except Exception as e:
            elapsed = (time.monotonic() - started) * 1000
            self.logger.error(f"'{self.name}' errored after {elapsed:.0f} ms: {e}")
            raise
        elapsed = (time.monotonic() - started) * 1000
        self.logger.info(f"Finished '{self.name}' after {elapsed:.0f} ms")
        return stats

    async def __call__(self, callback: Optional[TaskCallback] = None) -> Optional[PipelineStats]:
        if callback is None:
            return await self.run()
        try:
            stats = await self.run()
        except Exception as e:
            callback(e)
            return None
        callback(None)
        return stats

    def __repr__(self) -> str:
        return f"ModuleTask({self.name!r})"


class TaskBuilder:
    """Builds ModuleTask objects for registered modules"""

    def __init__(
        self,
        config: BuildConfig,
        registry: ModuleRegistry,
        mode: BuildMode,
        pipeline_builder: Optional[PipelineBuilder] = None,
    ):
        self.config = config
        self.registry = registry
        self.mode = mode
        self.pipeline_builder = pipeline_builder or PipelineBuilder(config)
        self.logger = logging.getLogger(__name__)

    def source_patterns(self, module_id: str) -> List[str]:
        module = self.registry.get(module_id)
        return path_join(self.config.src_root, list(module.source_patterns))

    def output_dir(self, module_id: str) -> str:
        module = self.registry.get(module_id)
        return path_join(self.config.dest_root, module.output_subpath)

    def build_task(
        self,
        module_id: str,
        output_extension: Optional[str] = None,
        sourcemaps: bool = False,
    ) -> ModuleTask:
        """
        Create the task for a module.

        Args:
            module_id: Registered module identifier
            output_extension: Extension of outputs, when it differs from the source's
            sourcemaps: Whether development builds emit source maps

        Returns:
            ModuleTask whose stages are assembled on every run
        """
        module = self.registry.get(module_id)
        src_patterns = self.source_patterns(module_id)
        dest_dir = self.output_dir(module_id)

        async def run_module() -> PipelineStats:
            track_sourcemaps = self.mode.is_development and sourcemaps
            stages: List[PipelineStage] = [SourceStage(src_patterns)]
            if track_sourcemaps:
                stages.append(SourceMapInitStage())
            if module.incremental:
                stages.append(ChangedStage(dest_dir, output_extension))
            stages.extend(self.pipeline_builder.steps_for(module_id, self.mode.is_development))
            if track_sourcemaps:
                stages.append(SourceMapWriteStage())
            stages.append(DestStage(dest_dir))

            pipeline = Pipeline(module_id, stages)
            return await pipeline.execute()

        return ModuleTask(module_id, run_module)

    def build_registered_task(self, module_id: str) -> ModuleTask:
        """Create a task using the module's registered output extension and source map flag"""
        module = self.registry.get(module_id)
        return self.build_task(module_id, module.output_extension, module.sourcemaps)
