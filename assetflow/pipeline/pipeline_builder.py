import logging
from typing import Callable, Dict, List, Optional

from ..config.build_config_loader import BuildConfig
from .base import PipelineStage


class PipelineBuilder:
    """Assembles the ordered transformation steps of a module.

    ``steps_for`` is called every time a task runs, with the build mode
    current at that moment; production-only steps are appended only then.
    """

    def __init__(self, config: BuildConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self._assemblers: Dict[str, Callable[[bool], List[PipelineStage]]] = {
            'html': self._html_steps,
            'pug': self._pug_steps,
            'css': self._css_steps,
            'scss': self._sass_steps,
            'sass': self._sass_steps,
            'js': self._js_steps,
            'ts': self._ts_steps,
            'images': self._image_steps,
            'other': self._other_steps,
        }

    def steps_for(self, module_id: str, is_development: bool) -> List[PipelineStage]:
        """
        Build the step list for one module.

        Args:
            module_id: Module identifier
            is_development: Current build mode

        Returns:
            Fresh stage instances in execution order
        """
        assembler = self._assemblers.get(module_id)
        if assembler is None:
            raise KeyError(f"No pipeline defined for module '{module_id}'")
        steps = assembler(is_development)
        self.logger.debug(
            f"[{module_id}] {'development' if is_development else 'production'} steps: "
            f"{', '.join(step.name for step in steps) or '(none)'}"
        )
        return steps

    def _html_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.markup import HtmlMinifyStage

        steps: List[PipelineStage] = []
        if not is_development:
            steps.append(HtmlMinifyStage())
        return steps

    def _pug_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.markup import PugStage

        return [PugStage()]

    def _css_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.styles import AutoprefixStage, CssCompressStage

        steps: List[PipelineStage] = [AutoprefixStage(self.config.autoprefixer_browserslist)]
        if not is_development:
            steps.append(CssCompressStage())
        return steps

    def _sass_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.styles import SassStage

        return [SassStage()] + self._css_steps(is_development)

    def _js_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.scripts import BabelStage, UglifyStage

        steps: List[PipelineStage] = [BabelStage()]
        if not is_development:
            steps.append(UglifyStage())
        return steps

    def _ts_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.scripts import TypeScriptStage, UglifyStage

        steps: List[PipelineStage] = [TypeScriptStage()]
        if not is_development:
            steps.append(UglifyStage())
        return steps

    def _image_steps(self, is_development: bool) -> List[PipelineStage]:
        from .stages.images import ImageOptimizeStage

        steps: List[PipelineStage] = []
        if not is_development:
            steps.append(ImageOptimizeStage())
        return steps

    def _other_steps(self, is_development: bool) -> List[PipelineStage]:
        return []
