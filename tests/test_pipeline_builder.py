"""Test cases for per-module step assembly."""

import pytest

from assetflow.config.build_config_loader import BuildConfig
from assetflow.pipeline.pipeline_builder import PipelineBuilder


def step_names(builder, module_id, is_development):
    return [step.name for step in builder.steps_for(module_id, is_development)]


class TestPipelineBuilder:
    """Production-only steps appear only when the mode is production."""

    @pytest.fixture
    def builder(self):
        return PipelineBuilder(BuildConfig.default())

    @pytest.mark.parametrize("module_id,development,production", [
        ("html", [], ["htmlmin"]),
        ("pug", ["pug"], ["pug"]),
        ("css", ["autoprefixer"], ["autoprefixer", "cssnano"]),
        ("scss", ["sass", "autoprefixer"], ["sass", "autoprefixer", "cssnano"]),
        ("sass", ["sass", "autoprefixer"], ["sass", "autoprefixer", "cssnano"]),
        ("js", ["babel"], ["babel", "uglify"]),
        ("ts", ["typescript"], ["typescript", "uglify"]),
        ("images", [], ["imagemin"]),
        ("other", [], []),
    ])
    def test_steps_per_mode(self, builder, module_id, development, production):
        assert step_names(builder, module_id, True) == development
        assert step_names(builder, module_id, False) == production

    def test_fresh_instances_every_call(self, builder):
        first = builder.steps_for("css", True)
        second = builder.steps_for("css", True)
        assert first[0] is not second[0]

    def test_browserslist_reaches_prefixer(self):
        config = BuildConfig.from_dict({'autoprefixer_browserslist': ['last 1 version']})
        prefixer = PipelineBuilder(config).steps_for("css", True)[0]
        assert prefixer.browserslist == ['last 1 version']

    def test_unknown_module(self, builder):
        with pytest.raises(KeyError):
            builder.steps_for("server", True)
