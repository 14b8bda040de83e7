"""Test cases for individual transformation stages."""

import io
import json
import os
import re

import pytest
from PIL import Image

from assetflow.core.exceptions import TransformError
from assetflow.manager import BuildManager
from assetflow.pipeline.base import PipelineStats, SourceFile
from assetflow.pipeline.stages.changed import ChangedStage
from assetflow.pipeline.stages.images import ImageOptimizeStage
from assetflow.pipeline.stages.markup import HtmlMinifyStage
from assetflow.pipeline.stages.styles import AutoprefixStage, CssCompressStage
from conftest import all_files, write_file


def compact(text: str) -> str:
    return re.sub(r"\s+", "", text)


def css_file(text: str) -> SourceFile:
    return SourceFile(path="/site/src/css/a.css", base="/site/src/css", contents=text.encode())


def png_bytes() -> bytes:
    image = Image.new("RGB", (64, 64), (200, 30, 30))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", compress_level=0)
    return buffer.getvalue()


class TestAutoprefixStage:
    """Vendor prefixes are added ahead of the standard property."""

    def test_adds_prefixes(self):
        stage = AutoprefixStage(["> 1%"])
        result = stage.transform(css_file("a {\n  user-select: none;\n  color: red;\n}\n"))
        assert compact(result.text) == (
            "a{-webkit-user-select:none;-moz-user-select:none;-ms-user-select:none;"
            "user-select:none;color:red;}"
        )

    def test_existing_prefix_not_duplicated(self):
        stage = AutoprefixStage(["> 1%"])
        result = stage.transform(css_file("a { -webkit-user-select: none; user-select: none; }"))
        assert compact(result.text).count("-webkit-user-select") == 1
        assert "-moz-user-select" in result.text

    def test_prefixes_inside_media(self):
        stage = AutoprefixStage(["> 1%"])
        result = stage.transform(css_file("@media (max-width: 600px) { a { appearance: none; } }"))
        assert "-webkit-appearance:none;-moz-appearance:none;appearance:none" in compact(result.text)
        assert compact(result.text).startswith("@media(max-width:600px){")

    def test_sticky_value(self):
        stage = AutoprefixStage(["> 1%"])
        result = stage.transform(css_file("nav { position: sticky; }"))
        assert compact(result.text) == "nav{position:-webkit-sticky;position:sticky;}"

    def test_empty_browserslist_leaves_css(self):
        text = "a {\n  user-select: none;\n}\n"
        result = AutoprefixStage([]).transform(css_file(text))
        assert result.text == text


class TestCompressionStages:
    """Production-only minifiers."""

    def test_css_compress(self):
        result = CssCompressStage().transform(css_file("a {\n  color: red;\n}\n/* note */\n"))
        assert result.text == "a{color:red}"

    def test_html_minify_collapses_whitespace(self):
        html = "<html>\n  <body>\n    <p>Hello   world</p>\n  </body>\n</html>\n"
        source = SourceFile(path="/s/html/index.html", base="/s/html", contents=html.encode())
        result = HtmlMinifyStage().transform(source)
        assert "\n" not in result.text
        assert "<p>Hello world" in result.text


class TestImageOptimizeStage:
    """Image optimization never fails the build."""

    def test_png_not_grown(self):
        original = png_bytes()
        source = SourceFile(path="/s/images/a.png", base="/s/images", contents=original)
        result = ImageOptimizeStage().transform(source)
        assert len(result.contents) <= len(original)
        with Image.open(io.BytesIO(result.contents)) as image:
            assert image.size == (64, 64)

    def test_broken_image_kept(self):
        source = SourceFile(path="/s/images/a.png", base="/s/images", contents=b"not a png")
        result = ImageOptimizeStage().transform(source)
        assert result.contents == b"not a png"

    def test_svg_passes_through(self):
        svg = b"<svg xmlns='http://www.w3.org/2000/svg'>  </svg>"
        source = SourceFile(path="/s/images/a.svg", base="/s/images", contents=svg)
        assert ImageOptimizeStage().transform(source).contents == svg


class TestChangedStage:
    """Target names use the declared output extension."""

    def test_target_path_with_extension(self):
        stage = ChangedStage("/site/dist/html", ".html")
        source = SourceFile(path="/site/src/pug/blog/post.pug", base="/site/src/pug", contents=b"")
        assert stage.target_path(source) == os.path.join("/site/dist/html", "blog/post.html")

    def test_missing_target_is_changed(self, tmp_path):
        stage = ChangedStage(str(tmp_path / "dist"))
        source = SourceFile(path=f"{tmp_path}/src/a.css", base=f"{tmp_path}/src", contents=b"", mtime=1.0)
        assert stage.is_changed(source)


class TestPipelineErrors:
    """A failing step aborts its pipeline with a TransformError."""

    @pytest.mark.asyncio
    async def test_step_exception_wrapped(self):
        class Boom(CssCompressStage):
            def transform(self, source_file):
                raise RuntimeError("boom")

        stage = Boom()
        stage.bind("css", PipelineStats())

        with pytest.raises(TransformError, match=r"\[css\] cssnano failed on /site/src/css/a.css: boom"):
            await stage.process_file(css_file("a{}"))


class TestModeGatedOutput:
    """Production output drops formatting that development output keeps."""

    @pytest.mark.asyncio
    async def test_prod_minifies_markup_and_styles(self, make_config, tmp_path, dist):
        write_file(tmp_path, "src/html/index.html", "<html>\n  <body>\n    <p>Hi</p>\n  </body>\n</html>\n")
        write_file(tmp_path, "src/css/site.css", "a {\n  color: red;\n}\n")
        config = make_config({'html': True, 'css': True}, autoprefixer_browserslist=[])

        await BuildManager(config).build()
        assert all_files(dist) == ["css/site.css", "css/site.css.map", "html/index.html"]
        dev_css = (dist / "css/site.css").read_text()
        dev_html = (dist / "html/index.html").read_text()

        await BuildManager(config).prod()
        assert all_files(dist) == ["css/site.css", "html/index.html"]
        prod_css = (dist / "css/site.css").read_text()
        prod_html = (dist / "html/index.html").read_text()

        assert "\n  color: red;" in dev_css
        assert prod_css == "a{color:red}"
        assert "\n  <body>" in dev_html
        assert "\n" not in prod_html


def read_map(path) -> dict:
    return json.loads(path.read_text())


class TestCompiledModules:
    """Compiler-backed modules built end to end in both modes."""

    @pytest.mark.asyncio
    async def test_pug_layout_extended_by_page(self, make_config, tmp_path, dist):
        write_file(tmp_path, "src/pug/_layout.pug", "html\n  body\n    block content\n")
        write_file(tmp_path, "src/pug/index.pug", "extends _layout.pug\n\nblock content\n  h1 Hi\n")
        config = make_config({'pug': True})

        await BuildManager(config).build()

        assert all_files(dist) == ["html/index.html"]
        html = (dist / "html/index.html").read_text()
        assert "<body>" in html
        assert "<h1>Hi</h1>" in html

    @pytest.mark.asyncio
    async def test_sass_dev_map_and_prod_compression(self, make_config, tmp_path, dist):
        write_file(tmp_path, "src/sass/site.sass", "$pad: 4px\n\n.box\n  padding: $pad\n  .inner\n    color: red\n")
        config = make_config({'sass': True}, autoprefixer_browserslist=[])

        await BuildManager(config).build()
        assert all_files(dist) == ["css/site.css", "css/site.css.map"]
        dev_css = (dist / "css/site.css").read_text()
        assert ".box .inner" in dev_css
        assert "padding: 4px;" in dev_css
        assert "sourceMappingURL=site.css.map" in dev_css
        source_map = read_map(dist / "css/site.css.map")
        assert source_map["mappings"]
        assert source_map["sources"] == ["site.sass"]

        await BuildManager(config).prod()
        assert all_files(dist) == ["css/site.css"]
        assert (dist / "css/site.css").read_text() == ".box{padding:4px}.box .inner{color:red}"

    @pytest.mark.asyncio
    async def test_js_transpiled_then_mangled(self, make_config, tmp_path, dist):
        write_file(tmp_path, "src/js/app.js", (
            "const shout = (text) => {\n"
            "  const loudMessage = text.toUpperCase();\n"
            "  return `${loudMessage}!`;\n"
            "};\n"
            "class Greeter {\n"
            "  constructor(name) { this.name = name; }\n"
            "  greet() { return shout(this.name); }\n"
            "}\n"
        ))
        config = make_config({'js': True})

        await BuildManager(config).build()
        assert all_files(dist) == ["js/app.js", "js/app.js.map"]
        dev_js = (dist / "js/app.js").read_text()
        assert "=>" not in dev_js
        assert "class Greeter" not in dev_js
        assert "loudMessage" in dev_js
        assert "//# sourceMappingURL=app.js.map" in dev_js
        source_map = read_map(dist / "js/app.js.map")
        assert source_map["mappings"]
        assert source_map["sources"] == ["app.js"]

        await BuildManager(config).prod()
        assert all_files(dist) == ["js/app.js"]
        prod_js = (dist / "js/app.js").read_text()
        assert "loudMessage" not in prod_js
        assert "=>" not in prod_js
        assert "\n" not in prod_js.strip()

    @pytest.mark.asyncio
    async def test_ts_types_stripped_then_mangled(self, make_config, tmp_path, dist):
        write_file(tmp_path, "src/ts/app.ts", (
            "function total(values: number[]): number {\n"
            "  let runningTotal = 0;\n"
            "  for (let i = 0; i < values.length; i++) {\n"
            "    runningTotal += values[i];\n"
            "  }\n"
            "  return runningTotal;\n"
            "}\n"
        ))
        config = make_config({'ts': True})

        await BuildManager(config).build()
        assert all_files(dist) == ["js/app.js", "js/app.js.map"]
        dev_js = (dist / "js/app.js").read_text()
        assert ": number" not in dev_js
        assert "runningTotal" in dev_js
        assert read_map(dist / "js/app.js.map")["sources"] == ["app.ts"]

        await BuildManager(config).prod()
        assert all_files(dist) == ["js/app.js"]
        prod_js = (dist / "js/app.js").read_text()
        assert "function total(" in prod_js
        assert "runningTotal" not in prod_js
        assert "\n" not in prod_js.strip()
