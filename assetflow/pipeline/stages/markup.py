"""
Markup steps: pug template compilation and HTML whitespace collapsing.
"""
import os
from pathlib import PurePosixPath

import minify_html
from jinja2 import Environment, FileSystemLoader

from ..base import FileTransformStage, SourceFile


class PugStage(FileTransformStage):
    """Compiles a pug template to static HTML.

    Templates render through pypugjs's Jinja2 extension, loaded from disk
    so ``extends`` and ``include`` resolve next to the template first and
    then from the module's source root.
    """

    def __init__(self, logger=None):
        super().__init__("pug", logger)

    def environment(self, source_file: SourceFile) -> Environment:
        search_path = [os.path.dirname(source_file.original_path)]
        if source_file.base not in search_path:
            search_path.append(source_file.base)
        return Environment(
            loader=FileSystemLoader(search_path),
            extensions=["pypugjs.ext.jinja.PyPugJSExtension"],
        )

    def transform(self, source_file: SourceFile) -> SourceFile:
        template = self.environment(source_file).get_template(PurePosixPath(source_file.original_path).name)
        source_file.text = template.render()
        return source_file.with_suffix(".html")


class HtmlMinifyStage(FileTransformStage):
    """Collapses whitespace in HTML documents"""

    def __init__(self, logger=None):
        super().__init__("htmlmin", logger)

    def transform(self, source_file: SourceFile) -> SourceFile:
        source_file.text = minify_html.minify(source_file.text, minify_css=True, minify_js=True)
        return source_file
