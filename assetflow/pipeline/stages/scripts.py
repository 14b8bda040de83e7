"""
Script steps: Babel and TypeScript compilation, mangling and compression.
"""
import os
from pathlib import PurePosixPath
from typing import List, Optional

import dukpy
from calmjs.parse import es5
from calmjs.parse.unparsers.es5 import minify_print

from ..base import FileTransformStage, SourceFile


# Babel standalone build shipped inside the dukpy distribution
BABEL_COMPILER = os.path.join(os.path.dirname(dukpy.__file__), "jsmodules", "babel-6.26.0.min.js")


class BabelStage(FileTransformStage):
    """Transpiles modern JavaScript down to ES5"""

    def __init__(self, presets: Optional[List[str]] = None, logger=None):
        super().__init__("babel", logger)
        self.presets = list(presets or ["es2015"])
        self._compiler: Optional[str] = None

    @property
    def compiler(self) -> str:
        if self._compiler is None:
            with open(BABEL_COMPILER, "rb") as f:
                self._compiler = f.read().decode("utf-8")
        return self._compiler

    def transform(self, source_file: SourceFile) -> SourceFile:
        options = {
            "presets": self.presets,
            "filename": PurePosixPath(source_file.original_path).name,
            "sourceMaps": source_file.sourcemap_tracking,
        }
        result = dukpy.evaljs(
            (
                self.compiler,
                "var bres, res;",
                "bres = Babel.transform(dukpy.es6code, dukpy.babel_options);",
                "res = {code: bres.code, map: bres.map || null};",
            ),
            es6code=source_file.text,
            babel_options=options,
        )
        source_file.text = result["code"]
        if source_file.sourcemap_tracking and result.get("map"):
            source_file.source_map = result["map"]
        return source_file


class TypeScriptStage(FileTransformStage):
    """Strips types and compiles TypeScript to JavaScript"""

    def __init__(self, logger=None):
        super().__init__("typescript", logger)

    def transform(self, source_file: SourceFile) -> SourceFile:
        source_file.text = dukpy.typescript_compile(source_file.text)
        return source_file.with_suffix(".js")


class UglifyStage(FileTransformStage):
    """Mangles local names and removes whitespace"""

    def __init__(self, logger=None):
        super().__init__("uglify", logger)

    def transform(self, source_file: SourceFile) -> SourceFile:
        program = es5(source_file.text)
        source_file.text = minify_print(program, obfuscate=True, obfuscate_globals=False)
        return source_file
