"""
Stylesheet steps: Sass/SCSS compilation, vendor prefixing and compression.
"""
import json
import os
from typing import Dict, List, Optional, Sequence, Tuple

import rcssmin
import sass
import tinycss2

from ..base import FileTransformStage, SourceFile


class SassStage(FileTransformStage):
    """Compiles ``.scss``/``.sass`` files with libsass.

    Compilation works on the file on disk so imports resolve relative to
    it; the indented syntax is picked from the extension.
    """

    def __init__(self, include_paths: Optional[Sequence[str]] = None, logger=None):
        super().__init__("sass", logger)
        self.include_paths = list(include_paths or [])

    def transform(self, source_file: SourceFile) -> SourceFile:
        filename = source_file.original_path
        include_paths = [os.path.dirname(filename)] + self.include_paths
        if source_file.sourcemap_tracking:
            css, source_map = sass.compile(
                filename=filename,
                output_style="expanded",
                include_paths=include_paths,
                source_map_filename=f"{os.path.splitext(filename)[0]}.css.map",
                source_map_contents=True,
                omit_source_map_url=True,
            )
            source_file.source_map = json.loads(source_map)
        else:
            css = sass.compile(
                filename=filename,
                output_style="expanded",
                include_paths=include_paths,
            )
        source_file.text = css
        return source_file.with_suffix(".css")


# Properties that still need vendor-prefixed fallbacks
PREFIXED_PROPERTIES: Dict[str, Tuple[str, ...]] = {
    "appearance": ("-webkit-", "-moz-"),
    "user-select": ("-webkit-", "-moz-", "-ms-"),
    "backdrop-filter": ("-webkit-",),
    "text-size-adjust": ("-webkit-", "-moz-", "-ms-"),
    "hyphens": ("-webkit-", "-ms-"),
    "mask": ("-webkit-",),
    "mask-image": ("-webkit-",),
    "mask-size": ("-webkit-",),
    "mask-position": ("-webkit-",),
    "mask-repeat": ("-webkit-",),
    "clip-path": ("-webkit-",),
    "box-decoration-break": ("-webkit-",),
    "tab-size": ("-moz-",),
    "text-emphasis": ("-webkit-",),
    "print-color-adjust": ("-webkit-",),
}

PREFIXED_VALUES: Dict[Tuple[str, str], Tuple[str, ...]] = {
    ("position", "sticky"): ("-webkit-sticky",),
}

# At-rules whose block holds further rules
_NESTING_AT_RULES = {"media", "supports", "document", "layer", "container"}


class AutoprefixStage(FileTransformStage):
    """Adds vendor-prefixed declarations ahead of unprefixed ones.

    An empty browser list turns prefixing off.
    """

    def __init__(self, browserslist: Optional[List[str]] = None, logger=None):
        super().__init__("autoprefixer", logger)
        self.browserslist = list(browserslist or [])

    def transform(self, source_file: SourceFile) -> SourceFile:
        if self.browserslist:
            source_file.text = self.prefix(source_file.text)
        return source_file

    def prefix(self, css: str) -> str:
        rules = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=False)
        return self._serialize_rules(rules)

    def _serialize_rules(self, rules) -> str:
        parts = []
        for rule in rules:
            if rule.type == "qualified-rule":
                parts.append(self._serialize_qualified_rule(rule))
            elif (rule.type == "at-rule" and rule.content is not None
                    and rule.lower_at_keyword in _NESTING_AT_RULES):
                inner = tinycss2.parse_rule_list(rule.content, skip_comments=False, skip_whitespace=False)
                parts.append(
                    f"@{rule.at_keyword}{tinycss2.serialize(rule.prelude)}{{{self._serialize_rules(inner)}}}"
                )
            else:
                parts.append(rule.serialize())
        return "".join(parts)

    def _serialize_qualified_rule(self, rule) -> str:
        prelude = tinycss2.serialize(rule.prelude)
        items = tinycss2.parse_declaration_list(rule.content, skip_comments=False, skip_whitespace=False)
        if any(item.type == "error" for item in items):
            return rule.serialize()

        present = {item.lower_name for item in items if item.type == "declaration"}
        parts = []
        indent = ""
        for item in items:
            if item.type == "whitespace":
                indent = item.value
                parts.append(item.value)
            elif item.type == "declaration":
                for extra in self._prefixed_declarations(item, present):
                    parts.append(extra + ";" + indent)
                parts.append(self._serialize_declaration(item) + ";")
            else:
                parts.append(item.serialize())
        return f"{prelude}{{{''.join(parts)}}}"

    def _prefixed_declarations(self, declaration, present) -> List[str]:
        important = " !important" if declaration.important else ""
        value = tinycss2.serialize(declaration.value)
        extras = []
        for prefix in PREFIXED_PROPERTIES.get(declaration.lower_name, ()):
            name = prefix + declaration.lower_name
            if name not in present:
                extras.append(f"{name}:{value}{important}")
        bare_value = value.strip().lower()
        for prefixed_value in PREFIXED_VALUES.get((declaration.lower_name, bare_value), ()):
            extras.append(f"{declaration.name}: {prefixed_value}{important}")
        return extras

    @staticmethod
    def _serialize_declaration(declaration) -> str:
        important = " !important" if declaration.important else ""
        return f"{declaration.name}:{tinycss2.serialize(declaration.value)}{important}"


class CssCompressStage(FileTransformStage):
    """Strips comments and whitespace from stylesheets"""

    def __init__(self, logger=None):
        super().__init__("cssnano", logger)

    def transform(self, source_file: SourceFile) -> SourceFile:
        source_file.text = rcssmin.cssmin(source_file.text)
        return source_file
