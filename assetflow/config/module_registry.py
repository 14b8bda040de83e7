"""
Registry of enabled build modules.

Built once at startup from the enablement and path tables. A disabled
module has no entry at all, so callers iterate the registry instead of
checking for missing tasks.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from ..core.enums import ModuleId, MODULE_ORDER
from ..core.exceptions import ConfigurationError
from ..utils.paths import as_pattern_list
from .build_config_loader import BuildConfig


@dataclass(frozen=True)
class ModuleTraits:
    """Per-category task options that are not user-configurable"""
    output_extension: Optional[str] = None
    sourcemaps: bool = False
    # Skip files whose output is already up to date
    incremental: bool = True


MODULE_TRAITS: Dict[str, ModuleTraits] = {
    "html": ModuleTraits(),
    "pug": ModuleTraits(output_extension=".html"),
    "css": ModuleTraits(sourcemaps=True),
    "scss": ModuleTraits(output_extension=".css", sourcemaps=True),
    "sass": ModuleTraits(output_extension=".css", sourcemaps=True),
    "js": ModuleTraits(sourcemaps=True),
    "ts": ModuleTraits(output_extension=".js", sourcemaps=True),
    # No deterministic one-to-one output name for these two
    "images": ModuleTraits(incremental=False),
    "other": ModuleTraits(incremental=False),
}


@dataclass(frozen=True)
class ModuleConfig:
    """One enabled file-category pipeline"""
    identifier: str
    enabled: bool
    source_patterns: Tuple[str, ...]
    output_subpath: str
    participates_in_server: bool
    output_extension: Optional[str] = None
    sourcemaps: bool = False
    incremental: bool = True


class ModuleRegistry:
    """Enabled modules, in task registration order"""

    def __init__(self, modules: List[ModuleConfig], server_enabled: bool):
        self._modules: Dict[str, ModuleConfig] = {m.identifier: m for m in modules}
        self.server_enabled = server_enabled
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: BuildConfig) -> 'ModuleRegistry':
        """
        Build the registry from a BuildConfig.

        Args:
            config: Loaded build configuration

        Returns:
            Registry holding only enabled modules

        Raises:
            ConfigurationError: if the module tables are inconsistent
        """
        issues = config.validate()
        if issues:
            raise ConfigurationError(issues)

        server_enabled = bool(config.modules.get(ModuleId.SERVER.value, False))
        modules = []
        for module_id in MODULE_ORDER:
            if not config.modules.get(module_id, False):
                continue
            module_paths = config.paths[module_id]
            traits = MODULE_TRAITS[module_id]
            modules.append(ModuleConfig(
                identifier=module_id,
                enabled=True,
                source_patterns=tuple(as_pattern_list(module_paths.src)),
                output_subpath=module_paths.dest,
                participates_in_server=server_enabled,
                output_extension=traits.output_extension,
                sourcemaps=traits.sourcemaps,
                incremental=traits.incremental,
            ))

        registry = cls(modules, server_enabled)
        registry.logger.debug(
            f"Registered modules: {', '.join(registry.identifiers()) or '(none)'}"
            f" (server {'enabled' if server_enabled else 'disabled'})"
        )
        return registry

    def get(self, module_id: str) -> ModuleConfig:
        return self._modules[module_id]

    def identifiers(self) -> List[str]:
        return list(self._modules)

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._modules

    def __iter__(self) -> Iterator[ModuleConfig]:
        return iter(self._modules.values())

    def __len__(self) -> int:
        return len(self._modules)
