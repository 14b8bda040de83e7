import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from dataclasses import dataclass, field

from ..core.enums import ModuleId, MODULE_ORDER
from ..utils.paths import first_directory, is_negated


@dataclass
class ModulePaths:
    """Source glob(s) and output subdirectory of one module"""
    src: Union[str, List[str]]
    dest: str = ""


@dataclass
class ServerConfig:
    """Dev server configuration"""
    host: str = "localhost"
    port: int = 3000
    notify: bool = False


DEFAULT_MODULES: Dict[str, bool] = {
    "html": False,
    "pug": True,
    "css": False,
    "scss": False,
    "sass": True,
    "js": False,
    "ts": True,
    "images": True,
    "other": True,
    "server": True,
}


def default_module_paths() -> Dict[str, ModulePaths]:
    paths = {
        "html": ModulePaths(src="html/**/*.html", dest="html"),
        "pug": ModulePaths(src=["pug/**/*.pug", "!pug/**/_*.pug"], dest="html"),
        "css": ModulePaths(src="css/**/*.css", dest="css"),
        "scss": ModulePaths(src=["scss/**/*.scss", "!scss/**/_*.scss"], dest="css"),
        "sass": ModulePaths(src=["sass/**/*.sass", "!sass/_*.sass"], dest="css"),
        "js": ModulePaths(src="js/**/*.js", dest="js"),
        "ts": ModulePaths(src="ts/**/*.ts", dest="js"),
        "images": ModulePaths(src="images/**/*.+(png|jpeg|jpg|gif|svg)", dest="images"),
    }
    paths["other"] = ModulePaths(src=catch_all_patterns(paths), dest="")
    return paths


def catch_all_patterns(paths: Dict[str, ModulePaths]) -> List[str]:
    """
    Build the catch-all source list: every file, minus the top-level
    directory owned by each specialised module.
    """
    patterns = ["**/*.*"]
    for module_id in MODULE_ORDER:
        if module_id == ModuleId.OTHER.value or module_id not in paths:
            continue
        src = paths[module_id].src
        positives = [p for p in ([src] if isinstance(src, str) else src) if not is_negated(p)]
        if not positives:
            continue
        exclusion = f"!{first_directory(positives[0])}/**"
        if exclusion not in patterns:
            patterns.append(exclusion)
    return patterns


@dataclass
class BuildConfig:
    """Static build configuration, loaded once at startup"""
    src_dir: str = "src"
    dest_dir: str = "dist"
    modules: Dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_MODULES))
    paths: Dict[str, ModulePaths] = field(default_factory=default_module_paths)
    autoprefixer_browserslist: List[str] = field(default_factory=lambda: ["> 1%", "last 2 version"])
    server_index: str = "html/index.html"
    server: ServerConfig = field(default_factory=ServerConfig)
    # Directory that relative src_dir/dest_dir are resolved against
    root: str = "."

    @property
    def src_root(self) -> str:
        return self._resolve(self.src_dir)

    @property
    def dest_root(self) -> str:
        return self._resolve(self.dest_dir)

    def _resolve(self, directory: str) -> str:
        return os.path.abspath(os.path.join(self.root, directory)).replace("\\", "/")

    def validate(self) -> List[str]:
        """
        Check the enablement table against the path table.

        Returns:
            List of issues, empty when the configuration is consistent
        """
        issues = []
        known = set(MODULE_ORDER) | {ModuleId.SERVER.value}
        for module_id, enabled in self.modules.items():
            if module_id not in known:
                issues.append(f"Unknown module '{module_id}' in modules table")
                continue
            if module_id == ModuleId.SERVER.value or not enabled:
                continue
            module_paths = self.paths.get(module_id)
            if module_paths is None:
                issues.append(f"Enabled module '{module_id}' has no paths entry")
                continue
            if not module_paths.src:
                issues.append(f"Module '{module_id}' has an empty src pattern")
        for module_id in self.paths:
            if module_id not in known:
                issues.append(f"Unknown module '{module_id}' in paths table")
        if self.modules.get(ModuleId.SERVER.value) and not self.server_index:
            issues.append("Server is enabled but server_index is empty")
        return issues

    @classmethod
    def from_dict(cls, data: Dict[str, Any], root: str = ".") -> 'BuildConfig':
        """Create BuildConfig from dictionary, merging over the defaults"""
        modules = dict(DEFAULT_MODULES)
        modules.update(data.get('modules') or {})

        paths = default_module_paths()
        user_paths = data.get('paths') or {}
        for module_id, entry in user_paths.items():
            entry = entry or {}
            current = paths.get(module_id)
            paths[module_id] = ModulePaths(
                src=entry.get('src', current.src if current else ""),
                dest=entry.get('dest', current.dest if current else ""),
            )
        if 'other' not in user_paths and user_paths:
            paths['other'] = ModulePaths(src=catch_all_patterns(paths), dest="")

        kwargs: Dict[str, Any] = {
            'modules': modules,
            'paths': paths,
            'server': ServerConfig(**(data.get('server') or {})),
            'root': data.get('root', root),
        }
        for key in ('src_dir', 'dest_dir', 'server_index'):
            if key in data:
                kwargs[key] = data[key]
        if 'autoprefixer_browserslist' in data:
            kwargs['autoprefixer_browserslist'] = list(data['autoprefixer_browserslist'] or [])
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'BuildConfig':
        """Load BuildConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {}, root=str(path.parent))

    @classmethod
    def default(cls) -> 'BuildConfig':
        """Return default configuration"""
        return cls()


def load_build_config(config_path: Optional[str] = None) -> BuildConfig:
    """
    Load build configuration from YAML file.
    If no path provided, looks for assetflow.yaml in standard locations.
    """
    if config_path:
        return BuildConfig.from_yaml(config_path)

    search_paths = [
        Path("./assetflow.yaml"),
        Path("./assetflow.yml"),
        Path("./config/assetflow.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return BuildConfig.from_yaml(str(path))

    return BuildConfig.default()
