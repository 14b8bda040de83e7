from enum import Enum


class ModuleId(str, Enum):
    HTML = "html"
    PUG = "pug"
    CSS = "css"
    SCSS = "scss"
    SASS = "sass"
    JS = "js"
    TS = "ts"
    IMAGES = "images"
    OTHER = "other"
    # Virtual module: has no sources, only switches the dev server on
    SERVER = "server"


# Order in which tasks are registered, started and listed
MODULE_ORDER = [
    ModuleId.HTML.value,
    ModuleId.PUG.value,
    ModuleId.CSS.value,
    ModuleId.SCSS.value,
    ModuleId.SASS.value,
    ModuleId.JS.value,
    ModuleId.TS.value,
    ModuleId.IMAGES.value,
    ModuleId.OTHER.value,
]
