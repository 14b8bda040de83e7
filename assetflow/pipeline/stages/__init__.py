# Pipeline stages package initialization
from .io import SourceStage, DestStage
from .changed import ChangedStage
from .sourcemaps import SourceMapInitStage, SourceMapWriteStage
from .markup import PugStage, HtmlMinifyStage
from .styles import SassStage, AutoprefixStage, CssCompressStage
from .scripts import BabelStage, TypeScriptStage, UglifyStage
from .images import ImageOptimizeStage

__all__ = [
    'SourceStage',
    'DestStage',
    'ChangedStage',
    'SourceMapInitStage',
    'SourceMapWriteStage',
    'PugStage',
    'HtmlMinifyStage',
    'SassStage',
    'AutoprefixStage',
    'CssCompressStage',
    'BabelStage',
    'TypeScriptStage',
    'UglifyStage',
    'ImageOptimizeStage',
]
