# Pipeline package initialization
from .base import Pipeline, PipelineStage, FileTransformStage, PipelineStats, SourceFile
from .pipeline_builder import PipelineBuilder

__all__ = [
    'Pipeline',
    'PipelineStage',
    'FileTransformStage',
    'PipelineStats',
    'SourceFile',
    'PipelineBuilder',
]
