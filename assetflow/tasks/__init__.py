from .task_builder import ModuleTask, TaskBuilder, TaskCallback

__all__ = ['ModuleTask', 'TaskBuilder', 'TaskCallback']
