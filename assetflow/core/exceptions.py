"""
Exception hierarchy for assetflow.
"""
from typing import Dict, List, Optional


class AssetflowError(Exception):
    """Base class for all assetflow errors"""


class ConfigurationError(AssetflowError):
    """Raised at startup when the module tables are inconsistent"""

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__("Invalid build configuration: " + "; ".join(self.issues))


class TransformError(AssetflowError):
    """A pipeline step failed on a single file"""

    def __init__(self, module: str, path: str, step: str, cause: Optional[BaseException] = None):
        self.module = module
        self.path = path
        self.step = step
        self.cause = cause
        message = f"[{module}] {step} failed on {path}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class BuildError(AssetflowError):
    """One or more module tasks failed during a build"""

    def __init__(self, errors: Dict[str, BaseException]):
        self.errors = dict(errors)
        failed = ", ".join(sorted(self.errors))
        super().__init__(f"Build failed for module(s): {failed}")

    @property
    def failed_modules(self) -> List[str]:
        return sorted(self.errors)
