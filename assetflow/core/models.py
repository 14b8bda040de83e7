import logging
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class BuildMode:
    """Development/production toggle shared by every task of a build manager.

    Pipeline steps are assembled when a task runs, so flipping the flag
    before the first task is scheduled changes every module's pipeline.
    """
    is_development: bool = True

    @property
    def is_production(self) -> bool:
        return not self.is_development

    def to_production(self) -> None:
        if self.is_development:
            logger.info("Switching build mode to production")
        self.is_development = False

    @property
    def label(self) -> str:
        return "development" if self.is_development else "production"
