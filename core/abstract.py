import logging
from abc import ABC, abstractmethod

from core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class App(ABC):
    """Entry point shared by the client and the sandbox server."""

    settings: Settings

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def configure_logging(self) -> None:
        logging.basicConfig(level=self.settings.log_level.upper(), format=LOG_FORMAT)

    @abstractmethod
    def run(self) -> None:
        raise NotImplementedError
