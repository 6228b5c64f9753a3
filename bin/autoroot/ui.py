import logging
from contextlib import contextmanager
from typing import Generator, List

from .logger import get_logger


class ConsoleUI:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def echo(self, message: str = "", err: bool = False) -> None:
        if err:
            self.logger.error(message)
        else:
            self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def box_output(self, lines: List[str], err: bool = False) -> None:
        self.echo("", err=err)
        for line in lines:
            self.echo(line, err=err)
        self.echo("", err=err)

    @contextmanager
    def bound(self, logger: logging.Logger) -> Generator["ConsoleUI", None, None]:
        """Route output to ``logger`` until the block exits."""
        previous = self.logger
        self.logger = logger
        try:
            yield self
        finally:
            self.logger = previous


ui = ConsoleUI(get_logger())
