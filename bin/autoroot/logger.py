import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Union

import colorama

LOGGER_NAME = "autoroot"


class ColoredConsoleFormatter(logging.Formatter):
    GREEN = colorama.Fore.GREEN
    CYAN = colorama.Fore.CYAN
    YELLOW = colorama.Fore.YELLOW
    RED = colorama.Fore.RED
    RESET = colorama.Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        stripped_msg = msg.lstrip()

        if record.levelno >= logging.ERROR:
            return f"{self.RED}{msg}{self.RESET}"
        if record.levelno >= logging.WARNING or stripped_msg.startswith("[!]"):
            return f"{self.YELLOW}{msg}{self.RESET}"
        if stripped_msg.startswith("[+]"):
            return f"{self.GREEN}{msg}{self.RESET}"
        if stripped_msg.startswith("[*]"):
            return f"{self.CYAN}{msg}{self.RESET}"
        return msg


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        colorama.just_fix_windows_console()
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredConsoleFormatter("%(message)s"))
        logger.addHandler(console_handler)
        logger.setLevel(logging.INFO)
    return logger


def flush_handlers(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.flush()


@contextmanager
def logging_context(
    log_filename: Optional[Union[str, Path]] = None,
    name: str = LOGGER_NAME,
) -> Generator[logging.Logger, None, None]:
    logger = get_logger(name)
    handlers_to_remove = []

    has_file_handler = any(isinstance(h, logging.FileHandler) for h in logger.handlers)

    try:
        if log_filename and not has_file_handler:
            Path(log_filename).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_filename, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(message)s", datefmt="%H:%M:%S")
            )
            logger.addHandler(file_handler)
            handlers_to_remove.append(file_handler)

        yield logger

    finally:
        flush_handlers(logger)
        for handler in handlers_to_remove:
            handler.close()
            logger.removeHandler(handler)
