import argparse
import sys
from typing import List, Optional

from . import constants as const
from . import i18n
from .device import DeviceController
from .i18n import get_string
from .logger import logging_context
from .ui import ConsoleUI
from .workflow import Orchestrator, RunResult

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


def _serial(value: str) -> str:
    value = value.strip()
    if not value:
        raise argparse.ArgumentTypeError(get_string("main_err_empty_serial"))
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoroot",
        description=get_string("main_description"),
    )
    parser.add_argument("serial", type=_serial, help=get_string("main_help_serial"))
    parser.add_argument("--lang", default=i18n.DEFAULT_LANG, help=get_string("main_help_lang"))
    parser.add_argument("--log-file", default=None, help=get_string("main_help_log_file"))
    parser.add_argument("--version", action="version", version=f"%(prog)s {const.APP_VERSION}")
    return parser


def report(result: RunResult, ui: ConsoleUI) -> int:
    if result.ok:
        ui.box_output([get_string("main_success").format(serial=result.device.serial)])
        return EXIT_OK
    if result.interrupted:
        return EXIT_INTERRUPTED
    return EXIT_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    i18n.load_lang(args.lang)

    with logging_context(args.log_file) as logger:
        ui = ConsoleUI(logger)
        ui.echo(get_string("main_start").format(version=const.APP_VERSION, serial=args.serial))
        result = Orchestrator(DeviceController(args.serial), logger=logger).run()
        return report(result, ui)


def entry_point() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entry_point()
