"""Command-line entrypoint.

Usage:
    npm-deps download [--update] [--delete] [--no-verify] [--pack]
    npm-deps verify-files
    npm-deps cacache
    npm-deps fixup-lockfile
"""

from __future__ import annotations

import argparse
import os
import signal
import sys
import threading
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import NoReturn, TextIO, cast

from npmdeps import __version__
from npmdeps.actions import ActionRunner
from npmdeps.config import ACTIONS, Action, Options
from npmdeps.errors import (
    CaughtSignal,
    MultipleActionsSelected,
    NoActionSelected,
    NpmDepsError,
    ReconciliationAborted,
    UnknownAction,
    UnknownOption,
)
from npmdeps.observability import StructuredLogger
from npmdeps.prompts import ConsolePrompter, Prompter

TRAPPED_SIGNALS = ("SIGHUP", "SIGINT", "SIGQUIT", "SIGTERM")


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise UnknownOption(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="npm-deps",
        description="Download, verify and cache the dependencies pinned by package-lock.json.",
        add_help=False,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "actions:\n"
            "  download        download and verify all dependency archives\n"
            "  verify-files    verify downloaded archives against package-lock.json\n"
            "  cacache         generate an npm compatible cacache structure\n"
            "  fixup-lockfile  fix potential issues in package-lock.json"
        ),
    )
    parser.add_argument("actions", nargs="*", metavar="action")

    download = parser.add_argument_group("download options")
    download.add_argument("--pack", action="store_true", help="Tarball the downloads once complete")
    download.add_argument(
        "--update",
        action="store_true",
        help="Only download missing dependencies and verify existing ones",
    )
    download.add_argument("--delete", action="store_true", help="Don't ask before deleting files")
    download.add_argument(
        "--no-verify",
        dest="verify",
        action="store_false",
        help="Disable dependency integrity checks",
    )
    download.add_argument(
        "--no-cleanup",
        dest="cleanup",
        action="store_false",
        help="Keep the temporary directories of git dependencies",
    )

    general = parser.add_argument_group("general options")
    general.add_argument("--lockfile", type=Path, help="Location of package-lock.json")
    general.add_argument("--deps-dir", type=Path, help="Download directory (default: ./npm-deps)")
    general.add_argument("--cache-dir", type=Path, help="cacache directory (default: ./_cacache)")
    general.add_argument("--log-file", type=Path, help="Write structured log records as JSON lines")
    general.add_argument("--verbose", action="store_true", help="Show what's happening")
    general.add_argument("-h", "--help", action="store_true", help="Show this help message")
    general.add_argument("-V", "--version", action="store_true", help="Show the version")
    return parser


def select_action(requested: Sequence[str]) -> Action:
    for name in requested:
        if name not in ACTIONS:
            raise UnknownAction(f"Unknown action: {name}")
    unique = list(dict.fromkeys(requested))
    if not unique:
        raise NoActionSelected("No action provided")
    if len(unique) > 1:
        raise MultipleActionsSelected(f'Select exactly one action from "{", ".join(unique)}"')
    return cast(Action, unique[0])


def build_options(
    args: argparse.Namespace,
    *,
    cwd: str | Path,
    environ: Mapping[str, str] | None = None,
) -> Options:
    overrides: dict[str, object] = {
        "pack": args.pack,
        "update": args.update,
        "delete": args.delete,
        "verify": args.verify,
        "cleanup": args.cleanup,
        "verbose": args.verbose,
        "log_file": args.log_file,
    }
    for name in ("lockfile", "deps_dir", "cache_dir"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return Options.for_directory(cwd, **overrides).with_env(environ)


@contextmanager
def trap_signals() -> Iterator[None]:
    """Turn termination signals into :class:`CaughtSignal` so scoped cleanup runs."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum: int, frame: FrameType | None) -> None:
        raise CaughtSignal(
            "Caught signal. Cleaning up...",
            context={"signal": signal.Signals(signum).name},
        )

    previous: dict[signal.Signals, object] = {}
    for name in TRAPPED_SIGNALS:
        signum = getattr(signal, name, None)
        if signum is not None:
            previous[signum] = signal.signal(signum, _handler)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            # None means the handler was installed outside Python
            restored = handler if handler is not None else signal.SIG_DFL
            signal.signal(signum, restored)  # type: ignore[arg-type]


def main(
    argv: Sequence[str] | None = None,
    *,
    stdout: TextIO | None = None,
    prompter: Prompter | None = None,
    environ: Mapping[str, str] | None = None,
    cwd: str | Path | None = None,
) -> int:
    stream = stdout if stdout is not None else sys.stdout
    logger = StructuredLogger(stream=stream)
    parser = build_parser()
    options: Options | None = None
    try:
        with trap_signals():
            args = parser.parse_intermixed_args(argv)
            if args.help:
                parser.print_help(stream)
                return 0
            if args.version:
                print(f"npm-deps version: v{__version__}", file=stream)
                print(f"Using Python version: {sys.version.split()[0]}", file=stream)
                return 0

            action = select_action(args.actions)
            root = cwd if cwd is not None else os.getcwd()
            options = build_options(args, cwd=root, environ=environ)
            logger.verbose = options.verbose
            runner = ActionRunner(
                options=options,
                logger=logger,
                prompter=prompter if prompter is not None else ConsolePrompter(stream=stream),
            )
            return runner.run(action)
    except NpmDepsError as exc:
        return report_error(exc, logger)
    except Exception as exc:
        unhandled = NpmDepsError(
            f"Unexpected error: {exc}",
            context={"type": type(exc).__name__},
        )
        return report_error(unhandled, logger)
    finally:
        if options is not None and options.log_file is not None:
            logger.to_json_lines(options.log_file)


def report_error(error: NpmDepsError, logger: StructuredLogger) -> int:
    """Print *error* and return its exit status; the single terminal error path."""
    if isinstance(error, ReconciliationAborted):
        logger.debug("abort", str(error))
        return error.exit_code
    logger.error("error", str(error), extra=error.to_dict())
    if error.show_help and logger.stream is not None:
        print("Check -h for correct parameters.", file=logger.stream)
    return error.exit_code
