"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from .app_info import APP_DISPLAY_NAME, APP_NAME, app_version
from .config import AppConfig, load_config
from .errors import ExitCode, RosellaError, user_facing_error
from .logging import LOG_LEVELS, configure_logging, default_log_path, normalize_level

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")

AppRunner = Callable[[Path, AppConfig], int]


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized not in LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Browse, filter and act on the local branches of a git repository.",
    )
    parser.add_argument("--repo", type=Path, default=None, help="Repository path (default: cwd)")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.toml")
    parser.add_argument("--log-level", type=_log_level_type, default=None)
    parser.add_argument("--log-file", type=Path, default=None)
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {app_version()}")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def resolve_repo_path(value: Path | None) -> Path:
    repo = (value or Path.cwd()).expanduser()
    if not repo.is_dir():
        raise RosellaError(
            f"Repository path does not exist: {repo}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Pass --repo with an existing directory.",
        )
    return repo.resolve()


def launch_tui(repo: Path, config: AppConfig) -> int:
    if not (sys.stdin.isatty() and sys.stdout.isatty()):
        raise RosellaError(
            "An interactive terminal is required",
            code=ExitCode.TERMINAL_ERROR,
            hint="Run rosella directly in a terminal instead of through a pipe.",
        )
    try:
        from rosella.terminal.controller import TerminalController
    except ImportError as exc:
        raise RosellaError(
            "Terminal control is not available on this platform",
            code=ExitCode.UNSUPPORTED_PLATFORM,
            hint="Use a POSIX terminal (Linux, macOS or WSL).",
        ) from exc

    from rosella.app import BranchApp
    from rosella.git.repository import GitRepository

    repository = GitRepository(
        repo,
        timeout_seconds=config.git_timeout_seconds,
        fetch_prune=config.fetch_prune,
    )
    terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
    app = BranchApp(
        repository,
        terminal,
        input_fd=sys.stdin.fileno(),
        config=config,
        title=f"{APP_DISPLAY_NAME} - {repo.name}",
    )
    return asyncio.run(app.run())


def _report(logger: py_logging.Logger, exc: RosellaError) -> int:
    logger.error(
        "Handled RosellaError (code=%s): %s",
        int(exc.code),
        exc.message,
        exc_info=logger.isEnabledFor(py_logging.DEBUG),
    )
    print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
    return int(exc.code)


def main(
    argv: Sequence[str] | None = None,
    *,
    app_runner: AppRunner | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
            return int(ExitCode.INVALID_ARGS)
        return int(ExitCode.SUCCESS)

    try:
        config = load_config(namespace.config, strict=namespace.config is not None)
    except RosellaError as exc:
        return _report(logger, exc)
    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    level = namespace.log_level or config.log_level
    logger = configure_logging(level=level, log_file=log_path, console=False)

    try:
        repo = resolve_repo_path(namespace.repo)
        runner = app_runner or launch_tui
        logger.debug("Starting branch controller repo=%s", repo)
        result = runner(repo, config)
        return int(result)
    except RosellaError as exc:
        return _report(logger, exc)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return int(ExitCode.SUCCESS)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        hint = f"Inspect logs: {log_path}"
        print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
