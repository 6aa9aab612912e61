"""Application entry point for filterlog."""

from __future__ import annotations

import argparse
import logging
import os
from contextlib import nullcontext
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from rich.console import Console

import settings
from adapters.console_observer import ConsoleObserver
from adapters.event_formatting import format_event, format_session
from adapters.memory_sessions import InMemorySessionProvider
from adapters.scenario import ScenarioRunner, load_scenario
from core.filtering_log import FilteringLog

NAME = "FILTERLOG"
FONT = "tarty-1"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _file_handler(file_cfg: dict) -> RotatingFileHandler:
    path = file_cfg.get("path", "logs/filterlog.log")
    if not os.path.isabs(path):
        path = os.path.join(settings.PROJECT_ROOT, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def _configure_logging() -> None:
    """Install console and rotating-file handlers from the ``logging`` section.

    ``FILTERLOG_LOG_LEVEL`` (environment or ``.env``) overrides the level, so a
    replay can be switched to DEBUG to see dropped calls and enrichment misses.
    """

    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    level_name = os.getenv("FILTERLOG_LOG_LEVEL") or str(config.get("level", "INFO"))
    level = getattr(logging, level_name.upper(), logging.INFO)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg))

    if not handlers:
        return

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


def _build_log(scenario_path: str) -> tuple[FilteringLog, ScenarioRunner]:
    scenario = load_scenario(scenario_path)
    provider = InMemorySessionProvider(scenario.sessions)
    log = FilteringLog(provider, settings.FILTERING_LOG)
    return log, ScenarioRunner(scenario, log, provider)


def _print_summary(console: Console, log: FilteringLog) -> None:
    for session in log.sessions():
        events = session.events()
        console.print(f"{format_session(session)}: {len(events)} event(s)", style="bold")
        for event in events:
            console.print(format_event(event))
    diagnostics = log.diagnostics
    console.print(
        f"dropped: gated={diagnostics.gated_drops} "
        f"unknown_session={diagnostics.unknown_session_drops} "
        f"enrichment_misses={diagnostics.enrichment_misses} "
        f"failed_deliveries={log.failed_deliveries}",
        style="dim",
    )


def _replay(scenario_path: str, watch: bool) -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)
    console = Console()

    log, runner = _build_log(scenario_path)
    log.start()
    # Holding an observer slot keeps events around for the summary.
    watcher = ConsoleObserver(log, console) if watch else nullcontext()
    try:
        with watcher:
            steps = runner.run()
            logger.info("Replayed %s steps from %s", steps, scenario_path)
            _print_summary(console, log)
    finally:
        log.stop()


def _list_sessions(scenario_path: str) -> None:
    _configure_logging()
    console = Console()
    log, _ = _build_log(scenario_path)

    def _print_sessions(sessions) -> None:
        for session in sessions:
            marker = " (host page)" if session.is_host_tab_special else ""
            console.print(f"{format_session(session)}{marker}")

    # One-shot listing: a single reconciliation, no host notifications needed.
    try:
        log.reconcile_sessions(_print_sessions)
    finally:
        log.stop()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="filterlog")
    subparsers = parser.add_subparsers(dest="command")

    replay_parser = subparsers.add_parser("replay", help="Replay a scenario through the filtering log")
    replay_parser.add_argument("scenario", help="Path to a scenario JSON file")
    replay_parser.add_argument(
        "--no-watch",
        action="store_true",
        help="Do not attach the console observer (scenario steps control recording)",
    )

    sessions_parser = subparsers.add_parser("sessions", help="Reconcile and list the scenario's sessions")
    sessions_parser.add_argument("scenario", help="Path to a scenario JSON file")

    args = parser.parse_args(argv)
    if args.command == "sessions":
        _list_sessions(args.scenario)
        return
    if args.command == "replay":
        _replay(args.scenario, watch=not args.no_watch)
        return
    parser.print_help()


if __name__ == "__main__":
    main()
