"""Scenario-to-core mapping adapter.

A scenario is a JSON document describing the host's open tabs, the engine
rules in play and an ordered list of steps (tab lifecycle changes, filtering
decisions and late enrichment). Replaying one drives a FilteringLog exactly as
a host and filtering engine would, which keeps file parsing out of the core.

Example::

    {
      "sessions": [{"id": 1, "title": "News", "url": "https://news.example/"}],
      "rules": [{"name": "ads", "type": "url", "filter_id": 2, "text": "||ads.example^"}],
      "steps": [
        {"op": "open_observer"},
        {"op": "request", "session": 1, "url": "https://ads.example/a.js",
         "frame_url": "https://news.example/", "type": "SCRIPT", "event_id": "1"},
        {"op": "bind_rule", "session": 1, "rule": "ads", "event_id": "1"}
      ]
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from adapters.memory_sessions import InMemorySessionProvider
from core.filtering_log import FilteringLog
from core.models import LiveSession
from core.rules import FilterRule, build_rules, parse_actions

LOGGER = logging.getLogger(__name__)

STEP_OPS = {
    "open_observer",
    "close_observer",
    "open_session",
    "update_session",
    "close_session",
    "reconcile",
    "request",
    "element",
    "cookie",
    "bind_rule",
    "bind_replace_rules",
    "bind_actions",
    "reset",
}


@dataclass
class Scenario:
    """Parsed scenario ready to be replayed."""

    sessions: list[LiveSession]
    rules: dict[str, FilterRule]
    steps: list[dict[str, Any]] = field(default_factory=list)


def parse_scenario(raw: dict) -> Scenario:
    """Validate a scenario document and build its sessions and rules."""

    sessions = [
        LiveSession(id=int(entry["id"]), title=entry.get("title", ""), url=entry.get("url"))
        for entry in raw.get("sessions", [])
    ]
    rules = build_rules(raw.get("rules", []))
    steps = list(raw.get("steps", []))
    for index, step in enumerate(steps):
        op = step.get("op")
        if op not in STEP_OPS:
            raise ValueError(f"Unsupported scenario op at step {index}: {op}")
    return Scenario(sessions=sessions, rules=rules, steps=steps)


def load_scenario(path: str) -> Scenario:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path, "r", encoding="utf-8") as handle:
        return parse_scenario(json.load(handle))


class ScenarioRunner:
    """Replay scenario steps against a log and its in-memory host."""

    def __init__(self, scenario: Scenario, log: FilteringLog, provider: InMemorySessionProvider) -> None:
        self._scenario = scenario
        self._log = log
        self._provider = provider

    def _rule(self, name: Optional[str]) -> Optional[FilterRule]:
        if name is None:
            return None
        try:
            return self._scenario.rules[name]
        except KeyError:
            raise ValueError(f"Scenario references unknown rule: {name}") from None

    def run(self) -> int:
        """Apply every step in order and return how many were applied."""

        for step in self._scenario.steps:
            self.apply(step)
        LOGGER.info("Scenario replay complete: steps=%s", len(self._scenario.steps))
        return len(self._scenario.steps)

    def apply(self, step: dict[str, Any]) -> None:
        op = step["op"]
        log = self._log
        session = step.get("session")

        if op == "open_observer":
            log.open_observer()
        elif op == "close_observer":
            log.close_observer()
        elif op == "open_session":
            self._provider.open_session(int(step["id"]), step.get("title", ""), step.get("url"))
        elif op == "update_session":
            self._provider.update_session(int(step["id"]), step.get("title", ""), step.get("url"))
        elif op == "close_session":
            self._provider.close_session(int(step["id"]))
        elif op == "reconcile":
            log.reconcile_sessions()
        elif op == "request":
            log.record_request_event(
                session,
                step["url"],
                step.get("frame_url", step["url"]),
                step.get("type", "OTHER"),
                self._rule(step.get("rule")),
                step.get("event_id"),
            )
        elif op == "element":
            log.record_element_event(
                session,
                step["element"],
                step["frame_url"],
                step.get("type", "CSS"),
                self._rule(step.get("rule")),
            )
        elif op == "cookie":
            log.record_cookie_event(
                session,
                step["name"],
                step.get("value", ""),
                step["domain"],
                step.get("type", "COOKIE"),
                self._rule(step.get("rule")),
                bool(step.get("modifying", False)),
                bool(step.get("third_party", False)),
            )
        elif op == "bind_rule":
            log.bind_rule(session, self._rule(step["rule"]), step["event_id"])
        elif op == "bind_replace_rules":
            rules = [self._rule(name) for name in step["rules"]]
            log.bind_replace_rules(session, rules, step["event_id"])
        elif op == "bind_actions":
            log.bind_applied_actions(session, parse_actions(step["actions"]), step["event_id"])
        elif op == "reset":
            log.reset_session_events(session)
