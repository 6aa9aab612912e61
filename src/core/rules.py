"""Filtering rules as handed over by the filtering engine.

The log never keeps these objects. They only live long enough to be copied
into snapshots (see ``core.events.snapshot_rule``).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Optional, Union


class StealthAction(enum.IntFlag):
    """Anti-detection actions that can be applied to a request."""

    HIDE_REFERRER = 1
    HIDE_SEARCH_QUERIES = 2
    BLOCK_CHROME_CLIENT_DATA = 4
    SEND_DO_NOT_TRACK = 8
    STRIP_TRACKING_PARAMETERS = 16
    FIRST_PARTY_COOKIES = 32
    THIRD_PARTY_COOKIES = 64


@dataclass(frozen=True)
class ContentFilterRule:
    """HTML content filtering rule (``$$`` syntax)."""

    filter_id: int
    rule_text: str


@dataclass(frozen=True)
class CssFilterRule:
    """Element hiding or CSS injection rule."""

    filter_id: int
    rule_text: str


@dataclass(frozen=True)
class UrlFilterRule:
    """Network-level rule matched against request urls."""

    filter_id: int
    rule_text: str
    whitelist: bool = False
    csp_directive: Optional[str] = None
    cookie_option: Optional[str] = None
    stealth_actions: int = 0

    def is_csp_rule(self) -> bool:
        return self.csp_directive is not None


FilterRule = Union[ContentFilterRule, CssFilterRule, UrlFilterRule]


def parse_actions(raw: Union[int, Iterable[str], None]) -> int:
    """Turn a bitmask or a list of action names into a StealthAction bitmask."""

    if not raw:
        return 0
    if isinstance(raw, int):
        return raw
    actions = StealthAction(0)
    for name in raw:
        try:
            actions |= StealthAction[name.upper()]
        except KeyError:
            raise ValueError(f"Unsupported stealth action: {name}") from None
    return int(actions)


def build_rules(rules_config: Iterable[dict]) -> dict[str, FilterRule]:
    """Build engine rules from plain dicts, keyed by their configured name.

    Each entry needs ``name``, ``type`` (``content``, ``css`` or ``url``),
    ``filter_id`` and ``text``. Url rules accept ``whitelist``, ``csp``,
    ``cookie`` and ``stealth_actions`` (names or a raw bitmask).
    Disabled entries are skipped.
    """

    compiled: dict[str, FilterRule] = {}
    for rule in rules_config:
        if not rule.get("enabled", True):
            continue
        name = rule["name"]
        rule_type = rule.get("type", "url")
        filter_id = int(rule.get("filter_id", 0))
        text = rule["text"]
        if rule_type == "content":
            compiled[name] = ContentFilterRule(filter_id=filter_id, rule_text=text)
        elif rule_type == "css":
            compiled[name] = CssFilterRule(filter_id=filter_id, rule_text=text)
        elif rule_type == "url":
            compiled[name] = UrlFilterRule(
                filter_id=filter_id,
                rule_text=text,
                whitelist=bool(rule.get("whitelist", False)),
                csp_directive=rule.get("csp"),
                cookie_option=rule.get("cookie"),
                stealth_actions=parse_actions(rule.get("stealth_actions")),
            )
        else:
            raise ValueError(f"Unsupported rule type for {name}: {rule_type}")
    return compiled
