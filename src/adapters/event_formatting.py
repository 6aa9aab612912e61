"""Shared event formatting helpers.

Keeping formatting here prevents drift between observers and keeps log lines
consistent regardless of where they are printed.
"""

from __future__ import annotations

from typing import Optional

from rich.text import Text

from core.bus import NotificationKind
from core.models import EventCategory, FilteringEvent, RuleKind, RuleSnapshot, Session
from core.rules import StealthAction

BLOCKED_STYLE = "bold red"
ALLOWED_STYLE = "green"
MODIFIED_STYLE = "yellow"


def format_actions(actions: Optional[int]) -> str:
    """Return the names of the stealth actions in ``actions`` (comma separated)."""

    if not actions:
        return ""
    names = [action.name.lower() for action in StealthAction if action & actions]
    return ", ".join(names)


def format_session(session: Session) -> str:
    """Return a human-friendly session label."""

    title = session.title or "untitled"
    if session.is_special_session:
        return f"{title} (background)"
    return f"{title} [#{session.id}]"


def _outcome(event: FilteringEvent) -> tuple[str, str]:
    if event.is_replace:
        return "modified", MODIFIED_STYLE
    rule = event.applied_rule
    if rule is None:
        return "allowed", ALLOWED_STYLE
    if rule.kind == RuleKind.NETWORK and getattr(rule, "is_exception_rule", False):
        return "allowed", ALLOWED_STYLE
    if rule.is_modifying_cookie_rule or getattr(rule, "is_content_security_policy_rule", False):
        return "modified", MODIFIED_STYLE
    if rule.kind == RuleKind.STYLE:
        return "hidden", BLOCKED_STYLE
    return "blocked", BLOCKED_STYLE


def _subject(event: FilteringEvent) -> str:
    if event.category == EventCategory.ELEMENT:
        return event.element_description or ""
    if event.category == EventCategory.COOKIE:
        return f"cookie {event.cookie_name}={event.cookie_value} @ {event.frame_domain}"
    return event.request_url or ""


def _rule_texts(event: FilteringEvent) -> list[str]:
    rules: list[RuleSnapshot] = []
    if event.is_replace:
        rules.extend(event.replace_rules or [])
    elif event.applied_rule is not None:
        rules.append(event.applied_rule)
    return [rule.rule_text for rule in rules]


def format_event(event: FilteringEvent) -> Text:
    """Render one event as a single styled line."""

    outcome, style = _outcome(event)
    text = Text()
    text.append(f"{outcome:<8}", style=style)
    text.append(f" {event.request_type or '-':<12} ")
    text.append(_subject(event))
    if event.is_third_party:
        text.append(" (3p)", style="dim")
    rule_texts = _rule_texts(event)
    if rule_texts:
        text.append("  ")
        text.append(" | ".join(rule_texts), style="cyan")
    actions = format_actions(event.applied_actions)
    if actions:
        text.append(f"  stealth: {actions}", style="magenta")
    return text


def format_notification(kind: NotificationKind, session: Session, event: Optional[FilteringEvent] = None) -> Text:
    """Render a bus notification for console output."""

    text = Text.assemble((f"[{kind.value}]", "bold"), " ", format_session(session))
    if event is not None:
        text.append(" ")
        text.append_text(format_event(event))
    return text
