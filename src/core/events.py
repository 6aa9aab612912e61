"""Filtering event construction (core domain).

Builders are pure: they copy what the log needs out of urls and engine rules
and never keep a reference to the rule objects themselves.
"""

from __future__ import annotations

import dataclasses
from typing import Hashable, Mapping, Optional, Union

from core.models import (
    ContentRuleSnapshot,
    EventCategory,
    FilteringEvent,
    NetworkRuleSnapshot,
    RuleSnapshot,
    StyleRuleSnapshot,
)
from core.rules import ContentFilterRule, CssFilterRule, FilterRule, UrlFilterRule
from core.urls import domain_of, is_third_party

Element = Union[str, Mapping]


def snapshot_rule(rule: FilterRule) -> RuleSnapshot:
    """Copy the displayable fields of ``rule`` into a snapshot."""

    if isinstance(rule, ContentFilterRule):
        return ContentRuleSnapshot(filter_id=rule.filter_id, rule_text=rule.rule_text)
    if isinstance(rule, CssFilterRule):
        return StyleRuleSnapshot(filter_id=rule.filter_id, rule_text=rule.rule_text)
    if isinstance(rule, UrlFilterRule):
        return NetworkRuleSnapshot(
            filter_id=rule.filter_id,
            rule_text=rule.rule_text,
            is_exception_rule=rule.whitelist,
            is_content_security_policy_rule=rule.is_csp_rule(),
            csp_directive=rule.csp_directive,
            is_cookie_rule=bool(rule.cookie_option),
        )
    raise TypeError(f"Unsupported rule type: {type(rule).__name__}")


def describe_element(element: Element) -> str:
    """Render an element as its opening tag.

    Strings are passed through. Mappings use ``tag`` and ``attributes``.
    """

    if isinstance(element, str):
        return element
    tag = str(element.get("tag", "")).lower()
    attributes = element.get("attributes") or {}
    parts = [tag]
    for name, value in attributes.items():
        escaped = str(value).replace('"', "&quot;")
        parts.append(f'{name}="{escaped}"')
    return f"<{' '.join(parts)}>"


def build_request_event(
    request_url: str,
    frame_url: str,
    request_type: str,
    rule: Optional[FilterRule],
    event_id: Optional[Hashable],
) -> FilteringEvent:
    """Build the record for a network request decision."""

    event = FilteringEvent(
        category=EventCategory.REQUEST,
        event_id=event_id,
        request_url=request_url,
        request_domain=domain_of(request_url),
        frame_url=frame_url,
        frame_domain=domain_of(frame_url),
        request_type=request_type,
        is_third_party=is_third_party(request_url, frame_url),
    )
    if rule is not None:
        event.applied_rule = snapshot_rule(rule)
    return event


def build_element_event(
    element: Element,
    frame_url: str,
    request_type: str,
    rule: Optional[FilterRule],
) -> FilteringEvent:
    """Build the record for a cosmetic (element) decision."""

    event = FilteringEvent(
        category=EventCategory.ELEMENT,
        element_description=describe_element(element),
        frame_url=frame_url,
        frame_domain=domain_of(frame_url),
        request_type=request_type,
    )
    if rule is not None:
        event.applied_rule = snapshot_rule(rule)
    return event


def build_cookie_event(
    cookie_name: str,
    cookie_value: str,
    cookie_domain: str,
    request_type: str,
    rule: Optional[FilterRule],
    is_modifying: bool,
    third_party: bool,
) -> FilteringEvent:
    """Build the record for a cookie decision.

    The cookie domain stands in for the frame domain. When a rule applies,
    its stealth actions are copied onto the record.
    """

    event = FilteringEvent(
        category=EventCategory.COOKIE,
        frame_domain=cookie_domain,
        request_type=request_type,
        is_third_party=third_party,
        cookie_name=cookie_name,
        cookie_value=cookie_value,
    )
    if rule is not None:
        event.applied_rule = dataclasses.replace(
            snapshot_rule(rule), is_modifying_cookie_rule=is_modifying
        )
        actions = getattr(rule, "stealth_actions", 0)
        if actions:
            event.applied_actions = int(actions)
    return event
