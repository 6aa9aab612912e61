from __future__ import annotations

import pytest

from core.events import (
    build_cookie_event,
    build_element_event,
    build_request_event,
    describe_element,
    snapshot_rule,
)
from core.models import EventCategory, NetworkRuleSnapshot, RuleKind
from core.rules import (
    ContentFilterRule,
    CssFilterRule,
    StealthAction,
    UrlFilterRule,
    build_rules,
)


def test_snapshot_rule_variants() -> None:
    content = snapshot_rule(ContentFilterRule(filter_id=1, rule_text="example.org$$script"))
    style = snapshot_rule(CssFilterRule(filter_id=2, rule_text="##.ad"))
    network = snapshot_rule(
        UrlFilterRule(
            filter_id=3,
            rule_text="@@||example.org^$csp=script-src 'none'",
            whitelist=True,
            csp_directive="script-src 'none'",
            cookie_option="uid",
        )
    )

    assert content.kind == RuleKind.CONTENT
    assert style.kind == RuleKind.STYLE
    assert isinstance(network, NetworkRuleSnapshot)
    assert network.is_exception_rule
    assert network.is_content_security_policy_rule
    assert network.csp_directive == "script-src 'none'"
    assert network.is_cookie_rule


def test_snapshot_rule_rejects_unknown_rule_objects() -> None:
    with pytest.raises(TypeError):
        snapshot_rule(object())


def test_request_event_without_rule_has_no_snapshot() -> None:
    event = build_request_event(
        "https://ads.tracker.net/a.js",
        "https://www.example.com/",
        "SCRIPT",
        None,
        "42",
    )

    assert event.category == EventCategory.REQUEST
    assert event.event_id == "42"
    assert event.request_domain == "ads.tracker.net"
    assert event.frame_domain == "example.com"
    assert event.is_third_party
    assert event.applied_rule is None


def test_request_event_copies_rule_fields() -> None:
    rule = UrlFilterRule(filter_id=2, rule_text="||ads.tracker.net^")
    event = build_request_event("https://ads.tracker.net/a.js", "https://example.com/", "SCRIPT", rule, 1)

    assert event.applied_rule.filter_id == 2
    assert event.applied_rule.rule_text == "||ads.tracker.net^"
    assert event.applied_rule is not rule


def test_element_event_describes_mapping_elements() -> None:
    rule = CssFilterRule(filter_id=2, rule_text="example.com##.banner")
    event = build_element_event(
        {"tag": "DIV", "attributes": {"class": "banner", "title": 'say "hi"'}},
        "https://example.com/",
        "CSS",
        rule,
    )

    assert event.category == EventCategory.ELEMENT
    assert event.element_description == '<div class="banner" title="say &quot;hi&quot;">'
    assert event.frame_domain == "example.com"
    assert event.applied_rule.kind == RuleKind.STYLE


def test_describe_element_passes_strings_through() -> None:
    assert describe_element("<script>x()</script>") == "<script>x()</script>"


def test_cookie_event_marks_modifying_rule_and_copies_actions() -> None:
    rule = UrlFilterRule(
        filter_id=17,
        rule_text="||tracker.example^$cookie=uid",
        cookie_option="uid",
        stealth_actions=int(StealthAction.THIRD_PARTY_COOKIES),
    )
    event = build_cookie_event("uid", "abc", "tracker.example", "COOKIE", rule, True, True)

    assert event.category == EventCategory.COOKIE
    assert event.frame_domain == "tracker.example"
    assert event.is_third_party
    assert event.cookie_name == "uid"
    assert event.applied_rule.is_modifying_cookie_rule is True
    assert event.applied_rule.is_cookie_rule
    assert event.applied_actions == StealthAction.THIRD_PARTY_COOKIES


def test_cookie_event_without_rule() -> None:
    event = build_cookie_event("uid", "abc", "tracker.example", "COOKIE", None, True, False)

    assert event.applied_rule is None
    assert event.applied_actions is None


def test_build_rules_skips_disabled_and_parses_actions() -> None:
    rules = build_rules(
        [
            {"name": "off", "type": "css", "text": "##.x", "enabled": False},
            {"name": "strip", "type": "content", "filter_id": 4, "text": "example.org$$div"},
            {
                "name": "stealth",
                "type": "url",
                "filter_id": 5,
                "text": "||t.example^",
                "stealth_actions": ["hide_referrer", "send_do_not_track"],
            },
        ]
    )

    assert set(rules) == {"strip", "stealth"}
    assert isinstance(rules["strip"], ContentFilterRule)
    assert rules["stealth"].stealth_actions == StealthAction.HIDE_REFERRER | StealthAction.SEND_DO_NOT_TRACK


def test_build_rules_rejects_unknown_types() -> None:
    with pytest.raises(ValueError):
        build_rules([{"name": "bad", "type": "dns", "text": "x"}])
