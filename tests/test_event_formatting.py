from __future__ import annotations

from core.bus import NotificationKind
from core.events import build_cookie_event, build_element_event, build_request_event
from core.models import Session
from core.rules import CssFilterRule, StealthAction, UrlFilterRule

from adapters.event_formatting import (
    format_actions,
    format_event,
    format_notification,
    format_session,
)

FRAME = "https://www.example.com/"


def test_format_actions_lists_flag_names() -> None:
    actions = int(StealthAction.HIDE_REFERRER | StealthAction.SEND_DO_NOT_TRACK)

    assert format_actions(actions) == "hide_referrer, send_do_not_track"
    assert format_actions(None) == ""


def test_format_session_labels_background() -> None:
    assert format_session(Session(id=-1, title="Background", is_special_session=True)) == "Background (background)"
    assert format_session(Session(id=3, title="")) == "untitled [#3]"


def test_format_event_outcomes() -> None:
    allowed = build_request_event("https://a.example/x.js", FRAME, "SCRIPT", None, 1)
    blocked = build_request_event(
        "https://ads.example/x.js", FRAME, "SCRIPT", UrlFilterRule(filter_id=2, rule_text="||ads.example^"), 2
    )
    exception = build_request_event(
        "https://cdn.example/x.js",
        FRAME,
        "SCRIPT",
        UrlFilterRule(filter_id=3, rule_text="@@||cdn.example^", whitelist=True),
        3,
    )
    hidden = build_element_event("<div class=\"ad\">", FRAME, "CSS", CssFilterRule(filter_id=2, rule_text="##.ad"))

    assert format_event(allowed).plain.startswith("allowed")
    assert format_event(blocked).plain.startswith("blocked")
    assert "||ads.example^" in format_event(blocked).plain
    assert "(3p)" in format_event(blocked).plain
    assert format_event(exception).plain.startswith("allowed")
    assert format_event(hidden).plain.startswith("hidden")


def test_format_event_cookie_and_replace() -> None:
    cookie_rule = UrlFilterRule(
        filter_id=17,
        rule_text="||tracker.example^$cookie=uid",
        cookie_option="uid",
        stealth_actions=int(StealthAction.THIRD_PARTY_COOKIES),
    )
    cookie = build_cookie_event("uid", "abc", "tracker.example", "COOKIE", cookie_rule, True, True)
    replaced = build_request_event("https://www.example.com/feed", FRAME, "XMLHTTPREQUEST", None, 4)
    replaced.is_replace = True
    replaced.replace_rules = []

    cookie_line = format_event(cookie).plain
    assert cookie_line.startswith("modified")
    assert "cookie uid=abc @ tracker.example" in cookie_line
    assert "stealth: third_party_cookies" in cookie_line
    assert format_event(replaced).plain.startswith("modified")


def test_format_notification_includes_kind_and_session() -> None:
    session = Session(id=1, title="News")
    event = build_request_event("https://a.example/", FRAME, "OTHER", None, 1)

    assert format_notification(NotificationKind.SESSION_ADDED, session).plain == "[session-added] News [#1]"
    assert "allowed" in format_notification(NotificationKind.EVENT_ADDED, session, event).plain
