"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any engine- or host-specific types.
"""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Hashable, Optional

if TYPE_CHECKING:
    from core.buffer import EventBuffer


class RuleKind(str, enum.Enum):
    CONTENT = "content"
    STYLE = "style"
    NETWORK = "network"


class EventCategory(str, enum.Enum):
    REQUEST = "request"
    ELEMENT = "element"
    COOKIE = "cookie"


@dataclass(frozen=True)
class LiveSession:
    """Session as reported by the host (a browser tab)."""

    id: int
    title: str = ""
    url: Optional[str] = None


@dataclass(frozen=True)
class RuleSnapshot:
    """Engine-independent copy of the fields of a matched rule."""

    filter_id: int
    rule_text: str
    is_modifying_cookie_rule: Optional[bool] = None

    kind: ClassVar[RuleKind]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class ContentRuleSnapshot(RuleSnapshot):
    kind = RuleKind.CONTENT


@dataclass(frozen=True)
class StyleRuleSnapshot(RuleSnapshot):
    kind = RuleKind.STYLE


@dataclass(frozen=True)
class NetworkRuleSnapshot(RuleSnapshot):
    kind = RuleKind.NETWORK

    is_exception_rule: bool = False
    is_content_security_policy_rule: bool = False
    csp_directive: Optional[str] = None
    is_cookie_rule: bool = False


@dataclass
class FilteringEvent:
    """A single logged filtering decision.

    Records are appended once and then only changed by the enrichment
    operations of ``FilteringLog``.
    """

    category: EventCategory
    event_id: Optional[Hashable] = None
    request_url: Optional[str] = None
    request_domain: Optional[str] = None
    frame_url: Optional[str] = None
    frame_domain: Optional[str] = None
    request_type: Optional[str] = None
    is_third_party: bool = False
    applied_rule: Optional[RuleSnapshot] = None
    is_replace: bool = False
    replace_rules: Optional[list[RuleSnapshot]] = None
    cookie_name: Optional[str] = None
    cookie_value: Optional[str] = None
    applied_actions: Optional[int] = None
    element_description: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view, omitting unset optional fields."""

        data: dict[str, Any] = {
            "category": self.category.value,
            "event_id": self.event_id,
            "request_type": self.request_type,
            "is_third_party": self.is_third_party,
        }
        optional = {
            "request_url": self.request_url,
            "request_domain": self.request_domain,
            "frame_url": self.frame_url,
            "frame_domain": self.frame_domain,
            "cookie_name": self.cookie_name,
            "cookie_value": self.cookie_value,
            "applied_actions": self.applied_actions,
            "element_description": self.element_description,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.applied_rule is not None:
            data["applied_rule"] = self.applied_rule.to_dict()
        if self.is_replace:
            data["is_replace"] = True
            data["replace_rules"] = [rule.to_dict() for rule in self.replace_rules or []]
        return data


@dataclass
class Session:
    """Registry entry for one session plus its (lazily created) event buffer."""

    id: int
    title: str = ""
    is_special_session: bool = False
    is_host_tab_special: bool = False
    buffer: Optional["EventBuffer"] = field(default=None, repr=False, compare=False)

    def events(self) -> list[FilteringEvent]:
        """Return a copy of the buffered events (empty when no buffer exists)."""

        if self.buffer is None:
            return []
        return self.buffer.records()


@dataclass
class LogDiagnostics:
    """Counters for calls the log silently dropped."""

    gated_drops: int = 0
    unknown_session_drops: int = 0
    enrichment_misses: int = 0
