"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CAPACITY = 1000
BACKGROUND_SESSION_ID = -1


@dataclass(frozen=True)
class BackgroundSessionConfig:
    """Settings for the permanent session that holds non-tab traffic."""

    enabled: bool = True
    session_id: int = BACKGROUND_SESSION_ID
    title: str = "Background"


@dataclass(frozen=True)
class FilteringLogConfig:
    """Retention and registry settings for the filtering log."""

    capacity: int = DEFAULT_CAPACITY
    host_url_prefix: str = ""
    background: BackgroundSessionConfig = BackgroundSessionConfig()

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"Buffer capacity must be positive: {self.capacity}")
