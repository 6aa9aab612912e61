"""Domain helpers for urls seen by the filtering log."""

from __future__ import annotations

import ipaddress
from typing import Optional
from urllib.parse import urlsplit


def domain_of(url: Optional[str]) -> Optional[str]:
    """Return the lowercased host of ``url`` without a leading ``www.``."""

    if not url:
        return None
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    if host.startswith("www."):
        host = host[4:]
    return host


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def site_of(domain: str) -> str:
    """Collapse a domain to its last two labels (IP literals stay as-is)."""

    if _is_ip(domain):
        return domain
    labels = domain.rstrip(".").split(".")
    return ".".join(labels[-2:])


def is_third_party(request_url: Optional[str], frame_url: Optional[str]) -> bool:
    """Return True when the request and its frame belong to different sites.

    Requests whose domain cannot be determined are treated as first-party.
    """

    request_domain = domain_of(request_url)
    frame_domain = domain_of(frame_url)
    if not request_domain or not frame_domain:
        return False
    return site_of(request_domain) != site_of(frame_domain)
