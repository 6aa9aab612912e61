from __future__ import annotations

from core.urls import domain_of, is_third_party, site_of


def test_domain_of_strips_www_and_lowercases() -> None:
    assert domain_of("https://WWW.Example.com/path?q=1") == "example.com"
    assert domain_of("http://sub.example.com:8080/") == "sub.example.com"


def test_domain_of_handles_missing_or_invalid_urls() -> None:
    assert domain_of(None) is None
    assert domain_of("") is None
    assert domain_of("not a url") is None


def test_site_of_keeps_ip_literals() -> None:
    assert site_of("a.b.example.com") == "example.com"
    assert site_of("192.168.0.1") == "192.168.0.1"


def test_is_third_party_compares_sites() -> None:
    assert not is_third_party("https://cdn.example.com/x.js", "https://www.example.com/")
    assert is_third_party("https://ads.tracker.net/a.js", "https://www.example.com/")
    assert is_third_party("http://10.0.0.2/", "http://10.0.0.1/")


def test_is_third_party_unknown_domain_is_first_party() -> None:
    assert not is_third_party("https://ads.example/", None)
    assert not is_third_party("data:text/plain,hi", "https://example.com/")
