"""Tests for version comparison helpers."""

from __future__ import annotations

from chart_fetcher.utils.version_compare import latest_version, parse_version


def test_parse_version_strips_leading_v() -> None:
    assert str(parse_version("v1.2.3")) == "1.2.3"
    assert parse_version("not-a-version") is None


def test_latest_version_skips_unparseable() -> None:
    assert latest_version(["1.2.3", "nightly", "v2.0.0", "1.10.0"]) == "v2.0.0"
    assert latest_version(["nightly"]) is None
    assert latest_version([]) is None
