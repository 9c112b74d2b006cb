"""Tests for deterministic cache paths."""

from __future__ import annotations

from pathlib import Path

import pytest

from chart_fetcher.core.cache_path import CacheIdentity, CachePathPolicy, file_name_from_url
from chart_fetcher.core.errors import ParseError


@pytest.fixture
def policy(cache_dir: Path) -> CachePathPolicy:
    return CachePathPolicy(cache_dir)


def test_digest_form_takes_priority(policy, cache_dir) -> None:
    identity = CacheIdentity(
        repository="stable", chart="nginx", version="1.2.3",
        digest="abc123", file_name="nginx-1.2.3.tgz", request_name="web",
    )
    assert policy.path_for(identity) == cache_dir / "stable-abc123-nginx-1.2.3.tgz"


def test_request_name_form_without_digest(policy, cache_dir) -> None:
    identity = CacheIdentity(repository="stable", chart="nginx", file_name="nginx-1.2.3.tgz", request_name="web")
    assert policy.path_for(identity) == cache_dir / "web-nginx-1.2.3.tgz"


def test_repository_chart_version_form(policy, cache_dir) -> None:
    identity = CacheIdentity(repository="stable", chart="nginx", version="1.2.3")
    assert policy.path_for(identity) == cache_dir / "stable-nginx-1.2.3.tgz"


def test_path_separators_become_hyphens(policy, cache_dir) -> None:
    identity = CacheIdentity(repository="stable", chart="nginx", version="feature/x")
    path = policy.path_for(identity)
    assert path.parent == cache_dir
    assert path.name == "stable-nginx-feature-x.tgz"


def test_identity_without_fields_is_parse_error(policy) -> None:
    with pytest.raises(ParseError):
        policy.path_for(CacheIdentity(file_name="a.tgz"))


def test_resolved_path_creates_dir_and_reports_cache_state(policy, cache_dir) -> None:
    identity = CacheIdentity(request_name="web", file_name="app-2.0.tgz")
    path, cached = policy.resolved_path(identity)
    assert cache_dir.is_dir()
    assert not cached

    path.write_bytes(b"x")
    assert policy.resolved_path(identity) == (path, True)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://files.example.com/pkg/app-2.0.tgz", "app-2.0.tgz"),
        ("https://files.example.com/pkg/app-2.0.tgz?token=1", "app-2.0.tgz"),
        ("charts/nginx-1.2.3.tgz", "nginx-1.2.3.tgz"),
        ("nginx-1.2.3.tgz", "nginx-1.2.3.tgz"),
        ("", ""),
    ],
)
def test_file_name_from_url(url: str, expected: str) -> None:
    assert file_name_from_url(url) == expected
