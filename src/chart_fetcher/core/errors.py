"""Error taxonomy for chart resolution.

Every error carries the reference it concerns (chart name, URL, OCI
reference or secret identity) and the stage that failed, so an operator
can tell "repository unknown" from "secret missing" from "network
unreachable".
"""

from __future__ import annotations

STAGE_PARSE = "parse"
STAGE_METADATA = "metadata lookup"
STAGE_CREDENTIALS = "credential resolution"
STAGE_TRANSFER = "transfer"
STAGE_CACHE = "cache"


class ChartFetchError(Exception):
    """Base class for all chart resolution failures."""

    default_stage = ""

    def __init__(self, message: str, *, reference: str = "", stage: str | None = None):
        super().__init__(message)
        self.message = message
        self.reference = reference
        self.stage = stage if stage is not None else self.default_stage

    def __str__(self) -> str:
        text = self.message
        if self.stage:
            text = f"{self.stage}: {text}"
        if self.reference:
            text = f"{text} ({self.reference})"
        return text


class ParseError(ChartFetchError):
    """Malformed reference, URL, or ambiguous source."""

    default_stage = STAGE_PARSE


class NotFoundError(ChartFetchError):
    """Repository, chart, or secret does not exist."""

    default_stage = STAGE_METADATA


class ConfigError(ChartFetchError):
    """Credential material is present but incomplete."""

    default_stage = STAGE_CREDENTIALS


class UpstreamError(ChartFetchError):
    """The metadata or secret store failed for a reason other than not-found."""

    default_stage = STAGE_METADATA


class NetworkError(ChartFetchError):
    """Transport failure or a non-2xx response."""

    default_stage = STAGE_TRANSFER


class CacheIOError(ChartFetchError):
    """Local disk failure while creating the cache or writing an archive."""

    default_stage = STAGE_CACHE


class RegistryError(ChartFetchError):
    """OCI registry protocol failure."""

    default_stage = STAGE_TRANSFER
