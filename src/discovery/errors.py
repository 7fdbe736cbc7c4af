# src/discovery/errors.py - v1
"""Exception hierarchy for the discovery pipelines."""

from __future__ import annotations


class DiscoveryError(Exception):
    """Base class for discovery errors."""


class OracleFailure(DiscoveryError):
    """An oracle call failed: transport error, timeout or schema violation.

    Never escapes StructuredOracle; callers see ``None`` instead.
    """


class RunInitializationError(DiscoveryError):
    """The repository list or the run record could not be set up."""


class DiscoveryCancelled(DiscoveryError):
    """The caller asked the run to stop between oracle calls."""

    def __init__(self, message: str = "cancelled") -> None:
        super().__init__(message)


class RunFinalizedError(DiscoveryError):
    """A run that already reached a terminal status was finalized again."""
