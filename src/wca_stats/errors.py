"""Exception hierarchy for the WCA stats tooling.

Each stage raises a specific error type so the CLI can report it cleanly.
Read failures from the filesystem are left as ``OSError``.
"""

from __future__ import annotations


class WcaStatsError(Exception):
    """Base exception for all wca-stats failures."""


class ConfigError(WcaStatsError):
    """Raised for an invalid configuration file or value."""


class FormatError(WcaStatsError):
    """Raised when a results export header or row cannot be parsed."""


class SerializationError(WcaStatsError):
    """Raised when the ranking artifact cannot be written."""


class ProvisioningError(WcaStatsError):
    """Raised when a database provisioning step fails."""
