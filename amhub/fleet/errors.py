"""
Fleet Error Taxonomy
====================

Every failure of a poll cycle maps onto one of these; the poller turns
them into a link-health state instead of letting them escape.
"""


class UpstreamError(Exception):
    """Base class for failures talking to the fleet-management API."""


class StructureError(UpstreamError):
    """Raised when the upstream body does not have the expected shape."""


class AuthError(UpstreamError):
    """Raised when the upstream rejects the configured credentials."""


class TransportError(UpstreamError):
    """Raised on network errors, timeouts and non-auth HTTP/API failures."""


class AlertError(UpstreamError):
    """Raised when the alert workflow trigger is rejected."""


class ValidationSkip(Exception):
    """Raised for a single unusable topology entry; the entry is dropped."""
