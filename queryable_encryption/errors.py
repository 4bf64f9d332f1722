"""
Exception classes for queryable encryption provisioning.

Every failure the package reports is a subclass of QueryableEncryptionError,
so callers can catch the whole family or a single case.
"""

from __future__ import annotations

from typing import Optional


class QueryableEncryptionError(Exception):
    """Base exception for all queryable encryption operations."""

    pass


class UnsupportedProviderError(QueryableEncryptionError):
    """KMS provider name is not one of aws, azure, gcp, kmip or local."""

    def __init__(self, provider_name: object, context: Optional[str] = None) -> None:
        self.provider_name = provider_name
        message = f'Unrecognized value for KMS provider name "{provider_name}"'
        if context:
            message += f" encountered while {context}"
        super().__init__(message)


class KeyFileIOError(QueryableEncryptionError):
    """Local master key file could not be created or read."""

    pass


class KeyValidationError(QueryableEncryptionError):
    """Local master key file exists but holds the wrong number of bytes."""

    pass


class ConfigError(QueryableEncryptionError):
    """Configuration error."""

    pass


class SchemaError(QueryableEncryptionError):
    """Encrypted field schema is malformed."""

    pass


class ProvisioningError(QueryableEncryptionError):
    """
    Encrypted collection provisioning failed.

    Raised with the underlying driver exception chained as ``__cause__``.
    ``step`` names the stage that failed (reset, create or insert).
    """

    def __init__(self, message: str, step: str) -> None:
        self.step = step
        super().__init__(message)
