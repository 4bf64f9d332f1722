"""
KMS provider names.

The set of providers is closed: every resolver in this package handles exactly
these five members and rejects anything else.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from .errors import UnsupportedProviderError


class ProviderName(Enum):
    """KMS provider understood by the MongoDB encryption engine."""

    AWS = "aws"
    AZURE = "azure"
    GCP = "gcp"
    KMIP = "kmip"
    LOCAL = "local"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(
        cls,
        value: Union[ProviderName, str],
        context: Optional[str] = None,
    ) -> ProviderName:
        """
        Parse a provider name.

        Args:
            value: ProviderName member or its exact string value
            context: Optional description of the caller, added to the error

        Returns:
            Matching ProviderName

        Raises:
            UnsupportedProviderError: If value names no known provider
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnsupportedProviderError(value, context)
