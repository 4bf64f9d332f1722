"""
KMS provider credentials.

This module provides:
- AwsCredentials, AzureCredentials, GcpCredentials, KmipCredentials,
  LocalCredentials: one credential variant per provider
- KMSCredentials: union of the variants
- KMSCredentialResolver: maps a provider name to its credential variant

Each variant carries only the fields its provider needs and renders the
``kms_providers`` document the MongoDB driver expects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Union, assert_never

from .config import Settings
from .key_file import LocalKeyFileStore
from .providers import ProviderName


@dataclass(frozen=True)
class AwsCredentials:
    """AWS IAM access key pair."""

    provider: ClassVar[ProviderName] = ProviderName.AWS

    access_key_id: Optional[str]
    secret_access_key: Optional[str] = field(repr=False)

    def to_kms_providers(self) -> Dict[str, Dict[str, Any]]:
        return {
            "aws": {
                "accessKeyId": self.access_key_id,
                "secretAccessKey": self.secret_access_key,
            }
        }


@dataclass(frozen=True)
class AzureCredentials:
    """Azure service principal."""

    provider: ClassVar[ProviderName] = ProviderName.AZURE

    tenant_id: Optional[str]
    client_id: Optional[str]
    client_secret: Optional[str] = field(repr=False)

    def to_kms_providers(self) -> Dict[str, Dict[str, Any]]:
        return {
            "azure": {
                "tenantId": self.tenant_id,
                "clientId": self.client_id,
                "clientSecret": self.client_secret,
            }
        }


@dataclass(frozen=True)
class GcpCredentials:
    """GCP service account."""

    provider: ClassVar[ProviderName] = ProviderName.GCP

    email: Optional[str]
    private_key: Optional[str] = field(repr=False)

    def to_kms_providers(self) -> Dict[str, Dict[str, Any]]:
        return {"gcp": {"email": self.email, "privateKey": self.private_key}}


@dataclass(frozen=True)
class KmipCredentials:
    """KMIP key server endpoint (host:port)."""

    provider: ClassVar[ProviderName] = ProviderName.KMIP

    endpoint: Optional[str]

    def to_kms_providers(self) -> Dict[str, Dict[str, Any]]:
        return {"kmip": {"endpoint": self.endpoint}}


@dataclass(frozen=True)
class LocalCredentials:
    """96-byte local master key read from disk."""

    provider: ClassVar[ProviderName] = ProviderName.LOCAL

    key: bytes = field(repr=False)

    def to_kms_providers(self) -> Dict[str, Dict[str, Any]]:
        return {"local": {"key": self.key}}


KMSCredentials = Union[
    AwsCredentials,
    AzureCredentials,
    GcpCredentials,
    KmipCredentials,
    LocalCredentials,
]


class KMSCredentialResolver:
    """
    Resolves the credentials for a KMS provider from Settings.

    Remote provider values are passed through as configured; a missing value
    surfaces later as an error from the encryption engine. The local provider
    creates the master key file on first use.
    """

    def __init__(
        self,
        settings: Settings,
        key_store: Optional[LocalKeyFileStore] = None,
    ) -> None:
        self._settings = settings
        self._key_store = key_store or LocalKeyFileStore(settings.local_master_key_path)

    def resolve(self, provider_name: Union[ProviderName, str]) -> KMSCredentials:
        """
        Resolve credentials for a provider.

        Args:
            provider_name: ProviderName or its string value

        Returns:
            The credential variant for that provider

        Raises:
            UnsupportedProviderError: If the provider name is unknown
            KeyFileIOError: If the local key file cannot be created or read
            KeyValidationError: If the local key file has the wrong length
        """
        provider = ProviderName.parse(provider_name, "retrieving KMS credentials")
        s = self._settings

        if provider is ProviderName.AWS:
            return AwsCredentials(
                access_key_id=s.aws_access_key_id,
                secret_access_key=s.aws_secret_access_key,
            )
        elif provider is ProviderName.AZURE:
            return AzureCredentials(
                tenant_id=s.azure_tenant_id,
                client_id=s.azure_client_id,
                client_secret=s.azure_client_secret,
            )
        elif provider is ProviderName.GCP:
            return GcpCredentials(email=s.gcp_email, private_key=s.gcp_private_key)
        elif provider is ProviderName.KMIP:
            return KmipCredentials(endpoint=s.kmip_endpoint)
        elif provider is ProviderName.LOCAL:
            return LocalCredentials(key=self._key_store.load_or_create())
        else:
            assert_never(provider)
