"""
Customer master key references.

The master key reference tells the encryption engine which remote key wraps
the generated data encryption keys. KMIP and local providers have no remote
indirection and use an empty reference.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Union, assert_never

from .config import Settings
from .errors import ConfigError
from .providers import ProviderName


@dataclass(frozen=True)
class AwsMasterKey:
    """AWS KMS key ARN and region."""

    provider: ClassVar[ProviderName] = ProviderName.AWS

    key: Optional[str]
    region: Optional[str]

    def to_document(self) -> Dict[str, Optional[str]]:
        return {"key": self.key, "region": self.region}


@dataclass(frozen=True)
class AzureMasterKey:
    """Azure Key Vault endpoint and key name."""

    provider: ClassVar[ProviderName] = ProviderName.AZURE

    key_vault_endpoint: Optional[str]
    key_name: Optional[str]

    def to_document(self) -> Dict[str, Optional[str]]:
        return {"keyVaultEndpoint": self.key_vault_endpoint, "keyName": self.key_name}


@dataclass(frozen=True)
class GcpMasterKey:
    """GCP Cloud KMS key location."""

    provider: ClassVar[ProviderName] = ProviderName.GCP

    project_id: Optional[str]
    location: Optional[str]
    key_ring: Optional[str]
    key_name: Optional[str]

    def to_document(self) -> Dict[str, Optional[str]]:
        return {
            "projectId": self.project_id,
            "location": self.location,
            "keyRing": self.key_ring,
            "keyName": self.key_name,
        }


@dataclass(frozen=True)
class EmptyMasterKey:
    """No master key indirection (kmip, local)."""

    provider: ProviderName

    def __post_init__(self) -> None:
        if self.provider not in (ProviderName.KMIP, ProviderName.LOCAL):
            raise ConfigError(
                f"Provider {self.provider} requires a customer master key reference"
            )

    def to_document(self) -> Dict[str, Optional[str]]:
        return {}


CustomerMasterKeyRef = Union[AwsMasterKey, AzureMasterKey, GcpMasterKey, EmptyMasterKey]


class CustomerMasterKeyResolver:
    """Maps a provider name to its master key reference using Settings."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def resolve(self, provider_name: Union[ProviderName, str]) -> CustomerMasterKeyRef:
        """
        Resolve the master key reference for a provider.

        Raises:
            UnsupportedProviderError: If the provider name is unknown
        """
        provider = ProviderName.parse(
            provider_name, "retrieving Customer Master Key credentials"
        )
        s = self._settings

        if provider is ProviderName.AWS:
            return AwsMasterKey(key=s.aws_key_arn, region=s.aws_key_region)
        elif provider is ProviderName.AZURE:
            return AzureMasterKey(
                key_vault_endpoint=s.azure_key_vault_endpoint,
                key_name=s.azure_key_name,
            )
        elif provider is ProviderName.GCP:
            return GcpMasterKey(
                project_id=s.gcp_project_id,
                location=s.gcp_location,
                key_ring=s.gcp_key_ring,
                key_name=s.gcp_key_name,
            )
        elif provider is ProviderName.KMIP or provider is ProviderName.LOCAL:
            return EmptyMasterKey(provider=provider)
        else:
            assert_never(provider)
