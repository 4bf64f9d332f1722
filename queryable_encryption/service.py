"""
High-level provisioning service.

Wires Settings into the resolvers, the configuration builder and the
provisioner, so a caller only picks a provider.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from .auto_encryption import (
    AutoEncryptionConfig,
    AutoEncryptionConfigBuilder,
    key_vault_namespace,
)
from .config import Settings
from .credentials import KMSCredentialResolver
from .master_keys import CustomerMasterKeyResolver
from .provisioner import EncryptedCollectionProvisioner, ProvisionResult
from .providers import ProviderName
from .schema import EncryptedFieldSchema, patient_record_schema


class EncryptedCollectionService:
    """Provisions the configured encrypted collection."""

    def __init__(
        self,
        settings: Settings,
        provisioner: EncryptedCollectionProvisioner,
        credential_resolver: Optional[KMSCredentialResolver] = None,
        master_key_resolver: Optional[CustomerMasterKeyResolver] = None,
    ) -> None:
        self._settings = settings
        self._provisioner = provisioner
        self._credentials = credential_resolver or KMSCredentialResolver(settings)
        self._master_keys = master_key_resolver or CustomerMasterKeyResolver(settings)

    @classmethod
    def new(cls, settings: Settings) -> EncryptedCollectionService:
        """Create a service connecting to settings.mongodb_uri."""
        return cls(settings, EncryptedCollectionProvisioner.from_settings(settings))

    def _resolve_provider_name(
        self, provider_name: Union[ProviderName, str, None]
    ) -> ProviderName:
        # Only an omitted name falls back; "" is rejected like any unknown name.
        if provider_name is None:
            provider_name = self._settings.kms_provider_name
        return ProviderName.parse(provider_name)

    @property
    def key_vault_namespace(self) -> str:
        return key_vault_namespace(
            self._settings.key_vault_database_name,
            self._settings.key_vault_collection_name,
        )

    def auto_encryption_config(
        self, provider_name: Union[ProviderName, str, None] = None
    ) -> AutoEncryptionConfig:
        """Build the AutoEncryptionConfig for a provider (default: configured one)."""
        provider = self._resolve_provider_name(provider_name)
        return AutoEncryptionConfigBuilder(self._settings).build(
            provider, self.key_vault_namespace, self._credentials.resolve(provider)
        )

    async def provision(
        self,
        provider_name: Union[ProviderName, str, None] = None,
        *,
        field_schema: Optional[EncryptedFieldSchema] = None,
        reset: bool = False,
        document: Optional[Mapping[str, Any]] = None,
    ) -> ProvisionResult:
        """
        Provision the configured encrypted collection.

        Args:
            provider_name: KMS provider; defaults to KMS_PROVIDER_NAME
            field_schema: Encrypted fields; defaults to patient_record_schema()
            reset: Drop existing databases first (destructive)
            document: Optional first document to insert

        Returns:
            ProvisionResult
        """
        provider = self._resolve_provider_name(provider_name)
        namespace = self.key_vault_namespace
        credentials = self._credentials.resolve(provider)
        cmk_ref = self._master_keys.resolve(provider)

        return await self._provisioner.provision(
            provider,
            credentials,
            namespace,
            cmk_ref,
            field_schema or patient_record_schema(),
            encrypted_database=self._settings.encrypted_database_name,
            encrypted_collection=self._settings.encrypted_collection_name,
            reset=reset,
            document=document,
        )
