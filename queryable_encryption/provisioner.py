"""
Encrypted collection provisioning.

This module provides:
- EncryptedCollectionProvisioner: Drives the provisioning sequence
- ProvisionResult: Outcome of a successful provisioning call

Provisioning sequence (linear, no retries):
1. Reset: drop the encrypted data database and the key vault database
   (only when the caller passes reset=True; this destroys data)
2. Schema: render the encrypted field schema
3. Create: the engine generates data keys and creates the collection
4. Insert: optionally insert a first document through the encrypting client

The auto-encrypting client is opened once per call and closed on every exit
path. Driver failures are raised as ProvisioningError with the cause chained;
configuration errors propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Mapping, Optional, TypeVar, Union

from bson.binary import UuidRepresentation
from bson.codec_options import CodecOptions
from pymongo import AsyncMongoClient
from pymongo.asynchronous.encryption import AsyncClientEncryption
from pymongo.errors import EncryptedCollectionError, PyMongoError

from .auto_encryption import AutoEncryptionConfig, AutoEncryptionConfigBuilder
from .config import Settings
from .credentials import KMSCredentials
from .errors import ConfigError, ProvisioningError
from .master_keys import CustomerMasterKeyRef
from .providers import ProviderName
from .schema import EncryptedFieldSchema

logger = logging.getLogger(__name__)

T = TypeVar("T")

ClientFactory = Callable[[AutoEncryptionConfig], Any]
ClientEncryptionFactory = Callable[[Any, AutoEncryptionConfig], Any]

_STEP_DESCRIPTIONS = {
    "connect": "open the encrypted client",
    "reset": "drop existing databases",
    "create": "create encrypted collection",
    "insert": "insert the document",
}


@dataclass
class ProvisionResult:
    """Result of a successful provision call."""

    database_name: str
    collection_name: str
    provider: ProviderName
    encrypted_fields: Mapping[str, Any]
    data_key_ids: List[Any] = field(default_factory=list)
    inserted_id: Optional[Any] = None


def mongo_client_factory(uri: str) -> ClientFactory:
    """Return a factory opening an auto-encrypting AsyncMongoClient for uri."""

    def factory(config: AutoEncryptionConfig) -> AsyncMongoClient:
        return AsyncMongoClient(uri, auto_encryption_opts=config.to_auto_encryption_opts())

    return factory


def client_encryption_factory(
    client: AsyncMongoClient, config: AutoEncryptionConfig
) -> AsyncClientEncryption:
    """Open an AsyncClientEncryption that stores data keys through client."""
    return AsyncClientEncryption(
        config.kms_providers,
        config.key_vault_namespace,
        client,
        CodecOptions(uuid_representation=UuidRepresentation.STANDARD),
        kms_tls_options=config.kms_tls_options,
    )


class EncryptedCollectionProvisioner:
    """
    Provisions a queryable-encryption collection.

    The client factories are injectable so the sequence can run against
    in-memory fakes.
    """

    def __init__(
        self,
        config_builder: AutoEncryptionConfigBuilder,
        client_factory: ClientFactory,
        encryption_factory: ClientEncryptionFactory = client_encryption_factory,
    ) -> None:
        self._config_builder = config_builder
        self._client_factory = client_factory
        self._encryption_factory = encryption_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> EncryptedCollectionProvisioner:
        """
        Create a provisioner connecting to settings.mongodb_uri.

        Raises:
            ConfigError: If MONGODB_URI is not configured
        """
        return cls(
            AutoEncryptionConfigBuilder(settings),
            mongo_client_factory(settings.require("mongodb_uri")),
        )

    async def provision(
        self,
        provider_name: Union[ProviderName, str],
        kms_credentials: KMSCredentials,
        key_vault_namespace: str,
        cmk_ref: CustomerMasterKeyRef,
        field_schema: EncryptedFieldSchema,
        *,
        encrypted_database: str,
        encrypted_collection: str,
        reset: bool = False,
        document: Optional[Mapping[str, Any]] = None,
    ) -> ProvisionResult:
        """
        Create an encrypted collection and its data keys.

        Args:
            provider_name: KMS provider
            kms_credentials: Credentials resolved for provider_name
            key_vault_namespace: ``<db>.<collection>`` for the data keys
            cmk_ref: Master key reference resolved for provider_name
            field_schema: Encrypted fields of the new collection
            encrypted_database: Database holding the encrypted collection
            encrypted_collection: Name of the encrypted collection
            reset: Drop encrypted_database and the key vault database first.
                Destroys all data in both; use only for provisioning or demos.
            document: Optional first document to insert

        Returns:
            ProvisionResult

        Raises:
            UnsupportedProviderError: If the provider name is unknown
            ConfigError: If inputs belong to different providers or the
                namespace is malformed
            ProvisioningError: If a driver call fails
        """
        provider = ProviderName.parse(provider_name, "provisioning an encrypted collection")
        if cmk_ref.provider is not provider:
            raise ConfigError(
                f"Customer master key is for provider {cmk_ref.provider}, expected {provider}"
            )
        config = self._config_builder.build(provider, key_vault_namespace, kms_credentials)
        key_vault_database = key_vault_namespace.partition(".")[0]
        encrypted_fields = field_schema.to_encrypted_fields()
        master_key = cmk_ref.to_document() or None

        client = self._open("connect", self._client_factory, config)
        try:
            if reset:
                await self._run(
                    "reset",
                    self._drop_databases(client, [encrypted_database, key_vault_database]),
                )

            client_encryption = self._open("create", self._encryption_factory, client, config)
            try:
                collection, created_fields = await self._run(
                    "create",
                    client_encryption.create_encrypted_collection(
                        client[encrypted_database],
                        encrypted_collection,
                        encrypted_fields,
                        kms_provider=provider.value,
                        master_key=master_key,
                    ),
                )
            finally:
                await client_encryption.close()

            logger.info(
                "Created encrypted collection %s.%s using %s KMS",
                encrypted_database,
                encrypted_collection,
                provider,
            )

            inserted_id = None
            if document is not None:
                result = await self._run("insert", collection.insert_one(dict(document)))
                inserted_id = result.inserted_id
                logger.info("Inserted document %s", inserted_id)
        finally:
            await client.close()

        return ProvisionResult(
            database_name=encrypted_database,
            collection_name=encrypted_collection,
            provider=provider,
            encrypted_fields=created_fields,
            data_key_ids=[f.get("keyId") for f in created_fields.get("fields", [])],
            inserted_id=inserted_id,
        )

    @staticmethod
    async def _drop_databases(client: Any, names: List[str]) -> None:
        for name in dict.fromkeys(names):
            logger.warning("Dropping database %s", name)
            await client.drop_database(name)

    @staticmethod
    def _open(step: str, factory: Callable[..., T], *args: Any) -> T:
        try:
            return factory(*args)
        except PyMongoError as e:
            raise _provisioning_error(step, e) from e

    @staticmethod
    async def _run(step: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except PyMongoError as e:
            raise _provisioning_error(step, e) from e


def _provisioning_error(step: str, error: PyMongoError) -> ProvisioningError:
    if isinstance(error, EncryptedCollectionError):
        # Data keys created before the failure are left in the key vault.
        logger.error(
            "Encrypted collection creation failed; partial encryptedFields: %s",
            error.encrypted_fields,
        )
    else:
        logger.error("Provisioning step %s failed: %s", step, error)
    return ProvisioningError(
        f"Unable to {_STEP_DESCRIPTIONS[step]} due to the following error: {error}",
        step,
    )
