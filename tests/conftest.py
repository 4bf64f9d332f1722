"""
Pytest configuration and fixtures for provisioning tests.
"""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from dotenv import load_dotenv
from pymongo.errors import CollectionInvalid

from queryable_encryption import (
    AutoEncryptionConfig,
    AutoEncryptionConfigBuilder,
    EncryptedCollectionProvisioner,
    LocalKeyFileStore,
    Settings,
)


# =============================================================================
# In-memory stand-ins for the MongoDB driver
# =============================================================================


class FakeInsertOneResult:
    def __init__(self, inserted_id: Any) -> None:
        self.inserted_id = inserted_id
        self.acknowledged = True


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        self.encrypted_fields: Optional[Dict[str, Any]] = None

    async def insert_one(self, document: Dict[str, Any]) -> FakeInsertOneResult:
        document.setdefault("_id", uuid.uuid4())
        self.documents.append(document)
        return FakeInsertOneResult(document["_id"])


class FakeDatabase:
    def __init__(self, server: FakeServer, name: str) -> None:
        self._server = server
        self.name = name

    @property
    def collections(self) -> Dict[str, FakeCollection]:
        return self._server.databases.setdefault(self.name, {})


class FakeServer:
    """Shared state for every fake client, plus an event log."""

    def __init__(self) -> None:
        self.databases: Dict[str, Dict[str, FakeCollection]] = {}
        self.events: List[Tuple[str, str]] = []
        self.clients: List[FakeClient] = []
        self.configs: List[AutoEncryptionConfig] = []
        self.create_error: Optional[Exception] = None
        self.drop_error: Optional[Exception] = None

    def collection(self, database: str, name: str) -> Optional[FakeCollection]:
        return self.databases.get(database, {}).get(name)

    def client_factory(self, config: AutoEncryptionConfig) -> FakeClient:
        self.configs.append(config)
        client = FakeClient(self)
        self.clients.append(client)
        return client

    def encryption_factory(
        self, client: FakeClient, config: AutoEncryptionConfig
    ) -> FakeClientEncryption:
        return FakeClientEncryption(self, config)


class FakeClient:
    def __init__(self, server: FakeServer) -> None:
        self._server = server
        self.closed = False

    def __getitem__(self, name: str) -> FakeDatabase:
        return FakeDatabase(self._server, name)

    async def drop_database(self, name: str) -> None:
        if self._server.drop_error is not None:
            raise self._server.drop_error
        self._server.events.append(("drop", name))
        self._server.databases.pop(name, None)

    async def close(self) -> None:
        self.closed = True


class FakeClientEncryption:
    def __init__(self, server: FakeServer, config: AutoEncryptionConfig) -> None:
        self._server = server
        self._config = config
        self.closed = False

    async def create_encrypted_collection(
        self,
        database: FakeDatabase,
        name: str,
        encrypted_fields: Dict[str, Any],
        kms_provider: Optional[str] = None,
        master_key: Optional[Dict[str, Any]] = None,
    ) -> Tuple[FakeCollection, Dict[str, Any]]:
        if self._server.create_error is not None:
            raise self._server.create_error
        if name in database.collections:
            raise CollectionInvalid(f"collection {name} already exists")

        db_name, _, coll_name = self._config.key_vault_namespace.partition(".")
        key_vault = self._server.databases.setdefault(db_name, {}).setdefault(
            coll_name, FakeCollection(coll_name)
        )
        fields = []
        for field in encrypted_fields["fields"]:
            key_id = uuid.uuid4()
            key_vault.documents.append(
                {"_id": key_id, "masterKey": {"provider": kms_provider, **(master_key or {})}}
            )
            fields.append({**field, "keyId": key_id})

        collection = FakeCollection(name)
        collection.encrypted_fields = {"fields": fields}
        database.collections[name] = collection
        self._server.events.append(("create", f"{database.name}.{name}"))
        return collection, {"fields": fields}

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def key_path(tmp_path: Path) -> Path:
    """Location for a local master key file that does not exist yet."""
    return tmp_path / "customer-master-key.txt"


@pytest.fixture
def key_store(key_path: Path) -> LocalKeyFileStore:
    return LocalKeyFileStore(key_path)


@pytest.fixture
def settings(key_path: Path) -> Settings:
    """Settings with dummy values for every provider."""
    return Settings(
        mongodb_uri="mongodb://localhost:27017",
        kms_provider_name="local",
        encrypted_database_name="medicalRecords",
        encrypted_collection_name="patients",
        key_vault_database_name="encryption",
        key_vault_collection_name="__keyVault",
        crypt_shared_lib_path="/opt/mongo_crypt_v1.so",
        local_master_key_path=str(key_path),
        aws_access_key_id="AKIAEXAMPLE",
        aws_secret_access_key="aws-secret",
        aws_key_arn="arn:aws:kms:us-east-1:123456789012:key/abcd",
        aws_key_region="us-east-1",
        azure_tenant_id="tenant",
        azure_client_id="client",
        azure_client_secret="azure-secret",
        azure_key_vault_endpoint="example.vault.azure.net",
        azure_key_name="cmk",
        gcp_email="svc@example.iam.gserviceaccount.com",
        gcp_private_key="gcp-private-key",
        gcp_project_id="project",
        gcp_location="global",
        gcp_key_ring="ring",
        gcp_key_name="cmk",
        kmip_endpoint="kmip.example.com:5696",
        kmip_tls_ca_file="/certs/ca.pem",
        kmip_tls_cert_file="/certs/client.pem",
    )


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def provisioner(settings: Settings, fake_server: FakeServer) -> EncryptedCollectionProvisioner:
    """Provisioner backed by the in-memory fake server."""
    return EncryptedCollectionProvisioner(
        AutoEncryptionConfigBuilder(settings),
        fake_server.client_factory,
        fake_server.encryption_factory,
    )


@pytest.fixture
async def live_settings(tmp_path: Path) -> AsyncGenerator[Settings, None]:
    """Settings for a real MongoDB deployment, from the environment."""
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(env_path)

    if not os.environ.get("MONGODB_URI"):
        pytest.skip("MONGODB_URI not set, skipping MongoDB integration tests")
    pytest.importorskip("pymongocrypt")

    env = dict(os.environ)
    env.setdefault("LOCAL_MASTER_KEY_PATH", str(tmp_path / "customer-master-key.txt"))
    env["ENCRYPTED_DATABASE_NAME"] = "qe_test_medicalRecords"
    env["KEY_VAULT_DATABASE_NAME"] = "qe_test_encryption"
    yield Settings.from_mapping(env)
