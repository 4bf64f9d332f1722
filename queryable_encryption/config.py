"""
Process configuration for provisioning.

Settings is an explicit value object handed to every resolver, so the
resolvers never read the process environment themselves. Settings.from_env
is the one place that touches os.environ (after loading an optional .env file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigError

DEFAULT_KEY_FILE_PATH = "./customer-master-key.txt"

# Environment variable -> Settings field
_ENV_FIELDS = {
    "MONGODB_URI": "mongodb_uri",
    "KMS_PROVIDER_NAME": "kms_provider_name",
    "ENCRYPTED_DATABASE_NAME": "encrypted_database_name",
    "ENCRYPTED_COLLECTION_NAME": "encrypted_collection_name",
    "KEY_VAULT_DATABASE_NAME": "key_vault_database_name",
    "KEY_VAULT_COLLECTION_NAME": "key_vault_collection_name",
    "CRYPT_SHARED_LIB_PATH": "crypt_shared_lib_path",
    "LOCAL_MASTER_KEY_PATH": "local_master_key_path",
    # AWS
    "AWS_ACCESS_KEY_ID": "aws_access_key_id",
    "AWS_SECRET_ACCESS_KEY": "aws_secret_access_key",
    "AWS_KEY_ARN": "aws_key_arn",
    "AWS_KEY_REGION": "aws_key_region",
    # Azure
    "AZURE_TENANT_ID": "azure_tenant_id",
    "AZURE_CLIENT_ID": "azure_client_id",
    "AZURE_CLIENT_SECRET": "azure_client_secret",
    "AZURE_KEY_VAULT_ENDPOINT": "azure_key_vault_endpoint",
    "AZURE_KEY_NAME": "azure_key_name",
    # GCP
    "GCP_EMAIL": "gcp_email",
    "GCP_PRIVATE_KEY": "gcp_private_key",
    "GCP_PROJECT_ID": "gcp_project_id",
    "GCP_LOCATION": "gcp_location",
    "GCP_KEY_RING": "gcp_key_ring",
    "GCP_KEY_NAME": "gcp_key_name",
    # KMIP
    "KMIP_KMS_ENDPOINT": "kmip_endpoint",
    "KMIP_TLS_CA_FILE": "kmip_tls_ca_file",
    "KMIP_TLS_CERT_FILE": "kmip_tls_cert_file",
}


@dataclass(frozen=True)
class Settings:
    """
    Provisioning configuration.

    Provider secrets are optional: resolvers pass missing values through and
    the encryption engine reports them when it tries to reach the KMS.
    """

    mongodb_uri: Optional[str] = None
    kms_provider_name: str = "local"
    encrypted_database_name: str = "medicalRecords"
    encrypted_collection_name: str = "patients"
    key_vault_database_name: str = "encryption"
    key_vault_collection_name: str = "__keyVault"
    crypt_shared_lib_path: Optional[str] = None
    local_master_key_path: str = DEFAULT_KEY_FILE_PATH

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_key_arn: Optional[str] = None
    aws_key_region: Optional[str] = None

    azure_tenant_id: Optional[str] = None
    azure_client_id: Optional[str] = None
    azure_client_secret: Optional[str] = None
    azure_key_vault_endpoint: Optional[str] = None
    azure_key_name: Optional[str] = None

    gcp_email: Optional[str] = None
    gcp_private_key: Optional[str] = None
    gcp_project_id: Optional[str] = None
    gcp_location: Optional[str] = None
    gcp_key_ring: Optional[str] = None
    gcp_key_name: Optional[str] = None

    kmip_endpoint: Optional[str] = None
    kmip_tls_ca_file: Optional[str] = None
    kmip_tls_cert_file: Optional[str] = None

    def __repr__(self) -> str:
        """Redacted representation to prevent accidental secret disclosure."""
        return (
            f"Settings(kms_provider_name={self.kms_provider_name!r}, "
            f"encrypted_namespace={self.encrypted_database_name}."
            f"{self.encrypted_collection_name}, "
            f"key_vault_namespace={self.key_vault_database_name}."
            f"{self.key_vault_collection_name}, [REDACTED])"
        )

    @classmethod
    def from_mapping(cls, values: Mapping[str, str]) -> Settings:
        """
        Build Settings from environment-style variable names.

        Unknown keys are ignored; empty strings are treated as unset.

        Args:
            values: Mapping such as os.environ

        Returns:
            Settings instance
        """
        kwargs = {}
        for env_name, field_name in _ENV_FIELDS.items():
            value = values.get(env_name)
            if value:
                kwargs[field_name] = value
        return cls(**kwargs)

    @classmethod
    def from_env(cls, env_file: Union[str, Path, None] = None) -> Settings:
        """
        Load Settings from the process environment.

        A .env file is loaded first (without overriding variables that are
        already set).

        Args:
            env_file: Explicit .env path; defaults to python-dotenv discovery

        Returns:
            Settings instance
        """
        if env_file is not None:
            load_dotenv(env_file)
        else:
            load_dotenv()
        return cls.from_mapping(os.environ)

    def require(self, field_name: str) -> str:
        """
        Return a configured value or fail.

        Raises:
            ConfigError: If the field is unknown or unset
        """
        if field_name not in {f.name for f in fields(self)}:
            raise ConfigError(f"Unknown setting: {field_name}")
        value = getattr(self, field_name)
        if not value:
            env_name = next(k for k, v in _ENV_FIELDS.items() if v == field_name)
            raise ConfigError(f"{env_name} must be set in environment or .env file")
        return value
