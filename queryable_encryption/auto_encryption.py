"""
Auto-encryption configuration.

This module provides:
- key_vault_namespace: Joins the key vault database and collection names
- KmipTlsOptions: Mutual TLS material for reaching a KMIP server
- AutoEncryptionConfig: Everything needed to open an auto-encrypting client
- AutoEncryptionConfigBuilder: Assembles an AutoEncryptionConfig from Settings

Building a configuration performs no I/O. KMIP is the only provider that
needs TLS options, since the driver opens a raw TLS socket to the key server;
the cloud providers are reached through signed HTTPS API calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from pymongo.encryption_options import AutoEncryptionOpts

from .config import Settings
from .credentials import KMSCredentials
from .errors import ConfigError
from .providers import ProviderName


def key_vault_namespace(database: str, collection: str) -> str:
    """
    Build a ``<db>.<collection>`` key vault namespace.

    Raises:
        ConfigError: If either part is empty or the database name has a dot
    """
    if not database or not collection:
        raise ConfigError("Key vault database and collection names must be non-empty")
    if "." in database:
        raise ConfigError(f"Key vault database name must not contain '.': {database}")
    return f"{database}.{collection}"


@dataclass(frozen=True)
class KmipTlsOptions:
    """CA file and client certificate/key file for the KMIP connection."""

    ca_file: Optional[str]
    cert_key_file: Optional[str]

    def to_document(self) -> Dict[str, Dict[str, Optional[str]]]:
        return {
            "kmip": {
                "tlsCAFile": self.ca_file,
                "tlsCertificateKeyFile": self.cert_key_file,
            }
        }


@dataclass(frozen=True)
class AutoEncryptionConfig:
    """
    Configuration for an auto-encrypting MongoDB client.

    tls_options is set only for the kmip provider.
    """

    key_vault_namespace: str
    kms_credentials: KMSCredentials
    crypt_shared_lib_path: Optional[str] = None
    tls_options: Optional[KmipTlsOptions] = None

    @property
    def provider(self) -> ProviderName:
        return self.kms_credentials.provider

    @property
    def kms_providers(self) -> Dict[str, Dict[str, Any]]:
        """Driver-shaped ``kms_providers`` mapping."""
        return self.kms_credentials.to_kms_providers()

    @property
    def kms_tls_options(self) -> Optional[Mapping[str, Any]]:
        """Driver-shaped ``kms_tls_options`` mapping, or None."""
        if self.tls_options is None:
            return None
        return self.tls_options.to_document()

    @property
    def extra_options(self) -> Dict[str, Optional[str]]:
        return {"cryptSharedLibPath": self.crypt_shared_lib_path}

    def to_auto_encryption_opts(self) -> AutoEncryptionOpts:
        """
        Convert to pymongo's AutoEncryptionOpts.

        Requires the ``pymongo[encryption]`` extra (pymongocrypt).
        """
        return AutoEncryptionOpts(
            kms_providers=self.kms_providers,
            key_vault_namespace=self.key_vault_namespace,
            kms_tls_options=self.kms_tls_options,
            crypt_shared_lib_path=self.crypt_shared_lib_path,
        )


class AutoEncryptionConfigBuilder:
    """Assembles AutoEncryptionConfig values from Settings."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def kmip_tls_options(self) -> KmipTlsOptions:
        return KmipTlsOptions(
            ca_file=self._settings.kmip_tls_ca_file,
            cert_key_file=self._settings.kmip_tls_cert_file,
        )

    def build(
        self,
        provider_name: Union[ProviderName, str],
        key_vault_namespace: str,
        kms_credentials: KMSCredentials,
    ) -> AutoEncryptionConfig:
        """
        Build the auto-encryption configuration for a provider.

        Args:
            provider_name: ProviderName or its string value
            key_vault_namespace: ``<db>.<collection>`` where data keys live
            kms_credentials: Credentials resolved for the same provider

        Returns:
            AutoEncryptionConfig

        Raises:
            UnsupportedProviderError: If the provider name is unknown
            ConfigError: If the namespace is malformed or the credentials belong
                to another provider
        """
        provider = ProviderName.parse(provider_name, "building auto-encryption options")
        database, _, collection = key_vault_namespace.partition(".")
        if not database or not collection:
            raise ConfigError(
                f"Key vault namespace must be <db>.<collection>: {key_vault_namespace!r}"
            )
        if kms_credentials.provider is not provider:
            raise ConfigError(
                f"KMS credentials are for provider {kms_credentials.provider}, "
                f"expected {provider}"
            )

        tls_options = None
        if provider is ProviderName.KMIP:
            tls_options = self.kmip_tls_options()

        return AutoEncryptionConfig(
            key_vault_namespace=key_vault_namespace,
            kms_credentials=kms_credentials,
            crypt_shared_lib_path=self._settings.crypt_shared_lib_path,
            tls_options=tls_options,
        )
