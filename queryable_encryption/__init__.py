"""
Queryable Encryption Provisioning

Prepares KMS credentials and auto-encryption settings for MongoDB
client-side field level encryption, and provisions encrypted collections
through the driver's encryption engine.

Quick Start
-----------
```python
import asyncio
from queryable_encryption import EncryptedCollectionService, Settings

async def main():
    settings = Settings.from_env()  # MONGODB_URI, CRYPT_SHARED_LIB_PATH, ...
    service = EncryptedCollectionService.new(settings)

    # Creates ./customer-master-key.txt on first use of the local provider
    result = await service.provision(
        "local",
        reset=True,  # drops existing databases
        document={"patientName": "Jon Doe", "age": 29},
    )
    print(result.data_key_ids)

asyncio.run(main())
```

Supported Providers
-------------------
- **aws**: IAM access key, CMK ARN + region
- **azure**: Service principal, Key Vault endpoint + key name
- **gcp**: Service account, project/location/key ring/key name
- **kmip**: KMIP endpoint over mutual TLS
- **local**: 96-byte key file on disk (development only)

Modules
-------
- `providers`: Provider names
- `config`: Settings loaded from the environment
- `key_file`: Local master key file
- `credentials`: KMS credential variants and resolver
- `master_keys`: Customer master key references and resolver
- `auto_encryption`: Auto-encryption configuration builder
- `schema`: Encrypted field schema
- `provisioner`: Encrypted collection provisioning sequence
- `service`: Settings-driven provisioning facade
- `errors`: Error types
"""

__version__ = "0.1.0"

# =============================================================================
# Error Exports
# =============================================================================

from .errors import (
    ConfigError,
    KeyFileIOError,
    KeyValidationError,
    ProvisioningError,
    QueryableEncryptionError,
    SchemaError,
    UnsupportedProviderError,
)

# =============================================================================
# Configuration Exports
# =============================================================================

from .config import DEFAULT_KEY_FILE_PATH, Settings
from .providers import ProviderName

# =============================================================================
# Key Material Exports
# =============================================================================

from .key_file import LOCAL_MASTER_KEY_SIZE, LocalKeyFileStore
from .credentials import (
    AwsCredentials,
    AzureCredentials,
    GcpCredentials,
    KMSCredentialResolver,
    KMSCredentials,
    KmipCredentials,
    LocalCredentials,
)
from .master_keys import (
    AwsMasterKey,
    AzureMasterKey,
    CustomerMasterKeyRef,
    CustomerMasterKeyResolver,
    EmptyMasterKey,
    GcpMasterKey,
)

# =============================================================================
# Provisioning Exports (Primary API)
# =============================================================================

from .auto_encryption import (
    AutoEncryptionConfig,
    AutoEncryptionConfigBuilder,
    KmipTlsOptions,
    key_vault_namespace,
)
from .schema import EncryptedField, EncryptedFieldSchema, QueryType, patient_record_schema
from .provisioner import EncryptedCollectionProvisioner, ProvisionResult
from .service import EncryptedCollectionService

# =============================================================================
# Public API
# =============================================================================

__all__ = [
    # Version
    "__version__",
    # Errors
    "QueryableEncryptionError",
    "UnsupportedProviderError",
    "KeyFileIOError",
    "KeyValidationError",
    "ConfigError",
    "SchemaError",
    "ProvisioningError",
    # Configuration
    "DEFAULT_KEY_FILE_PATH",
    "Settings",
    "ProviderName",
    # Key material
    "LOCAL_MASTER_KEY_SIZE",
    "LocalKeyFileStore",
    "KMSCredentials",
    "AwsCredentials",
    "AzureCredentials",
    "GcpCredentials",
    "KmipCredentials",
    "LocalCredentials",
    "KMSCredentialResolver",
    "CustomerMasterKeyRef",
    "AwsMasterKey",
    "AzureMasterKey",
    "GcpMasterKey",
    "EmptyMasterKey",
    "CustomerMasterKeyResolver",
    # Provisioning (Primary API)
    "AutoEncryptionConfig",
    "AutoEncryptionConfigBuilder",
    "KmipTlsOptions",
    "key_vault_namespace",
    "EncryptedField",
    "EncryptedFieldSchema",
    "QueryType",
    "patient_record_schema",
    "EncryptedCollectionProvisioner",
    "ProvisionResult",
    "EncryptedCollectionService",
]
