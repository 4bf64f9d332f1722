"""
Encrypted collection provisioning CLI.

Usage:
    qe-provision [--provider local] [--reset] [--document '{"age": 29}']

Or run directly:
    python -m queryable_encryption.cli

Configuration is read from the environment or a .env file
(MONGODB_URI, KMS_PROVIDER_NAME, CRYPT_SHARED_LIB_PATH, provider secrets).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from typing import List, Optional

from .config import Settings
from .errors import QueryableEncryptionError
from .service import EncryptedCollectionService


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="qe-provision",
        description="Create a queryable-encryption collection and its data keys.",
    )
    parser.add_argument("--provider", help="aws, azure, gcp, kmip or local (default: KMS_PROVIDER_NAME)")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop the encrypted and key vault databases first (DESTROYS DATA)",
    )
    parser.add_argument("--document", help="JSON document to insert after creation")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


async def run_provision(args: argparse.Namespace) -> int:
    """Run provisioning and print the outcome."""
    settings = Settings.from_env(args.env_file)
    document = json.loads(args.document) if args.document else None

    service = EncryptedCollectionService.new(settings)
    provider = args.provider if args.provider is not None else settings.kms_provider_name
    print(f"=== Provisioning {settings.encrypted_database_name}."
          f"{settings.encrypted_collection_name} ({provider} KMS) ===\n")

    start = time.perf_counter()
    result = await service.provision(provider, reset=args.reset, document=document)
    duration = (time.perf_counter() - start) * 1000

    print(f"[OK] Created encrypted collection with {len(result.data_key_ids)} data keys")
    for path in (f["path"] for f in result.encrypted_fields.get("fields", [])):
        print(f"  - {path}")
    if result.inserted_id is not None:
        print(f"[OK] Inserted document {result.inserted_id}")
    print(f"[PERF] Time: {duration:.3f}ms")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    try:
        code = asyncio.run(run_provision(args))
    except QueryableEncryptionError as e:
        print(f"[ERROR] {e}")
        code = 1
    except json.JSONDecodeError as e:
        print(f"[ERROR] --document is not valid JSON: {e}")
        code = 2
    sys.exit(code)


if __name__ == "__main__":
    main()
