"""Tests for provider name parsing."""

import pytest

from queryable_encryption import ProviderName, UnsupportedProviderError


@pytest.mark.parametrize("value", ["aws", "azure", "gcp", "kmip", "local"])
def test_parse_accepts_every_provider(value):
    assert ProviderName.parse(value).value == value


@pytest.mark.parametrize("value", ["AWS", " aws ", "Local", "kmip\n"])
def test_parse_requires_exact_names(value):
    with pytest.raises(UnsupportedProviderError):
        ProviderName.parse(value)


def test_parse_passes_members_through():
    assert ProviderName.parse(ProviderName.KMIP) is ProviderName.KMIP


@pytest.mark.parametrize("value", ["unknown", "", "hashicorp", None, 3])
def test_parse_rejects_unknown(value):
    with pytest.raises(UnsupportedProviderError) as exc_info:
        ProviderName.parse(value)
    assert exc_info.value.provider_name == value


def test_error_message_names_context():
    with pytest.raises(UnsupportedProviderError, match="retrieving KMS credentials"):
        ProviderName.parse("vault", "retrieving KMS credentials")
