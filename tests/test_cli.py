"""Tests for the qe-provision command line."""

import pytest

from queryable_encryption import ProviderName, ProvisioningError, ProvisionResult
from queryable_encryption import cli


class RecordingService:
    """Stands in for EncryptedCollectionService inside the CLI."""

    calls = []
    error = None

    @classmethod
    def new(cls, settings):
        return cls()

    async def provision(self, provider_name, *, reset=False, document=None):
        RecordingService.calls.append((provider_name, reset, document))
        if RecordingService.error is not None:
            raise RecordingService.error
        return ProvisionResult(
            database_name="medicalRecords",
            collection_name="patients",
            provider=ProviderName.LOCAL,
            encrypted_fields={"fields": [{"path": "age", "keyId": "k1"}]},
            data_key_ids=["k1"],
            inserted_id="doc-1",
        )


@pytest.fixture
def recording_service(monkeypatch, tmp_path):
    RecordingService.calls = []
    RecordingService.error = None
    monkeypatch.setattr(cli, "EncryptedCollectionService", RecordingService)
    monkeypatch.setenv("KMS_PROVIDER_NAME", "local")
    return RecordingService


def run_main(argv):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(argv)
    return exc_info.value.code


def test_success_exits_zero(recording_service, capsys):
    code = run_main(["--provider", "local", "--reset", "--document", '{"age": 29}'])

    assert code == 0
    assert recording_service.calls == [("local", True, {"age": 29})]
    out = capsys.readouterr().out
    assert "[OK] Created encrypted collection with 1 data keys" in out
    assert "[OK] Inserted document doc-1" in out


def test_provider_defaults_to_configured_name(recording_service):
    assert run_main([]) == 0
    assert recording_service.calls == [("local", False, None)]


def test_empty_provider_is_passed_through(recording_service):
    run_main(["--provider", ""])
    assert recording_service.calls[0][0] == ""


def test_provisioning_error_exits_one(recording_service, capsys):
    recording_service.error = ProvisioningError("Unable to create encrypted collection", "create")

    assert run_main(["--provider", "local"]) == 1
    assert "[ERROR] Unable to create encrypted collection" in capsys.readouterr().out


def test_bad_document_json_exits_two(recording_service, capsys):
    assert run_main(["--document", "{not json"]) == 2
    assert recording_service.calls == []
    assert "--document is not valid JSON" in capsys.readouterr().out
