"""Tests for CLI functionality."""

import json

import pytest

from cloudpdf import cli
from cloudpdf.cli import main
from cloudpdf.models import AccountResponse
from cloudpdf.signing import Signer

from conftest import API_KEY, CLOUD_NAME, SIGNING_SECRET


@pytest.fixture
def signing_env(monkeypatch):
    monkeypatch.setenv("CLOUDPDF_API_KEY", API_KEY)
    monkeypatch.setenv("CLOUDPDF_CLOUD_NAME", CLOUD_NAME)
    monkeypatch.setenv("CLOUDPDF_SIGNING_SECRET", SIGNING_SECRET)


def test_cli_main_no_args(capsys):
    """A subcommand is required."""
    result = main([])
    assert result == 1


def test_cli_main_help(capsys):
    result = main(["--help"])
    assert result == 0

    captured = capsys.readouterr()
    assert "usage:" in captured.out.lower()
    assert "viewer-token" in captured.out


def test_viewer_token_prints_signed_token(signing_env, capsys):
    result = main(
        [
            "viewer-token",
            "doc-1",
            "--expires-in",
            "30m",
            "--no-search",
            "--info",
            "email",
        ]
    )
    assert result == 0

    token = capsys.readouterr().out.strip()
    claims = Signer(CLOUD_NAME, SIGNING_SECRET).verify(token)
    assert claims.function == "APIGetDocument"
    assert claims.params == {"id": "doc-1", "search": False, "info": ["email"]}
    assert claims.lifetime.total_seconds() == 1800


def test_decode_prints_claims(signing_env, capsys):
    token = Signer(CLOUD_NAME, SIGNING_SECRET).sign("APIV2GetAuth", {"a": 1})

    assert main(["decode", token]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["function"] == "APIV2GetAuth"
    assert output["params"] == {"a": 1}
    assert output["key_id"] == CLOUD_NAME


def test_decode_rejects_tampered_token(signing_env, capsys):
    token = Signer(CLOUD_NAME, SIGNING_SECRET).sign("APIV2GetAuth")
    assert main(["decode", token[:-2] + "xx"]) == 1
    assert "Invalid credential" in capsys.readouterr().err


def test_viewer_token_without_signing_config_fails(monkeypatch, capsys):
    monkeypatch.setenv("CLOUDPDF_API_KEY", API_KEY)
    assert main(["viewer-token", "doc-1"]) == 1
    assert "cloudName and signingSecret" in capsys.readouterr().err


def test_invalid_expiry_is_reported(signing_env, capsys):
    assert main(["viewer-token", "doc-1", "--expires-in", "whenever"]) == 1
    assert "Invalid duration" in capsys.readouterr().err


def test_account_prints_json(signing_env, monkeypatch, capsys):
    async def _fake_account(self):
        return AccountResponse(
            organization_name="Acme",
            plan="pro",
            allowed_monthly_uploads=10,
            used_monthly_uploads=1,
            allowed_monthly_views=100,
            used_monthly_views=5,
            allowed_storage=1000,
        )

    monkeypatch.setattr(cli.CloudPDF, "account", _fake_account)

    assert main(["account"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["organizationName"] == "Acme"
    assert output["usedMonthlyViews"] == 5
