"""
Tests for the txgate command line interface.
"""

import json
import logging
import os
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from cli import __version__
from cli.context import LOGGER_NAMES
from cli.main import cli
from validator.signing import create_signing_data


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep real config files and TXGATE_* variables out of the tests."""
    monkeypatch.setattr("cli.config.CONFIG_SEARCH_PATHS", [tmp_path / ".txgate.yml"])
    for key in list(os.environ):
        if key.startswith("TXGATE_"):
            monkeypatch.delenv(key)
    yield
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for handler in [h for h in logger.handlers if getattr(h, "_txgate_cli", False)]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def pool_file(tmp_path, utxo_pool):
    path = tmp_path / "pool.json"
    path.write_text(json.dumps({"utxos": [utxo.to_dict() for utxo in utxo_pool.snapshot()]}))
    return str(path)


@pytest.fixture
def write_tx(tmp_path):
    def _write(transaction, name="tx.json"):
        path = tmp_path / name
        if name.endswith(".yml"):
            path.write_text(yaml.safe_dump(transaction.to_dict()))
        else:
            path.write_text(json.dumps(transaction.to_dict()))
        return str(path)
    return _write


class TestMainGroup:
    """Top-level options."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("validate", "signing-data", "config"):
            assert command in result.output

    def test_bad_config_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["-c", str(tmp_path / "missing.yml"), "config", "show"])

        assert result.exit_code == 1
        assert "Failed to load configuration" in result.output


class TestValidateCommand:
    """txgate validate."""

    def test_valid_transaction(self, runner, pool_file, write_tx, valid_transaction):
        result = runner.invoke(cli, ["validate", write_tx(valid_transaction), "--pool", pool_file])

        assert result.exit_code == 0
        assert "Transaction tx-1: VALID" in result.output

    def test_invalid_transaction(self, runner, pool_file, write_tx, make_transaction):
        tx = make_transaction([("A", 0), ("A", 0)], [("R", 20)])

        result = runner.invoke(cli, ["validate", write_tx(tx), "--pool", pool_file])

        assert result.exit_code == 1
        assert "[DOUBLE_SPENDING]" in result.output
        assert "Sum of inputs (10) does not match sum of outputs (20)" in result.output

    def test_json_report(self, runner, pool_file, write_tx, make_transaction):
        tx = make_transaction([("Z", 0)], [("R", 1)])

        result = runner.invoke(cli, ["validate", write_tx(tx), "--pool", pool_file, "--report", "json"])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["transaction_id"] == "tx-1"
        assert [e["kind"] for e in data["errors"]] == ["UTXO_NOT_FOUND", "AMOUNT_MISMATCH"]

    def test_yaml_documents(self, runner, tmp_path, utxo_pool, write_tx, valid_transaction):
        pool_path = tmp_path / "pool.yml"
        pool_path.write_text(yaml.safe_dump([utxo.to_dict() for utxo in utxo_pool.snapshot()]))

        result = runner.invoke(cli, ["validate", write_tx(valid_transaction, "tx.yml"),
                                     "--pool", str(pool_path), "--report", "markdown"])

        assert result.exit_code == 0
        assert "**Result:** valid" in result.output

    def test_report_format_from_config(self, runner, monkeypatch, pool_file, write_tx, valid_transaction):
        monkeypatch.setenv("TXGATE_CLI__REPORT_FORMAT", "json")

        result = runner.invoke(cli, ["validate", write_tx(valid_transaction), "--pool", pool_file])

        assert result.exit_code == 0
        assert json.loads(result.output)["valid"] is True

    def test_development_profile_suggestions(self, runner, pool_file, write_tx, make_transaction):
        tx = make_transaction([("A", 0)], [("R", 11)])

        result = runner.invoke(cli, ["-p", "development", "validate", write_tx(tx), "--pool", pool_file])

        assert result.exit_code == 1
        assert "->" in result.output

    def test_malformed_transaction(self, runner, tmp_path, pool_file):
        path = tmp_path / "tx.json"
        path.write_text(json.dumps({"id": "tx-1", "timestamp": "yesterday"}))

        result = runner.invoke(cli, ["validate", str(path), "--pool", pool_file])

        assert result.exit_code == 1
        assert "not a valid transaction" in result.output

    def test_malformed_pool(self, runner, tmp_path, write_tx, valid_transaction):
        path = tmp_path / "pool.json"
        path.write_text(json.dumps({"utxos": "none"}))

        result = runner.invoke(cli, ["validate", write_tx(valid_transaction), "--pool", str(path)])

        assert result.exit_code == 1
        assert "must contain a list of UTXOs" in result.output

    def test_collaborator_failure_exit_code(self, runner, pool_file, write_tx, valid_transaction):
        with patch("validator.core.verify_message", side_effect=RuntimeError("verifier down")):
            result = runner.invoke(cli, ["validate", write_tx(valid_transaction), "--pool", pool_file])

        assert result.exit_code == 2
        assert "verifier down" in result.output


class TestSigningDataCommand:
    """txgate signing-data."""

    def test_prints_signing_data(self, runner, write_tx, valid_transaction):
        result = runner.invoke(cli, ["signing-data", write_tx(valid_transaction)])

        assert result.exit_code == 0
        assert result.output.strip() == create_signing_data(valid_transaction)

    def test_digest(self, runner, write_tx, valid_transaction):
        result = runner.invoke(cli, ["signing-data", write_tx(valid_transaction), "--digest"])

        assert result.exit_code == 0
        assert len(result.output.strip()) == 64


class TestConfigCommands:
    """txgate config."""

    def test_show_key(self, runner):
        result = runner.invoke(cli, ["config", "show", "--key", "validator.signing_version"])

        assert result.exit_code == 0
        assert result.output.strip() == "validator.signing_version: 1"

    def test_show_none_valued_key(self, runner):
        result = runner.invoke(cli, ["config", "show", "--key", "validator.audit_log_file"])

        assert result.exit_code == 0
        assert "None" in result.output

    def test_show_missing_key(self, runner):
        result = runner.invoke(cli, ["config", "show", "--key", "validator.nope"])

        assert result.exit_code == 1

    def test_show_all_as_json(self, runner):
        result = runner.invoke(cli, ["config", "show", "--format", "json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["cli"]["report_format"] == "text"

    def test_show_sources(self, runner):
        result = runner.invoke(cli, ["-p", "strict", "config", "show", "--sources"])

        assert result.exit_code == 0
        assert "1. defaults" in result.output
        assert "2. profile:strict" in result.output

    def test_output_format_option_overrides_config(self, runner):
        result = runner.invoke(cli, ["-o", "json", "config", "show", "--key", "cli.output_format"])

        assert result.exit_code == 0
        assert result.output.strip() == "cli.output_format: json"

    def test_strict_profile_enforces_owner_match(self, runner):
        result = runner.invoke(cli, ["-p", "strict", "config", "show", "--key", "validator.enforce_owner_match"])

        assert result.exit_code == 0
        assert result.output.strip() == "validator.enforce_owner_match: True"

    def test_validate_config(self, runner, monkeypatch):
        assert runner.invoke(cli, ["config", "validate"]).exit_code == 0

        monkeypatch.setenv("TXGATE_CLI__OUTPUT_FORMAT", "xml")
        result = runner.invoke(cli, ["config", "validate"])

        assert result.exit_code == 1
        assert "Invalid output format: xml" in result.output
