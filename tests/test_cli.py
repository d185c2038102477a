"""
Tests for command-line interface.

Copyright (c) 2024 Cleansheet LLC
License: CC BY 4.0
"""

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from pharmacy_tools.cli import app


runner = CliRunner()


class TestCLIParse:
    """Tests for the parse command."""

    def test_parse_product_number(self):
        """Test parsing a product number."""
        result = runner.invoke(app, ["parse", "538145"])

        assert result.exit_code == 0
        assert "Tramagetic OD" in result.stdout
        assert "200 mg" in result.stdout

    def test_parse_patch(self):
        """Test parsing a patch strength."""
        result = runner.invoke(app, ["parse", "Durogesic 25 µg/time"])

        assert result.exit_code == 0
        assert "Durogesic" in result.stdout
        assert "25 µg/time" in result.stdout

    def test_parse_no_product(self):
        """Test text without a known product."""
        result = runner.invoke(app, ["parse", "vitaminer"])

        assert result.exit_code == 0
        assert "No product found" in result.stdout


class TestCLIOMEQ:
    """Tests for the omeq command."""

    def test_single_row(self):
        """Test one row with inline dose."""
        result = runner.invoke(app, ["omeq", "Tramagetic OD 200 mg:2"])

        assert result.exit_code == 0
        assert "Total OMEQ: 60 mg" in result.stdout

    def test_shared_dose(self):
        """Test --dose applies to rows without inline dose."""
        result = runner.invoke(app, ["omeq", "Tramagetic OD 200 mg", "466131", "--dose", "2"])

        assert result.exit_code == 0
        assert "Total OMEQ: 120 mg" in result.stdout

    def test_missing_dose(self):
        """Test a row without dose is reported and excluded."""
        result = runner.invoke(app, ["omeq", "Tramagetic OD 200 mg"])

        assert result.exit_code == 0
        assert "missing" in result.stdout.lower()
        assert "Total OMEQ: 0 mg" in result.stdout


class TestCLIOpioids:
    """Tests for the opioids command."""

    def test_table(self):
        """Test the conversion table is shown."""
        result = runner.invoke(app, ["opioids"])

        assert result.exit_code == 0
        assert "Fentanyl" in result.stdout
        assert "2,4" in result.stdout


class TestCLISearch:
    """Tests for the search command."""

    def test_search(self, data_files):
        """Test searching given catalog files."""
        result = runner.invoke(
            app, ["search", "paracet", "--fest", str(data_files["fest"]), "--pim", str(data_files["pim"])]
        )

        assert result.exit_code == 0
        assert "[FEST]" in result.stdout
        assert "311148" in result.stdout

    def test_search_json(self, data_files):
        """Test JSON output."""
        result = runner.invoke(app, ["search", "75 mg", "--fest", str(data_files["fest"]), "--json"])

        assert result.exit_code == 0
        items = json.loads(result.stdout)
        assert [item["id"] for item in items] == ["FEST:ID_CLOPIDOGREL"]

    def test_search_no_match(self, data_files):
        """Test a query without hits."""
        result = runner.invoke(app, ["search", "xyzzy", "--fest", str(data_files["fest"])])

        assert result.exit_code == 0
        assert "No matches" in result.stdout

    def test_search_missing_file(self, tmp_path: Path):
        """Test error when a catalog file doesn't exist."""
        result = runner.invoke(app, ["search", "paracet", "--fest", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "error" in result.stdout.lower()


class TestCLIInteractions:
    """Tests for the interactions and suggest commands."""

    def test_interactions(self, data_files):
        """Test finding an interaction."""
        result = runner.invoke(
            app, ["interactions", "tramadol", "sertralin", "--data", str(data_files["interactions"])]
        )

        assert result.exit_code == 0
        assert "Tramadol × SSRI" in result.stdout
        assert "Bør unngås" in result.stdout
        assert "1 interaction(s)" in result.stdout

    def test_no_interactions(self, data_files):
        """Test substances without interactions."""
        result = runner.invoke(
            app, ["interactions", "morfin", "oksykodon", "--data", str(data_files["interactions"])]
        )

        assert result.exit_code == 0
        assert "No interactions found" in result.stdout

    def test_interactions_not_configured(self):
        """Test error without an interaction register."""
        result = runner.invoke(app, ["interactions", "tramadol", "sertralin"])

        assert result.exit_code == 1
        assert "error" in result.stdout.lower()

    def test_suggest(self, data_files):
        """Test substance suggestions."""
        result = runner.invoke(app, ["suggest", "tram", "--data", str(data_files["interactions"])])

        assert result.exit_code == 0
        assert "Tramadol (N02AX02)" in result.stdout


class TestCLIConfig:
    """Tests for the global options."""

    def test_config_file(self, tmp_path: Path, data_files):
        """Test datasets from a config file."""
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"data": {"interactions_path": str(data_files["interactions"])}}))

        result = runner.invoke(app, ["--config", str(config), "interactions", "N02A", "N05BA01"])

        assert result.exit_code == 0
        assert "1 interaction(s)" in result.stdout

    def test_missing_config(self, tmp_path: Path):
        """Test error when the config file doesn't exist."""
        result = runner.invoke(app, ["--config", str(tmp_path / "missing.yaml"), "parse", "538145"])

        assert result.exit_code == 1
        assert "not found" in result.stdout.lower()

    def test_bad_log_level(self, tmp_path: Path):
        """Test error when the config names an unknown logging level."""
        config = tmp_path / "config.yaml"
        config.write_text(yaml.safe_dump({"logging": {"level": "LOUD"}}))

        result = runner.invoke(app, ["--config", str(config), "version"])

        assert result.exit_code == 1
        assert "Unknown logging level" in result.stdout

    def test_malformed_config(self, tmp_path: Path):
        """Test error when the config is not valid YAML."""
        config = tmp_path / "config.yaml"
        config.write_text("logging: [unclosed\n")

        result = runner.invoke(app, ["--config", str(config), "version"])

        assert result.exit_code == 1
        assert "error" in result.stdout.lower()

    def test_verbose(self):
        """Test verbose flag is accepted."""
        result = runner.invoke(app, ["--verbose", "version"])

        assert result.exit_code == 0


class TestCLIVersion:
    """Tests for the version command."""

    def test_version(self):
        """Test version output."""
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "pharmacy-tools version 0.1.0" in result.stdout
