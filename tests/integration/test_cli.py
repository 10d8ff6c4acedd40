"""
Integration tests for the grantmatrix CLI.

Tests cover:
- validate against an allow-list and against a directory
- translate in both directions
- matrix and check
- error reporting and exit codes
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from grantmatrix import __version__
from grantmatrix.cli import app

runner = CliRunner()


@pytest.fixture
def files(temp_dir, sample_rules_yaml, sample_allow_yaml, sample_directory_yaml) -> dict[str, Path]:
    """Write the sample rule set, allow-list and directory config to disk."""
    paths = {
        "rules": temp_dir / "rules.yaml",
        "allow": temp_dir / "allowed.yaml",
        "directory": temp_dir / "directory.yaml",
    }
    paths["rules"].write_text(sample_rules_yaml)
    paths["allow"].write_text(sample_allow_yaml)
    paths["directory"].write_text(sample_directory_yaml)
    return paths


def write_rules(temp_dir: Path, body: str) -> Path:
    path = temp_dir / "custom.yaml"
    path.write_text(body)
    return path


INVALID_RULES = """
authorizations:
  - realm_id: master
    group_id: g1
    action: read
    target_realm_id: R1
    target_group_id: G1
  - realm_id: master
    group_id: g1
    action: read
    target_realm_id: R1
    target_group_id: G9
"""

NAME_RULES = """
authorizations:
  - realm_id: master
    group_id: g1
    action: read
    target_realm_id: R1
    target_group_id: operators
  - realm_id: master
    group_id: g1
    action: read
    target_realm_id: R1
    target_group_id: ghosts
"""

WILDCARD_RULES = """
authorizations:
  - realm_id: master
    group_id: g1
    action: admin
    target_realm_id: "*"
    target_group_id: "*"
"""


class TestVersion:
    """Tests for the --version flag."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_with_allow_list(self, files) -> None:
        """A valid rule set exits 0."""
        result = runner.invoke(app, ["validate", str(files["rules"]), "--allow", str(files["allow"])])
        assert result.exit_code == 0
        assert "3 authorizations are valid" in result.stdout

    def test_valid_with_directory(self, files) -> None:
        """The directory snapshot serves as the allow-list."""
        result = runner.invoke(app, ["validate", str(files["rules"]), "-d", str(files["directory"])])
        assert result.exit_code == 0

    def test_invalid_exits_1(self, files, temp_dir) -> None:
        """An invalid rule set exits 1 and names the error."""
        rules = write_rules(temp_dir, INVALID_RULES)
        result = runner.invoke(app, ["validate", str(rules), "--allow", str(files["allow"])])
        assert result.exit_code == 1
        assert "E1003" in result.stdout

    def test_invalid_json(self, files, temp_dir) -> None:
        """JSON output carries the offending record index."""
        rules = write_rules(temp_dir, INVALID_RULES)
        result = runner.invoke(
            app, ["validate", str(rules), "--allow", str(files["allow"]), "--json"]
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["valid"] is False
        assert data["error"]["error_type"] == "InvalidTargetGroupError"
        assert data["error"]["context"]["record_index"] == 1

    def test_wildcards_need_directory_or_explicit_allow(self, files, temp_dir) -> None:
        """'*' is rejected by a plain allow-list and accepted via a directory."""
        rules = write_rules(temp_dir, WILDCARD_RULES)

        with_allow = runner.invoke(app, ["validate", str(rules), "--allow", str(files["allow"])])
        with_directory = runner.invoke(app, ["validate", str(rules), "-d", str(files["directory"])])

        assert with_allow.exit_code == 1
        assert with_directory.exit_code == 0

    def test_requires_one_source(self, files) -> None:
        """Neither or both of --allow/--directory is a usage error."""
        neither = runner.invoke(app, ["validate", str(files["rules"]), "--json"])
        both = runner.invoke(
            app,
            [
                "validate", str(files["rules"]),
                "--allow", str(files["allow"]),
                "--directory", str(files["directory"]),
                "--json",
            ],
        )
        for result in (neither, both):
            assert result.exit_code == 1
            assert json.loads(result.stdout)["error_type"] == "usage_error"

    def test_malformed_rules(self, files, temp_dir) -> None:
        """Load errors are reported with their type."""
        rules = write_rules(temp_dir, "authorizations:\n  - realm_id: master\n")
        result = runner.invoke(
            app, ["validate", str(rules), "--allow", str(files["allow"]), "--json"]
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error_type"] == "RuleSetLoadError"

    def test_missing_file(self, files, temp_dir) -> None:
        """Missing paths are rejected before running."""
        result = runner.invoke(
            app, ["validate", str(temp_dir / "nope.yaml"), "--allow", str(files["allow"])]
        )
        assert result.exit_code != 0


class TestTranslateCommand:
    """Tests for the translate command."""

    def test_to_names(self, files) -> None:
        """IDs become names for the chosen realm."""
        result = runner.invoke(
            app,
            ["translate", str(files["rules"]), "-d", str(files["directory"]),
             "--to", "names", "--realm", "R1", "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["dropped_count"] == 0
        assert data["authorizations"][0]["target_group_id"] == "operators"

    def test_to_names_requires_realm(self, files) -> None:
        """--to names without --realm is a usage error."""
        result = runner.invoke(
            app, ["translate", str(files["rules"]), "-d", str(files["directory"]), "--to", "names"]
        )
        assert result.exit_code == 1
        assert "--realm" in result.stdout

    def test_to_ids_drops_unknown(self, files, temp_dir) -> None:
        """Unknown names are dropped and counted."""
        rules = write_rules(temp_dir, NAME_RULES)
        result = runner.invoke(
            app, ["translate", str(rules), "-d", str(files["directory"]), "--to", "ids", "--json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["dropped_count"] == 1
        assert [r["target_group_id"] for r in data["authorizations"]] == ["G1"]

    def test_console_reports_drops(self, files, temp_dir) -> None:
        """The console output mentions dropped records."""
        rules = write_rules(temp_dir, NAME_RULES)
        result = runner.invoke(
            app, ["translate", str(rules), "-d", str(files["directory"]), "--to", "ids"]
        )
        assert result.exit_code == 0
        assert "Dropped 1 record" in result.stdout


class TestMatrixCommand:
    """Tests for the matrix command."""

    def test_json(self, files) -> None:
        result = runner.invoke(app, ["matrix", str(files["rules"]), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["grant_count"] == 3
        assert len(data["buckets"]) == 3

    def test_console(self, files) -> None:
        result = runner.invoke(app, ["matrix", str(files["rules"])])
        assert result.exit_code == 0
        assert "Authorization matrix" in result.stdout


class TestCheckCommand:
    """Tests for the check command."""

    def test_granted(self, files) -> None:
        """A covered tuple exits 0."""
        result = runner.invoke(
            app, ["check", str(files["rules"]), "g1", "read", "-R", "R1", "-G", "G1"]
        )
        assert result.exit_code == 0
        assert "granted" in result.stdout

    def test_denied(self, files) -> None:
        """An uncovered tuple exits 1."""
        result = runner.invoke(
            app, ["check", str(files["rules"]), "g1", "read", "-R", "R1", "-G", "G2", "--json"]
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["granted"] is False

    def test_unscoped(self, files) -> None:
        """Unscoped grants answer queries without targets."""
        result = runner.invoke(app, ["check", str(files["rules"]), "g2", "list"])
        assert result.exit_code == 0

    def test_wildcard(self, temp_dir) -> None:
        """('*', '*') grants cover any concrete target."""
        rules = write_rules(temp_dir, WILDCARD_RULES)
        result = runner.invoke(app, ["check", str(rules), "g1", "admin", "-R", "R7", "-G", "X"])
        assert result.exit_code == 0
