"""Unit tests for the CLI entry point.

These tests verify the Click-based CLI interface for paramix, including
version output, help text, commands and exit codes.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from paramix import __version__
from paramix.main import cli

pytestmark = pytest.mark.usefixtures("clean_env", "isolated_home")


def test_version_output(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_output(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "paramix" in result.output
    for command in ("resolve", "validate", "extract"):
        assert command in result.output


def test_no_command_shows_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_exit_code_usage_error(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--invalid-option"])
    assert result.exit_code == 2


@pytest.mark.parametrize(
    ("args", "level"),
    [
        ([], logging.INFO),
        (["-v"], logging.INFO),
        (["-vv"], logging.DEBUG),
        (["-q"], logging.ERROR),
        (["-q", "-vv"], logging.ERROR),
    ],
)
def test_verbosity_levels(
    cli_runner: CliRunner,
    isolated_home: Path,
    sample_config_yaml: str,
    args: list[str],
    level: int,
) -> None:
    """Quiet beats -v, which beats the configured verbosity (info here)."""
    (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
    with patch("paramix.main.configure_logging") as mock_configure:
        result = cli_runner.invoke(cli, args)
    assert result.exit_code == 0
    mock_configure.assert_called_once_with(level=level)


def test_missing_config_file(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["-c", "nope.yaml", "resolve", "x"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_invalid_config(cli_runner: CliRunner, isolated_home: Path) -> None:
    (isolated_home / "paramix.yaml").write_text(
        "extractions:\n  - parameter: p\n    type: xpath\n    query: //a\n"
    )
    result = cli_runner.invoke(cli, ["resolve", "x"])
    assert result.exit_code == 1
    assert "Error: Invalid configuration" in result.output
    assert "Field: extractions.0.type" in result.output


class TestResolveCommand:
    """Tests for `paramix resolve`."""

    def test_substitution(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "Hello ${name}", "-p", "name=World"])
        assert result.exit_code == 0
        assert result.output == "Hello World\n"

    def test_right_associative_chain(self, cli_runner: CliRunner) -> None:
        args = ["resolve", "${x * y + z - j + k}"]
        for name, value in zip("xyzjk", "12345", strict=True):
            args += ["-p", f"{name}={value}"]
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0
        assert result.output.strip() == "-4"

    def test_malformed_span_passes_through(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "${x+y}", "-p", "x=1"])
        assert result.exit_code == 0
        assert result.output.strip() == "${x+y}"

    def test_evaluation_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "${__upper(missing)}"])
        assert result.exit_code == 1
        assert "Error: Parameter 'missing' has no value" in result.output

    def test_condition(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["resolve", "--condition", "${a == 'b'}", "-p", "a=b"]
        )
        assert result.output.strip() == "true"
        result = cli_runner.invoke(cli, ["resolve", "--condition", "${__status}"])
        assert result.output.strip() == "false"

    def test_bad_assignment(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "x", "-p", "novalue"])
        assert result.exit_code == 2

    def test_reserved_assignment(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "x", "-p", "__status=200"])
        assert result.exit_code == 1
        assert "reserved" in result.output

    def test_uses_configured_defaults(
        self, cli_runner: CliRunner, isolated_home: Path, sample_config_yaml: str
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
        result = cli_runner.invoke(cli, ["-q", "resolve", "${base_url}/posts"])
        assert result.exit_code == 0
        assert result.output.strip() == "https://api.example.com/posts"

    def test_param_overrides_default(
        self, cli_runner: CliRunner, isolated_home: Path, sample_config_yaml: str
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
        result = cli_runner.invoke(
            cli, ["-q", "resolve", "${base_url}", "-p", "host=localhost"]
        )
        assert result.output.strip() == "https://localhost"


class TestValidateCommand:
    """Tests for `paramix validate`."""

    def test_success(
        self, cli_runner: CliRunner, isolated_home: Path, sample_config_yaml: str
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
        result = cli_runner.invoke(cli, ["-q", "validate"])
        assert result.exit_code == 0
        assert "Success: 4 default parameter(s) computed" in result.output

    def test_show(
        self, cli_runner: CliRunner, isolated_home: Path, sample_config_yaml: str
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
        result = cli_runner.invoke(cli, ["-q", "validate", "--show"])
        assert result.exit_code == 0
        assert "base_url | https://api.example.com" in result.output

    def test_json(
        self, cli_runner: CliRunner, isolated_home: Path, sample_config_yaml: str
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
        result = cli_runner.invoke(cli, ["-q", "validate", "--format", "json"])
        assert result.exit_code == 0
        values = json.loads(result.output)
        assert values["greeting"] == "HELLO"
        assert values["port"] == "8080"

    def test_failures_are_listed(
        self, cli_runner: CliRunner, isolated_home: Path
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(
            "parameters:\n  ok: fine\n  broken: ${__div('1','0')}\n"
        )
        result = cli_runner.invoke(cli, ["-q", "validate"])
        assert result.exit_code == 1
        assert "Error: Default parameters could not be computed" in result.output
        assert "  broken: Division by zero" in result.output

    def test_cycle(self, cli_runner: CliRunner, isolated_home: Path) -> None:
        (isolated_home / "paramix.yaml").write_text(
            "parameters:\n  a: ${b}\n  b: ${a}\n"
        )
        result = cli_runner.invoke(cli, ["-q", "validate"])
        assert result.exit_code == 1
        assert "cycle" in result.output


class TestExtractCommand:
    """Tests for `paramix extract`."""

    @pytest.fixture
    def response_file(self, isolated_home: Path) -> Path:
        path = isolated_home / "response.json"
        path.write_text('{"post": {"id": 123, "title": null}}')
        return path

    def test_ad_hoc_query(self, cli_runner: CliRunner, response_file: Path) -> None:
        result = cli_runner.invoke(
            cli,
            ["-q", "extract", str(response_file), "--type", "jsonpath", "--query", "post.id"],
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"value": "123"}

    def test_header_query(self, cli_runner: CliRunner, response_file: Path) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "-q",
                "extract",
                str(response_file),
                "-H",
                "Location: /posts/123",
                "-t",
                "header",
                "--query",
                "location",
            ],
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"value": "/posts/123"}

    def test_jquery_attribute(self, cli_runner: CliRunner, isolated_home: Path) -> None:
        page = isolated_home / "page.html"
        page.write_text('<a class="next" href="/p/2">next</a>')
        result = cli_runner.invoke(
            cli,
            ["-q", "extract", str(page), "-t", "jquery", "--query", "a.next",
             "--attribute", "href"],
        )  # fmt: skip
        assert json.loads(result.output) == {"value": "/p/2"}

    def test_configured_extractions(
        self,
        cli_runner: CliRunner,
        isolated_home: Path,
        sample_config_yaml: str,
        response_file: Path,
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(sample_config_yaml)
        result = cli_runner.invoke(cli, ["-q", "extract", str(response_file)])
        assert result.exit_code == 0
        assert json.loads(result.output) == {"post_id": "123", "title": "null"}

    def test_type_requires_query(
        self, cli_runner: CliRunner, response_file: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["extract", str(response_file), "-t", "regexp"])
        assert result.exit_code == 2

    def test_attribute_requires_jquery(
        self, cli_runner: CliRunner, response_file: Path
    ) -> None:
        result = cli_runner.invoke(
            cli,
            ["extract", str(response_file), "-t", "jsonpath", "--query", "a",
             "--attribute", "href"],
        )  # fmt: skip
        assert result.exit_code == 2
        assert "attribute is only supported by jquery" in result.output

    def test_no_configured_extractions(
        self, cli_runner: CliRunner, response_file: Path
    ) -> None:
        result = cli_runner.invoke(cli, ["extract", str(response_file)])
        assert result.exit_code == 1
        assert "No extractions configured" in result.output

    def test_malformed_query(self, cli_runner: CliRunner, response_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["extract", str(response_file), "-t", "regexp", "--query", "(x"]
        )
        assert result.exit_code == 1
        assert "Invalid regexp query" in result.output

    def test_param_in_ad_hoc_query(
        self, cli_runner: CliRunner, response_file: Path
    ) -> None:
        result = cli_runner.invoke(
            cli,
            ["-q", "extract", str(response_file), "-t", "jsonpath",
             "--query", "$.${kind}.id", "-p", "kind=post"],
        )  # fmt: skip
        assert result.exit_code == 0
        assert json.loads(result.output) == {"value": "123"}

    def test_param_overrides_default_in_configured_query(
        self, cli_runner: CliRunner, isolated_home: Path, response_file: Path
    ) -> None:
        (isolated_home / "paramix.yaml").write_text(
            "parameters:\n"
            "  field: id\n"
            "extractions:\n"
            "  - parameter: picked\n"
            "    type: jsonpath\n"
            "    query: $.post.${field}\n"
        )
        default = cli_runner.invoke(cli, ["-q", "extract", str(response_file)])
        assert json.loads(default.output) == {"picked": "123"}

        result = cli_runner.invoke(
            cli, ["-q", "extract", str(response_file), "-p", "field=title"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == {"picked": "null"}

    def test_bad_param(self, cli_runner: CliRunner, response_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["extract", str(response_file), "-t", "header", "--query", "x",
                  "-p", "novalue"],
        )  # fmt: skip
        assert result.exit_code == 2
        assert "expected NAME=VALUE" in result.output

    def test_undecodable_response_file(
        self, cli_runner: CliRunner, isolated_home: Path
    ) -> None:
        binary = isolated_home / "response.bin"
        binary.write_bytes(b"\xff\xfe\x00{")
        result = cli_runner.invoke(
            cli, ["extract", str(binary), "-t", "regexp", "--query", "x"]
        )
        assert result.exit_code == 1
        assert "is not valid UTF-8" in result.output
        assert "Traceback" not in result.output

    def test_missing_response_file(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["extract", "missing.json"])
        assert result.exit_code == 2
