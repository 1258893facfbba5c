import pytest
from typer.testing import CliRunner

from bufkit.cli import app
from bufkit.config import InvalidPolicy, settings

runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "bufkit version" in result.output


def test_params():
    result = runner.invoke(app, ["params", "--group", "index"])
    assert result.exit_code == 0
    assert "CAPE" in result.output
    assert "HGHT" not in result.output

    result = runner.invoke(app, ["params", "--search", "helicity"])
    assert result.exit_code == 0
    assert "HLCY" in result.output


def test_params_no_match():
    result = runner.invoke(app, ["params", "--search", "no such parameter"])
    assert result.exit_code == 1


def test_validate(kmso_path, truncated_path):
    result = runner.invoke(app, ["validate", str(kmso_path)])
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["validate", str(kmso_path), str(truncated_path)])
    assert result.exit_code == 1
    assert "1 of 2 file(s) failed validation" in result.output


def test_validate_missing_file(tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing.buf")])
    assert result.exit_code == 1


@pytest.mark.parametrize(
    "args", [["show"], ["show", "--help"]], ids=["no_file", "help"]
)
def test_show_usage(args):
    result = runner.invoke(app, args)
    assert result.exit_code == (0 if "--help" in args else 2)


def test_show(kmso_path):
    result = runner.invoke(app, ["show", str(kmso_path)])
    assert result.exit_code == 0, result.output
    assert "727730" in result.output
    assert "Count: 3" in result.output
    assert "2017-04-01 02:00" in result.output


def test_show_on_invalid(truncated_path):
    # Truncated files can be summarized with the default policy
    result = runner.invoke(app, ["show", str(truncated_path)])
    assert result.exit_code == 0, result.output

    try:
        args = ["--on-invalid", "raise", "show", str(truncated_path)]
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "incomplete trailing row" in result.output
    finally:
        settings.set("ON_INVALID", InvalidPolicy.SKIP)
