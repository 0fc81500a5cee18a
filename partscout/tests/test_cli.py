from pathlib import Path

from typer.testing import CliRunner

from partscout.cli import app

runner = CliRunner()


def test_extract_json_command_recovers_fenced_object(tmp_path: Path) -> None:
    captured = tmp_path / "response.txt"
    captured.write_text('Here you go:\n```json\n{"categories": []}\n```\n', encoding="utf-8")

    result = runner.invoke(app, ["extract-json", str(captured)])

    assert result.exit_code == 0
    assert '"categories"' in result.output


def test_extract_json_command_fails_on_prose(tmp_path: Path) -> None:
    captured = tmp_path / "response.txt"
    captured.write_text("I could not find any parts.", encoding="utf-8")

    result = runner.invoke(app, ["extract-json", str(captured)])

    assert result.exit_code == 1
