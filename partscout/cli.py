"""CLI entrypoint for PartScout."""

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from partscout.cli_ui import build_progress_reporter, build_progress_ui, show_result
from partscout.core.logging import add_file_handler, setup_logging
from partscout.core.settings import get_settings
from partscout.services.json_extractor import MalformedExtraction, extract_json
from partscout.workflows.parts_agent import PartsAgentError, build_agent_deps, run_parts_agent

app = typer.Typer(add_completion=False)
console = Console()
settings = get_settings()

DESCRIPTION_ARGUMENT = typer.Argument(..., help="Project description to build a parts list for")
JSON_OPTION = typer.Option(False, "--json", help="Print the raw JSON result")
LOG_FILE_OPTION = typer.Option(None, help="Also write logs to this file")
MODEL_OPTION = typer.Option(None, help="Override the reasoning model")


@app.command()
def run(
    description: str = DESCRIPTION_ARGUMENT,
    as_json: bool = JSON_OPTION,
    log_file: Path | None = LOG_FILE_OPTION,
    model: str | None = MODEL_OPTION,
) -> None:
    """Build a compatible parts list for a project."""

    setup_logging(settings.log_level)
    if log_file is not None:
        add_file_handler(log_file, settings.log_level)

    try:
        deps = build_agent_deps(settings, model_name=model)
    except PartsAgentError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    ui = build_progress_ui(console)
    reporter = build_progress_reporter(ui)
    ui.start()
    try:
        result = asyncio.run(run_parts_agent(description, deps, reporter=reporter))
    except PartsAgentError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    finally:
        ui.stop()

    if as_json:
        console.print_json(json.dumps(result.to_payload()))
        return

    console.print(Panel.fit("PartScout complete", style="green"))
    show_result(console, result)


@app.command("extract-json")
def extract_json_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Captured response"),
) -> None:
    """Recover the JSON value embedded in a captured model response."""

    text = path.read_text(encoding="utf-8", errors="ignore")
    try:
        value = extract_json(text)
    except MalformedExtraction as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    console.print_json(json.dumps(value))


def main() -> None:
    """CLI entrypoint."""

    app()


if __name__ == "__main__":
    main()
