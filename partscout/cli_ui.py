"""Terminal rendering helpers using Rich."""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn
from rich.table import Table

from partscout.models.parts import AgentRunResult, AgentStep, FinalList, PartsList
from partscout.services.reporter import RunReporter


@dataclass
class ProgressUI:
    """Progress UI wrapper."""

    progress: Progress
    step_task: TaskID

    def start(self) -> None:
        """Start the progress display."""

        self.progress.start()

    def stop(self) -> None:
        """Stop the progress display."""

        self.progress.stop()


def build_progress_ui(console: Console) -> ProgressUI:
    """Create a spinner that shows the current stage."""

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    step_task = progress.add_task("Starting", total=None)
    return ProgressUI(progress=progress, step_task=step_task)


def build_progress_reporter(ui: ProgressUI) -> RunReporter:
    """Create a RunReporter that updates the progress UI."""

    def on_step(step: AgentStep) -> None:
        ui.progress.update(ui.step_task, description=step.step)

    def on_categories_planned(count: int) -> None:
        ui.progress.console.log(f"Planned searches for {count} categories")

    def on_part_enriched(name: str, matched: bool) -> None:
        status = "matched" if matched else "no match"
        ui.progress.update(ui.step_task, description=f"Catalog lookup: {name} ({status})")

    return RunReporter(
        on_step=on_step,
        on_categories_planned=on_categories_planned,
        on_part_enriched=on_part_enriched,
    )


def build_steps_table(steps: list[AgentStep]) -> Table:
    table = Table(title="Agent steps", show_lines=False)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Step", style="bold")
    table.add_column("Queries")
    for step in steps:
        table.add_row(
            step.timestamp.strftime("%H:%M:%S"),
            step.step,
            "\n".join(step.search_queries or []),
        )
    return table


def build_parts_table(parts_list: PartsList) -> Table:
    table = Table(title="Candidate parts", show_lines=True)
    table.add_column("Category", style="cyan")
    table.add_column("Component", style="bold")
    table.add_column("Options")
    for category in parts_list.categories:
        if not category.components:
            table.add_row(category.name, "-", "[dim]no components found[/dim]")
            continue
        for component in category.components:
            table.add_row(
                category.name,
                component.name,
                "\n".join(option.name for option in component.options),
            )
    return table


def build_final_table(final_list: FinalList) -> Table:
    table = Table(title="Recommended parts", show_lines=True)
    table.add_column("Component", style="bold")
    table.add_column("Selected part", style="green")
    table.add_column("Vendor")
    table.add_column("Datasheet")
    table.add_column("Compatibility notes")
    for part in final_list.final_parts:
        option = part.selected_option
        vendor = "\n".join(
            f"{link.name} {link.price or ''}\n{link.url}".strip()
            for link in option.vendor_links or []
        )
        table.add_row(
            f"{part.component}\n[dim]{part.category}[/dim]",
            option.name,
            vendor or "[dim]not in catalog[/dim]",
            option.datasheet_link or "-",
            part.compatibility_notes,
        )
    return table


def show_result(console: Console, result: AgentRunResult) -> None:
    """Print the run trace, candidate parts and final selection."""

    console.print(build_steps_table(result.steps))
    console.print(build_parts_table(result.parts_list))

    final_list = result.final_list
    if not final_list.final_parts:
        console.print(Panel.fit("No final parts could be selected", style="yellow"))
        return

    console.print(build_final_table(final_list))
    console.print(f"[bold]Estimated total:[/bold] {final_list.total_estimated_cost or 'unknown'}")
    if final_list.compatibility_summary:
        console.print(Panel(final_list.compatibility_summary, title="Compatibility"))
    if result.usage is not None:
        console.print(f"[dim]{result.usage.summary()}[/dim]")
