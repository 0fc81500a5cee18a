from rich.console import Console

from partscout.cli_ui import (
    build_final_table,
    build_parts_table,
    build_progress_reporter,
    build_progress_ui,
    show_result,
)
from partscout.models.parts import (
    AgentRunResult,
    AgentStep,
    CategoryParts,
    Component,
    ComponentOption,
    FinalList,
    FinalPart,
    PartsList,
    VendorLink,
)


def _render(renderable) -> str:
    console = Console(width=160, record=True)
    console.print(renderable)
    return console.export_text()


def _parts_list() -> PartsList:
    return PartsList(
        categories=[
            CategoryParts(
                name="Microcontrollers",
                components=[
                    Component(
                        name="Main MCU",
                        options=[ComponentOption(name="ATmega328P"), ComponentOption(name="RP2040")],
                    )
                ],
            ),
            CategoryParts(name="Displays", components=[]),
        ]
    )


def test_build_parts_table_lists_options() -> None:
    text = _render(build_parts_table(_parts_list()))
    assert "ATmega328P" in text
    assert "RP2040" in text
    assert "no components found" in text


def test_build_final_table_shows_vendor_or_placeholder() -> None:
    final_list = FinalList(
        final_parts=[
            FinalPart(
                category="Microcontrollers",
                component="Main MCU",
                selected_option=ComponentOption(
                    name="ATmega328P",
                    vendor_links=[
                        VendorLink(name="DigiKey", url="https://digikey.com/x", price="$2.89")
                    ],
                ),
                compatibility_notes="5V",
            ),
            FinalPart(
                category="Sensors",
                component="Temperature sensor",
                selected_option=ComponentOption(name="DS18B20"),
            ),
        ]
    )
    text = _render(build_final_table(final_list))
    assert "DigiKey $2.89" in text
    assert "not in catalog" in text


def test_progress_reporter_updates_description() -> None:
    console = Console(record=True)
    ui = build_progress_ui(console)
    reporter = build_progress_reporter(ui)

    reporter.on_step(AgentStep(step="Generating search plan"))
    assert ui.progress.tasks[0].description == "Generating search plan"

    reporter.on_part_enriched("DS18B20", False)
    assert ui.progress.tasks[0].description == "Catalog lookup: DS18B20 (no match)"

    reporter.on_categories_planned(2)
    assert "Planned searches for 2 categories" in console.export_text()


def test_show_result_with_empty_final_list() -> None:
    console = Console(width=120, record=True)
    show_result(
        console,
        AgentRunResult(steps=[], parts_list=PartsList(categories=[]), final_list=FinalList.empty()),
    )
    assert "No final parts could be selected" in console.export_text()
