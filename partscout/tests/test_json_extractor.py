import pytest

from partscout.services.json_extractor import (
    MalformedExtraction,
    extract_json,
    extract_json_object_span,
    preview,
)


def test_extract_json_ignores_surrounding_prose() -> None:
    text = 'Sure! Here you go: {"categories": [{"name": "Sensors"}]} Hope that helps {x}.'
    assert extract_json(text) == {"categories": [{"name": "Sensors"}]}


def test_extract_json_prefers_fenced_block() -> None:
    text = 'Ignore {this}\n```json\n[{"category": "MCU", "queries": ["a"]}]\n```\nthanks'
    assert extract_json(text) == [{"category": "MCU", "queries": ["a"]}]


def test_extract_json_accepts_untagged_fence() -> None:
    text = "```\n{\"a\": 1}\n```"
    assert extract_json(text) == {"a": 1}


def test_extract_json_recovers_value_from_noisy_fence() -> None:
    text = "```json\n{\"a\": 1}\nNote: values are approximate\n```"
    assert extract_json(text) == {"a": 1}


def test_extract_json_uses_earliest_opening_token() -> None:
    text = 'Plan: [{"category": "Power", "queries": []}] and {"ignored": true}'
    assert extract_json(text) == [{"category": "Power", "queries": []}]


def test_extract_json_skips_bracketed_prose() -> None:
    text = 'categories [see below]: {"categories": [{"name": "Sensors"}]}'
    assert extract_json(text) == {"categories": [{"name": "Sensors"}]}


def test_extract_json_handles_braces_inside_strings() -> None:
    text = 'Result {"name": "LED {red}", "note": "use \\"}\\" carefully"} done'
    assert extract_json(text) == {"name": "LED {red}", "note": 'use "}" carefully'}


def test_extract_json_nested_values() -> None:
    text = 'x {"components": [{"name": "A", "options": [{"name": "B", "pros": []}]}]} y'
    value = extract_json(text)
    assert value["components"][0]["options"][0]["name"] == "B"


def test_extract_json_rejects_text_without_json() -> None:
    with pytest.raises(MalformedExtraction):
        extract_json("I could not find any components for this project.")


def test_extract_json_rejects_truncated_output() -> None:
    with pytest.raises(MalformedExtraction):
        extract_json('{"categories": [{"name": "Sensors"')


def test_extract_json_rejects_invalid_span() -> None:
    with pytest.raises(MalformedExtraction):
        extract_json("{name: Sensors}")


def test_extract_json_object_span_runs_to_last_brace() -> None:
    text = 'Here is the list {"finalParts": []} and some {notes} afterwards'
    with pytest.raises(MalformedExtraction):
        extract_json_object_span(text)


def test_extract_json_object_span_tolerates_commentary() -> None:
    assert extract_json_object_span('Answer: {"finalParts": [{"a": {}}]} done') == {
        "finalParts": [{"a": {}}]
    }


def test_extract_json_object_span_requires_braces() -> None:
    with pytest.raises(MalformedExtraction):
        extract_json_object_span("} nothing here {")
    with pytest.raises(MalformedExtraction):
        extract_json_object_span("no braces")


def test_preview_squashes_whitespace_and_clips() -> None:
    assert preview("a\n\n b   c") == "a b c"
    assert preview("abcdefgh", limit=3) == "abc..."
