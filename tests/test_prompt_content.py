import pytest
from pydantic import ValidationError

from app.schemas.prompt_content import (
    DEFAULT_DETAILS,
    DEFAULT_RESPONSE_PROMPT,
    DEFAULT_TITLES,
    LongTextContent,
    McqContent,
    SlideContent,
    build_content,
    dump_content,
    parse_content,
)


@pytest.mark.parametrize("index", [-1, 3, 1.0, True, "0"])
def test_mcq_invalid_correct_index_becomes_none(index):
    content = build_content("mcq", {"options": ["a", "b", "c"], "correctOptionIndex": index})
    assert content.correct_option_index is None


def test_mcq_options_are_trimmed_and_blank_ones_dropped():
    content = build_content("mcq", {
        "title": "Capitals",
        "options": [" Seoul ", "", "   ", "Busan", 7],
        "correctOptionIndex": 1,
    })

    assert isinstance(content, McqContent)
    assert content.options == ["Seoul", "Busan"]
    assert content.correct_option_index == 1
    assert content.question == "Capitals"


def test_defaults_per_kind():
    for kind in ("mcq", "short_text", "long_text", "slide"):
        content = build_content(kind, {})
        assert content.kind == kind
        assert content.title == DEFAULT_TITLES[kind]
        assert content.detail == DEFAULT_DETAILS[kind]

    assert build_content("short_text", {"prompt": "  "}).prompt == DEFAULT_RESPONSE_PROMPT


def test_explicit_blank_detail_is_kept():
    assert build_content("slide", {"detail": "  "}).detail == ""


def test_limits_must_be_positive():
    with pytest.raises(ValidationError):
        build_content("short_text", {"charLimit": 0})
    with pytest.raises(ValidationError):
        build_content("long_text", {"wordLimit": -5})


def test_dump_uses_camel_case_keys():
    data = dump_content(build_content("long_text", {"wordLimit": 200, "rubricHint": " cite a source "}))

    assert data["kind"] == "long_text"
    assert data["wordLimit"] == 200
    assert data["rubricHint"] == "cite a source"


def test_parse_trusts_row_kind():
    content = parse_content("slide", {"kind": "mcq", "title": "Intro", "assetUrl": "https://cdn.test/a.png"})

    assert isinstance(content, SlideContent)
    assert content.asset_url == "https://cdn.test/a.png"


def test_parse_fills_missing_fields():
    content = parse_content("long_text", None)

    assert isinstance(content, LongTextContent)
    assert content.title == DEFAULT_TITLES["long_text"]
    assert content.prompt == DEFAULT_RESPONSE_PROMPT
