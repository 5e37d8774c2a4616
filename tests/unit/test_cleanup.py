"""Tests for provider text cleanup helpers."""

from services.orchestrator.app.article.cleanup import (
    FAILURE_HEADING,
    format_failure_block,
    parse_title_meta,
    strip_conclusion_heading,
    strip_leading_title,
)


def test_parse_title_meta_from_wrapped_json() -> None:
    raw = 'Here you go:\n{"title": "Email Marketing Guide", "meta_description": "Learn it."}\nThanks'
    parsed = parse_title_meta(raw, "email marketing")
    assert parsed.title == "Email Marketing Guide"
    assert parsed.meta_description == "Learn it."


def test_parse_title_meta_falls_back_to_raw_text() -> None:
    parsed = parse_title_meta("Email Marketing That Converts", "email marketing")
    assert parsed.title == "Email Marketing That Converts"
    assert parsed.meta_description == ""


def test_parse_title_meta_drops_trailing_meta_fragment() -> None:
    parsed = parse_title_meta('Title Words "meta_description": "cut me', "kw")
    assert parsed.title == "Title Words"


def test_multiline_raw_title_keeps_first_line() -> None:
    parsed = parse_title_meta("\n\n## Email Marketing That Converts\nA second line of chatter\n", "kw")
    assert parsed.title == "Email Marketing That Converts"
    assert "\n" not in parsed.title


def test_multiline_json_title_keeps_first_line() -> None:
    parsed = parse_title_meta('{"title": "Grow Your List\\nand more", "meta_description": "m"}', "kw")
    assert parsed.title == "Grow Your List"


def test_empty_title_uses_keyword_guide() -> None:
    assert parse_title_meta('{"title": "", "meta_description": "x"}', "seo").title == "seo Guide"
    assert parse_title_meta("{}", "seo").title == "seo Guide"


def test_strip_leading_title_plain_and_heading() -> None:
    assert strip_leading_title("# My Title\nIntro text.", "My Title") == "Intro text."
    assert strip_leading_title("my title\n\nIntro text.", "My Title") == "Intro text."


def test_strip_leading_title_keeps_mentions_later() -> None:
    text = "Readers of My Title learn fast."
    assert strip_leading_title(text, "My Title") == text


def test_strip_leading_title_escapes_pattern_characters() -> None:
    title = "C++ Tips (2024)?"
    assert strip_leading_title(f"{title}\nBody", title) == "Body"


def test_strip_conclusion_heading_only_first() -> None:
    text = "## Conclusion\nWrap up.\n\n## Conclusion notes"
    assert strip_conclusion_heading(text) == "Wrap up.\n\n## Conclusion notes"


def test_failure_block() -> None:
    block = format_failure_block("All generation providers exhausted: boom")
    assert block.startswith(FAILURE_HEADING)
    assert "```\nAll generation providers exhausted: boom\n```" in block
