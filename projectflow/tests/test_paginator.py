"""Page layout for generated documentation."""

import pytest

from projectflow.features.documentation.paginator import (
    BODY_FONT_SIZE,
    BODY_START_Y,
    BOTTOM_LIMIT_Y,
    CONTINUATION_START_Y,
    MARGIN_X,
    normalize_sections,
    paginate,
    pdf_safe,
    wrap_paragraph,
    BODY_FONT,
)


def lines(n: int) -> str:
    return "\n".join(f"Line {i}" for i in range(1, n + 1))


def test_short_body_fits_on_one_page():
    layout = paginate("Hello\nWorld", "Task Flow Documentation")

    assert layout.page_count == 1
    assert layout.footer(1) == "Page 1 of 1"
    assert layout.pages[0].lines[0].y == BODY_START_Y


def test_empty_body_has_one_page():
    layout = paginate("", "Task Flow Documentation")

    assert layout.page_count == 1
    assert layout.footer(1) == "Page 1 of 1"


@pytest.mark.parametrize(
    "line_count, expected_pages",
    [(35, 1), (36, 2), (72, 2), (73, 3), (110, 4)],
)
def test_page_count_follows_line_capacity(line_count, expected_pages):
    layout = paginate(lines(line_count), "Doc")

    assert layout.page_count == expected_pages
    assert [p.number for p in layout.pages] == list(range(1, expected_pages + 1))
    for page in layout.pages:
        assert layout.footer(page.number) == f"Page {page.number} of {expected_pages}"


def test_continuation_pages_restart_below_small_banner():
    layout = paginate(lines(40), "Doc")

    second = layout.pages[1]
    assert second.is_continuation
    assert second.lines[0].y == CONTINUATION_START_Y
    assert second.lines[0].text == "Line 36"
    assert layout.continuation_title == "Doc (continued)"
    assert not layout.pages[0].is_continuation


def test_no_line_starts_below_bottom_limit():
    layout = paginate(lines(150), "Doc")

    for page in layout.pages:
        for line in page.lines:
            assert line.y <= BOTTOM_LIMIT_Y
            assert line.x == MARGIN_X


def test_heading_sizes_are_ordered():
    layout = paginate("# Title\n## Section\n### Detail\nBody text", "Doc")
    by_text = {line.text: line for line in layout.pages[0].lines}

    h1, h2, h3, body = by_text["Title"], by_text["Section"], by_text["Detail"], by_text["Body text"]
    assert h1.font_size > h2.font_size > h3.font_size > body.font_size
    assert h1.font_size == max(line.font_size for line in layout.pages[0].lines)
    assert (h1.level, h2.level, h3.level, body.level) == (1, 2, 3, 0)
    assert body.font_size == BODY_FONT_SIZE
    assert h1.font_name.endswith("Bold")
    assert body.font_name == BODY_FONT


def test_heading_adds_space_before_and_after():
    layout = paginate("Intro\n# Title\nAfter", "Doc")
    intro, gap, title, after = layout.pages[0].lines

    assert (intro.text, gap.text, title.text, after.text) == ("Intro", "", "Title", "After")
    assert title.y == gap.y + 7 + 5
    assert after.y == title.y + 7 + 3


def test_prose_before_heading_is_separated():
    assert normalize_sections("Intro text\n## Setup\nRun it") == "Intro text\n\n## Setup\nRun it"


def test_long_word_is_hard_wrapped_to_column():
    word = "x" * 400

    pieces = wrap_paragraph(word, BODY_FONT, BODY_FONT_SIZE)

    assert len(pieces) > 1
    assert "".join(pieces) == word


def test_long_paragraph_wraps_into_several_lines():
    paragraph = " ".join(["documentation"] * 60)

    layout = paginate(paragraph, "Doc")

    assert len(layout.pages[0].lines) > 1
    assert " ".join(line.text for line in layout.pages[0].lines) == paragraph


def test_typographic_characters_become_encodable():
    assert pdf_safe("“Quoted” — done…") == '"Quoted" - done...'
