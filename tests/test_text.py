import pytest

from src.blinko_ics.ics.text import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    PLACEHOLDER_TITLE,
    escape_text,
    normalize,
)


class TestTitle:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("* [x] Buy milk", "Buy milk"),
            ("* [ ] Buy milk", "Buy milk"),
            ("*[done]Buy milk", "Buy milk"),
            ("- Buy milk", "Buy milk"),
            ("+ Buy milk", "Buy milk"),
            ("   Buy milk   ", "Buy milk"),
        ],
    )
    def test_strips_list_markup(self, raw, expected):
        assert normalize(raw).title == expected

    @pytest.mark.parametrize("raw", ["", "   ", "* [ ]   ", "- ", None, 17])
    def test_placeholder_when_empty(self, raw):
        assert normalize(raw).title == PLACEHOLDER_TITLE

    def test_truncated_to_limit(self):
        assert len(normalize("a" * 300).title) == MAX_TITLE_LENGTH

    def test_leading_time_expression_dropped(self):
        assert normalize("2024-01-15 14:00 Meeting").title == "Meeting"
        assert normalize("* [ ] 9:00-10:30 Standup").title == "Standup"
        assert normalize("15:30 Call mom").title == "Call mom"

    def test_inner_time_expression_kept(self):
        assert normalize("Call mom at 15:30").title == "Call mom at 15:30"

    def test_time_only_content_gets_placeholder(self):
        assert normalize("9:00-10:00").title == PLACEHOLDER_TITLE


class TestDescription:
    def test_escapes_in_order(self):
        assert normalize("a;b,c\nd\re").description == r"a\;b\,c\nd\re"

    def test_markup_stripped_independently_of_title(self):
        text = normalize("* [x] 2024-01-15 14:00 Meeting, room 2")
        assert text.title == "Meeting, room 2"
        assert text.description == r"2024-01-15 14:00 Meeting\, room 2"

    def test_missing_content_gives_empty_description(self):
        assert normalize(None).description == ""

    def test_truncated_after_escaping(self):
        desc = normalize("," * 400).description
        assert len(desc) == MAX_DESCRIPTION_LENGTH
        assert desc == r"\," * 250

    def test_truncation_never_leaves_dangling_backslash(self):
        desc = normalize("x" + "," * 400).description
        assert len(desc) <= MAX_DESCRIPTION_LENGTH
        assert not desc.endswith("\\")

    def test_literal_backslash_kept_at_cut(self):
        raw = "x" * (MAX_DESCRIPTION_LENGTH - 1) + "\\" + ", more"
        desc = normalize(raw).description
        assert desc == "x" * (MAX_DESCRIPTION_LENGTH - 1) + "\\"

    def test_literal_backslash_does_not_shift_escape_pairs(self):
        raw = "x" * (MAX_DESCRIPTION_LENGTH - 3) + "\\" + ","
        desc = normalize(raw).description
        assert desc == "x" * (MAX_DESCRIPTION_LENGTH - 3) + "\\" + r"\,"
        assert len(desc) == MAX_DESCRIPTION_LENGTH

    def test_adversarial_lengths(self):
        text = normalize("* [ ] " + "\n;," * 5000)
        assert len(text.title) <= MAX_TITLE_LENGTH
        assert len(text.description) <= MAX_DESCRIPTION_LENGTH


class TestEscapeText:
    def test_plain_text_untouched(self):
        assert escape_text("hello world") == "hello world"

    def test_crlf(self):
        assert escape_text("a\r\nb") == r"a\r\nb"
