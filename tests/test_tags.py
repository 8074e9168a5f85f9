import pytest

from models import Priority
from tags import parse_tags


def test_extracts_priority_and_category():
    parsed = parse_tags("fix bug !high #infra")
    assert parsed.text == "fix bug"
    assert parsed.priority == Priority.HIGH
    assert parsed.category == "infra"


def test_text_without_markers_is_unchanged():
    parsed = parse_tags("no tags here")
    assert parsed.text == "no tags here"
    assert parsed.priority == Priority.LOW
    assert parsed.category == ""


@pytest.mark.parametrize("marker, expected", [
    ("!1", Priority.HIGH),
    ("!high", Priority.HIGH),
    ("!HIGH", Priority.HIGH),
    ("!2", Priority.MEDIUM),
    ("!med", Priority.MEDIUM),
    ("!Medium", Priority.MEDIUM),
    ("!3", Priority.LOW),
    ("!low", Priority.LOW),
])
def test_priority_markers(marker, expected):
    parsed = parse_tags(f"x {marker}")
    assert parsed.priority == expected
    assert parsed.text == "x"


def test_only_first_markers_are_consumed():
    parsed = parse_tags("a !1 b !3 #one #two")
    assert parsed.priority == Priority.HIGH
    assert parsed.category == "one"
    assert parsed.text == "a b !3 #two"


def test_category_is_lowercased():
    assert parse_tags("deploy #Infra").category == "infra"


def test_marker_needs_word_boundary():
    parsed = parse_tags("version !10 ships")
    assert parsed.priority == Priority.LOW
    assert parsed.text == "version !10 ships"


def test_markers_in_the_middle_leave_single_spaces():
    parsed = parse_tags("  call #home   mom !2  today ")
    assert parsed.text == "call mom today"
    assert parsed.category == "home"
    assert parsed.priority == Priority.MEDIUM


def test_adjacent_markers_are_both_found():
    parsed = parse_tags("ship it #release!1")
    assert parsed.category == "release"
    assert parsed.priority == Priority.HIGH
    assert parsed.text == "ship it"


def test_reparsing_cleaned_text_is_stable():
    first = parse_tags("buy milk #errands !3")
    second = parse_tags(first.text)
    assert second.text == first.text
    assert second.category == ""
    assert second.priority == Priority.LOW
