"""Tests for the SLOP line parser."""

import pytest

from pyslop import (
    EmptyKey,
    InvalidLine,
    MalformedListOpen,
    SlopDocument,
    SlopList,
    SlopParseError,
    SlopString,
    UnterminatedList,
    parse,
    parse_into,
)
from pyslop.parser import iter_pairs


# ---------------------------------------------------------------------------
# String kvs / comments / blanks
# ---------------------------------------------------------------------------

def test_parse_empty_text():
    doc = parse("")
    assert doc.is_empty()
    assert len(doc) == 0

def test_parse_blank_lines_only():
    assert parse("\n   \n\t\n").is_empty()

def test_parse_comment_skipped():
    doc = parse("# hello\nkey=value\n")
    assert list(doc.items()) == [("key", SlopString("value"))]

def test_parse_indented_comment_skipped():
    doc = parse("   # hello\nkey=value\n")
    assert list(doc) == ["key"]

def test_parse_value_keeps_hash():
    assert parse("key=a#b\n")["key"] == SlopString("a#b")

def test_parse_value_verbatim():
    doc = parse("key= spaced value  \n")
    assert doc.get_string("key") == " spaced value  "

def test_parse_value_split_on_first_equals():
    assert parse("a=b=c")["a"] == SlopString("b=c")

def test_parse_value_may_contain_braces():
    assert parse("a=x{y}{\n").get_string("a") == "x{y}{"

def test_parse_empty_value():
    assert parse("a=\n")["a"] == SlopString("")

def test_parse_leading_whitespace_stripped_from_key():
    assert list(parse("    key=v")) == ["key"]

def test_parse_trailing_whitespace_kept_in_key():
    doc = parse("key =v\n")
    assert "key " in doc
    assert "key" not in doc

def test_parse_internal_whitespace_kept_in_key():
    assert parse("some key=v").get_string("some key") == "v"

def test_parse_no_trailing_newline():
    assert parse("a=1").get_string("a") == "1"

def test_parse_crlf():
    doc = parse("a=1\r\nb{\r\nx\r\n}\r\n")
    assert doc.get_string("a") == "1"
    assert doc.get_list("b") == ["x"]

def test_parse_strips_only_one_cr():
    assert parse("a=1\r\r\n").get_string("a") == "1\r"


# ---------------------------------------------------------------------------
# List kvs
# ---------------------------------------------------------------------------

def test_parse_list():
    doc = parse("key{\nitem 1\nitem 2\n}\n")
    assert doc["key"] == SlopList(["item 1", "item 2"])

def test_parse_empty_list():
    assert parse("key{\n}\n")["key"] == SlopList([])

def test_parse_list_items_verbatim():
    doc = parse("key{\n    indented  \n# not a comment\n\n}\n")
    assert doc.get_list("key") == ["    indented  ", "# not a comment", ""]

def test_parse_list_no_nesting():
    doc = parse("key{\ninner{\n}\n")
    assert doc.get_list("key") == ["inner{"]
    assert "inner" not in doc

def test_parse_list_closing_brace_may_be_indented():
    assert parse("key{\na\n    }\n").get_list("key") == ["a"]

def test_parse_list_closing_brace_with_trailing_text_is_item():
    doc = parse("key{\n} \n}x\n}\n")
    assert doc.get_list("key") == ["} ", "}x"]

def test_parse_list_items_with_equals():
    assert parse("k{\na=b\n}").get_list("k") == ["a=b"]

def test_parse_list_open_indented():
    assert parse("  key{\nx\n}").get_list("key") == ["x"]

def test_parse_mixed_document():
    text = (
        "# settings\n"
        "name=slop\n"
        "\n"
        "tags{\n"
        "    tiny\n"
        "    readable\n"
        "}\n"
        "version=1\n"
    )
    doc = parse(text)
    assert list(doc) == ["name", "tags", "version"]
    assert doc.get_list("tags") == ["    tiny", "    readable"]


# ---------------------------------------------------------------------------
# Overwrites
# ---------------------------------------------------------------------------

def test_parse_duplicate_key_overwrites_in_place():
    doc = parse("a=1\nb=2\na=3\n")
    assert list(doc) == ["a", "b"]
    assert doc.get_string("a") == "3"

def test_parse_duplicate_key_may_change_kind():
    doc = parse("a=1\nb=2\na{\nx\n}\n")
    assert list(doc) == ["a", "b"]
    assert doc["a"] == SlopList(["x"])

def test_iter_pairs_keeps_duplicates():
    pairs = list(iter_pairs("a=1\na=2\n"))
    assert pairs == [("a", SlopString("1")), ("a", SlopString("2"))]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

def test_parse_invalid_line():
    with pytest.raises(InvalidLine) as exc:
        parse("a=1\njust some words\n")
    assert exc.value.lineno == 2
    assert exc.value.line == "just some words"

def test_parse_empty_key_string():
    with pytest.raises(EmptyKey) as exc:
        parse("=value")
    assert exc.value.lineno == 1

def test_parse_empty_key_after_whitespace():
    with pytest.raises(EmptyKey):
        parse("   =value")

def test_parse_empty_key_list():
    with pytest.raises(EmptyKey):
        parse("{\n}\n")

def test_parse_malformed_list_open():
    with pytest.raises(MalformedListOpen) as exc:
        parse("a=1\n\nkey{ trailing\n}\n")
    assert exc.value.lineno == 3

def test_parse_list_open_with_trailing_space_is_malformed():
    with pytest.raises(MalformedListOpen):
        parse("key{ \n}\n")

def test_parse_brace_before_equals_is_malformed():
    with pytest.raises(MalformedListOpen):
        parse("a{b=c\n")

def test_parse_unterminated_list():
    with pytest.raises(UnterminatedList) as exc:
        parse("key{\nitem\n")
    assert exc.value.lineno == 1
    assert exc.value.line == "key{"

def test_parse_unterminated_list_after_nested_open():
    with pytest.raises(UnterminatedList):
        parse("a{\nb{\n}\nc{\n")

def test_parse_errors_share_base():
    for text in ("x", "=x", "a{b", "a{"):
        with pytest.raises(SlopParseError):
            parse(text)

def test_parse_error_message_has_line_number():
    with pytest.raises(InvalidLine, match=r"in line 2"):
        parse("\nbad\n")

def test_parse_closed_brace_outside_list_is_invalid():
    with pytest.raises(InvalidLine):
        parse("}\n")


# ---------------------------------------------------------------------------
# parse_into
# ---------------------------------------------------------------------------

def test_parse_into_merges():
    doc = parse("a=1\nb=2\n")
    parse_into("b=3\nc=4\n", doc)
    assert list(doc) == ["a", "b", "c"]
    assert doc.get_string("b") == "3"

def test_parse_into_failure_leaves_document_untouched():
    doc = parse("a=1\n")
    with pytest.raises(UnterminatedList):
        parse_into("a=2\nb{\n", doc)
    assert doc == parse("a=1\n")

def test_update_from_text():
    doc = SlopDocument()
    doc.update_from_text("k{\nv\n}")
    assert doc.get_list("k") == ["v"]

def test_from_text():
    assert SlopDocument.from_text("a=1") == parse("a=1")
