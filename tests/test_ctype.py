import string

import pytest

from kernkit import ctype
from kernkit.ctype import CharClass

ASCII = range(128)
HIGH = range(128, 256)


@pytest.mark.parametrize("code", ASCII)
def test_letters_and_digits_match_python(code):
    ch = chr(code)
    assert ctype.isalpha(code) == ch.isalpha()
    assert ctype.isdigit(code) == ch.isdigit()
    assert ctype.isupper(code) == ch.isupper()
    assert ctype.islower(code) == ch.islower()
    assert ctype.isalnum(code) == ch.isalnum()


@pytest.mark.parametrize("code", ASCII)
def test_space_punct_hex_match_string_sets(code):
    ch = chr(code)
    assert ctype.isspace(code) == (ch in string.whitespace)
    assert ctype.ispunct(code) == (ch in string.punctuation)
    assert ctype.isxdigit(code) == (ch in string.hexdigits)


@pytest.mark.parametrize("code", ASCII)
def test_print_graph_cntrl(code):
    ch = chr(code)
    assert ctype.isprint(code) == ch.isprintable()
    assert ctype.iscntrl(code) == (not ch.isprintable())
    assert ctype.isgraph(code) == (ch.isprintable() and ch != " ")


@pytest.mark.parametrize("code", list(HIGH) + [ctype.EOF])
def test_high_bytes_and_eof_have_no_class(code):
    flags = [
        ctype.isalnum(code),
        ctype.isalpha(code),
        ctype.iscntrl(code),
        ctype.isdigit(code),
        ctype.isgraph(code),
        ctype.islower(code),
        ctype.isprint(code),
        ctype.ispunct(code),
        ctype.isspace(code),
        ctype.isupper(code),
        ctype.isxdigit(code),
    ]
    assert flags == [False] * 11


def test_space_is_hard_space_only_for_blank():
    assert ctype.isprint(" ")
    assert not ctype.isprint("\t")
    assert ctype.isspace("\t")


def test_str_arguments():
    assert ctype.isupper("Q")
    assert ctype.isdigit("7")
    assert not ctype.isalpha("7")


@pytest.mark.parametrize("code", ASCII)
def test_case_conversion_matches_python(code):
    ch = chr(code)
    assert ctype.tolower(code) == ord(ch.lower())
    assert ctype.toupper(code) == ord(ch.upper())
    assert ctype.tolower(ch) == ch.lower()
    assert ctype.toupper(ch) == ch.upper()


@pytest.mark.parametrize("code", HIGH)
def test_case_conversion_leaves_high_bytes(code):
    assert ctype.tolower(code) == code
    assert ctype.toupper(code) == code


def test_ascii_helpers():
    assert all(ctype.isascii(c) for c in ASCII)
    assert not any(ctype.isascii(c) for c in HIGH)
    assert not ctype.isascii(-1)
    assert ctype.toascii(ord("A") | 0x80) == ord("A")
    assert all(ctype.toascii(c) == c for c in ASCII)


def test_out_of_range_codes_raise():
    with pytest.raises(ValueError):
        ctype.isalpha(256)
    with pytest.raises(ValueError):
        ctype.isdigit(-2)
    with pytest.raises(ValueError):
        ctype.isupper("ab")


def test_charclass_bits_are_distinct():
    members = [m for m in CharClass if m != CharClass.NONE]
    combined = CharClass.NONE
    for m in members:
        assert not combined & m
        combined |= m
    assert int(combined) == 0xFF
    assert ctype.isalnum("a") and ctype.isxdigit("a")
    assert not ctype.isxdigit("g")