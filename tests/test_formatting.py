import pytest

from libos.formatting import format_string, snprintf


def test_plain_text_passes_through():
    assert format_string("hello world") == "hello world"


@pytest.mark.parametrize(
    "fmt, args",
    [
        ("%d", (42,)),
        ("%i", (-7,)),
        ("%5d", (42,)),
        ("%-5d|", (42,)),
        ("%05d", (42,)),
        ("%05d", (-42,)),
        ("%+d", (5,)),
        ("% d", (5,)),
        ("%x", (255,)),
        ("%X", (255,)),
        ("%#x", (255,)),
        ("%o", (8,)),
        ("%.3d", (7,)),
        ("%u", (3000000000,)),
        ("%s", ("abc",)),
        ("%10s", ("abc",)),
        ("%-10s|", ("abc",)),
        ("%.2s", ("abcdef",)),
        ("%c", (65,)),
        ("%%", ()),
        ("%*d", (5, 42)),
        ("%.*s", (2, "abcdef")),
        ("a%db%sc", (1, "x")),
    ],
)
def test_standard_conversions_match_reference(fmt, args):
    assert format_string(fmt, *args) == fmt % args


def test_sign_comes_before_space_padding():
    assert format_string("%5d", -42) == "-  42"


def test_alternate_octal_adds_leading_zero():
    assert format_string("%#o", 8) == "010"


def test_zero_precision_suppresses_zero():
    assert format_string("%.0d", 0) == ""


def test_null_string():
    assert format_string("%s", None) == "(null)"


def test_unsigned_wraps_to_int_width():
    assert format_string("%x", -1) == format_string("%x", 0xFFFFFFFF)


def test_short_modifiers_truncate():
    assert format_string("%hd", 65535) == format_string("%d", -1)
    assert format_string("%hhx", 0x1FF) == format_string("%x", 0xFF)


def test_long_modifier_keeps_wide_values():
    value = 1 << 40
    assert format_string("%lx", value) == "%x" % value


def test_negative_star_width_left_justifies():
    assert format_string("%*d|", -5, 42) == format_string("%-5d|", 42)


def test_count_conversion_reports_progress():
    seen = []
    assert format_string("abc%ndef", seen.append) == "abcdef"
    assert seen == [3]


def test_unknown_conversion_is_literal():
    assert format_string("%y") == "y"


def test_trailing_percent_dropped():
    assert format_string("abc%") == "abc"


def test_missing_argument_raises():
    with pytest.raises(TypeError):
        format_string("%d")


def test_wrong_argument_type_raises():
    with pytest.raises(TypeError):
        format_string("%d", "nope")


@pytest.mark.parametrize("size", [1, 2, 4, 6, 100])
def test_snprintf_truncates_and_reports_full_length(size):
    full = format_string("hello %d", 12345)
    text, total = snprintf(size, "hello %d", 12345)
    assert total == len(full)
    assert text == full[: size - 1]
    assert len(text) <= size - 1


def test_snprintf_zero_size():
    assert snprintf(0, "hello") == ("", len("hello"))


def test_snprintf_negative_size_rejected():
    with pytest.raises(ValueError):
        snprintf(-1, "x")