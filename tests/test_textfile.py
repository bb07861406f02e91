import pytest

from dumakit.textfile import ErrorType, TextFile


@pytest.fixture
def make_file(tmp_path):
    def _make(text, name="sample.txt"):
        path = tmp_path / name
        path.write_bytes(text.encode("latin-1"))
        return path

    return _make


def test_missing_file_reports_open_error(tmp_path):
    tf = TextFile(tmp_path / "does-not-exist.txt")
    assert tf.error() == ErrorType.OPEN
    assert tf.eof() is True
    assert tf.read_char() is None
    assert tf.read_hex() == 0
    assert tf.read_string() == ""


def test_read_char_and_line_counting(make_file):
    tf = TextFile(make_file("ab\ncd"))
    chars = [tf.read_char() for _ in range(5)]
    assert chars == list("ab\ncd")
    assert tf.line() == 2
    assert tf.read_char() is None
    assert tf.eof() is True
    assert tf.error() == ErrorType.NONE


def test_peek_does_not_consume(make_file):
    tf = TextFile(make_file("xy"))
    assert tf.peek_char() == "x"
    assert tf.peek_char() == "x"
    assert tf.read_char() == "x"
    assert tf.peek_char() == "y"


def test_read_string_tokens(make_file):
    tf = TextFile(make_file("  alpha beta\n\tgamma"))
    assert tf.read_string() == "alpha"
    assert tf.read_string() == "beta"
    assert tf.read_string() == "gamma"
    assert tf.read_string() == ""
    assert tf.line() == 2


def test_read_string_truncates_and_skips_rest(make_file):
    tf = TextFile(make_file("abcdefg next"))
    assert tf.read_string(4) == "abc"
    assert tf.read_string() == "next"


def test_read_string_size_one_stores_nothing(make_file):
    tf = TextFile(make_file("skipped kept"))
    assert tf.read_string(1) == ""
    assert tf.read_string() == "kept"


def test_read_hex_values(make_file):
    tf = TextFile(make_file("1a2B ff"))
    assert tf.read_hex() == 0x1A2B
    assert tf.read_hex() == 0xFF
    assert tf.error() == ErrorType.NONE


def test_read_hex_stops_at_non_hex(make_file):
    tf = TextFile(make_file("12:34"))
    assert tf.read_hex() == 0x12
    assert tf.read_char() == ":"
    assert tf.read_hex() == 0x34


def test_read_hex_alnum_non_hex_gives_zero_without_error(make_file):
    tf = TextFile(make_file("zz"))
    assert tf.read_hex() == 0
    assert tf.error() == ErrorType.NONE
    assert tf.read_string() == "zz"


def test_read_hex_on_punctuation_is_parse_error(make_file):
    tf = TextFile(make_file(":abc"))
    assert tf.read_hex() == 0
    assert tf.error() == ErrorType.PARSE
    assert tf.read_string() == ""
    assert tf.eof() is True


def test_read_hex_at_end_is_parse_error(make_file):
    tf = TextFile(make_file("   "))
    assert tf.read_hex() == 0
    assert tf.error() == ErrorType.PARSE


def test_skip_line(make_file):
    tf = TextFile(make_file("first line\nsecond"))
    tf.skip_line()
    assert tf.line() == 2
    assert tf.read_string() == "second"


def test_skip_whitespace_reports_end(make_file):
    empty = TextFile(make_file("   \n ", name="blank.txt"))
    assert empty.skip_whitespace() is False
    filled = TextFile(make_file("  x", name="filled.txt"))
    assert filled.skip_whitespace() is True
    assert filled.peek_char() == "x"


def test_crlf_counts_one_line(make_file):
    tf = TextFile(make_file("a\r\nb\r\n"))
    assert tf.read_string() == "a"
    assert tf.read_string() == "b"
    assert tf.line() == 2


def test_context_manager_closes(make_file):
    with TextFile(make_file("token more")) as tf:
        assert tf.read_string() == "token"
    assert tf.read_string() == ""
    assert tf.error() == ErrorType.NONE