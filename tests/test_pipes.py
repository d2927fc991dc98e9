import pytest
from bs4 import BeautifulSoup

from html2json.exceptions import SpecError
from html2json.pipes import PIPES, apply_pipes, parse_pipe


def make_node(html: str, selector: str):
    return BeautifulSoup(html, "lxml").select_one(selector)


def run_chain(node, *segments):
    pipes = [parse_pipe(segment, position) for position, segment in enumerate(segments)]
    return apply_pipes(node, pipes)


class TestPipeParsing:
    """Test suite for pipe segment parsing."""

    def test_registry_contents(self):
        """Every documented pipe is registered."""
        for name in ("trim", "text", "lower", "upper", "substr", "regex", "parseAs", "attr", "void"):
            assert name in PIPES

    def test_unknown_pipe(self):
        with pytest.raises(SpecError, match="Unknown pipe"):
            parse_pipe("shout", 0)

    def test_argument_is_prepared_once(self):
        assert parse_pipe("substr:2", 0).param == (2, None)
        assert parse_pipe("substr:1:3", 0).param == (1, 3)
        assert parse_pipe("attr: href ", 0).param == "href"

    @pytest.mark.parametrize("segment", ["substr:-1", "substr:a", "substr:1:2:3", "substr:1:"])
    def test_invalid_substr_bounds(self, segment):
        with pytest.raises(SpecError):
            parse_pipe(segment, 0)

    def test_invalid_regex(self):
        with pytest.raises(SpecError, match="Invalid regex"):
            parse_pipe("regex:(", 0)

    def test_unknown_number_type(self):
        with pytest.raises(SpecError, match="parseAs"):
            parse_pipe("parseAs:bool", 0)

    def test_missing_argument(self):
        with pytest.raises(SpecError, match="requires an argument"):
            parse_pipe("attr", 0)
        with pytest.raises(SpecError, match="requires an argument"):
            parse_pipe("regex:", 0)

    def test_unexpected_argument(self):
        with pytest.raises(SpecError, match="takes no argument"):
            parse_pipe("trim:3", 0)
        with pytest.raises(SpecError, match="takes no argument"):
            parse_pipe("void:x", 0)

    def test_node_pipes_must_come_first(self):
        """attr and void read the matched node, so they cannot follow a string pipe."""
        assert parse_pipe("attr:href", 0).name == "attr"
        with pytest.raises(SpecError, match="must come first"):
            parse_pipe("attr:href", 1)
        with pytest.raises(SpecError, match="must come first"):
            parse_pipe("void", 2)


class TestPipeApplication:
    """Test suite for running pipe chains."""

    def test_no_pipes_yields_text(self):
        node = make_node("<p>Hello <b>there</b></p>", "p")
        assert run_chain(node) == "Hello there"

    def test_string_pipes(self):
        node = make_node("<p>  Mixed Case  </p>", "p")
        assert run_chain(node, "trim") == "Mixed Case"
        assert run_chain(node, "text") == "Mixed Case"
        assert run_chain(node, "trim", "lower") == "mixed case"
        assert run_chain(node, "trim", "upper") == "MIXED CASE"

    def test_substr(self):
        node = make_node("<p>abcdef</p>", "p")
        assert run_chain(node, "substr:2") == "cdef"
        assert run_chain(node, "substr:1:3") == "bc"
        assert run_chain(node, "substr:10") == ""

    def test_regex_returns_first_group(self):
        node = make_node("<p>Total: 1,234 items</p>", "p")
        assert run_chain(node, "regex:(\\d+),(\\d+)") == "1"

    def test_regex_without_group_returns_match(self):
        node = make_node("<p>abc 123 def</p>", "p")
        assert run_chain(node, "regex:\\d+") == "123"

    def test_regex_with_unmatched_optional_group(self):
        node = make_node("<p>123</p>", "p")
        assert run_chain(node, "regex:(x)?\\d+") == "123"

    def test_regex_no_match(self):
        node = make_node("<p>no digits</p>", "p")
        assert run_chain(node, "regex:\\d+") is None

    @pytest.mark.parametrize("text,kind,expected", [
        (" 42 ", "int", 42),
        ("-7", "int", -7),
        ("4.2", "int", None),
        ("1e3", "float", 1000.0),
        (".5", "number", 0.5),
        ("99.99", "number", 99.99),
        ("abc", "float", None),
        ("inf", "float", None),
        ("nan", "number", None),
        ("1e999", "float", None),
        ("", "int", None),
    ])
    def test_parse_as(self, text, kind, expected):
        node = make_node(f"<p>{text}</p>", "p")
        assert run_chain(node, f"parseAs:{kind}") == expected

    def test_attr(self):
        node = make_node('<a href="/x" class="btn primary">x</a>', "a")
        assert run_chain(node, "attr:href") == "/x"
        assert run_chain(node, "attr:class") == "btn primary"
        assert run_chain(node, "attr:title") is None

    def test_attr_then_string_pipes(self):
        node = make_node('<a href="mailto:me@example.com">x</a>', "a")
        assert run_chain(node, "attr:href", "substr:7", "upper") == "ME@EXAMPLE.COM"

    def test_void_returns_inner_markup(self):
        node = make_node("<div><p>Some <b>bold</b> text</p></div>", "div")
        assert run_chain(node, "void") == "<p>Some <b>bold</b> text</p>"

    def test_failure_short_circuits(self):
        node = make_node("<p>abc</p>", "p")
        assert run_chain(node, "regex:\\d+", "upper") is None

    def test_string_pipes_reject_numbers(self):
        node = make_node("<p>42</p>", "p")
        assert run_chain(node, "parseAs:int", "trim") is None

    def test_pipe_on_plain_string(self):
        assert PIPES["upper"].apply("abc", None) == "ABC"
        assert PIPES["attr"].apply("abc", "href") is None
