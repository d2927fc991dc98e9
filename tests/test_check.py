from html2json.check import check_output, json_equal, render_diff


class TestJsonEqual:
    """Test suite for structural JSON comparison."""

    def test_equal_values(self):
        assert json_equal({"a": [1, "x", None]}, {"a": [1, "x", None]})
        assert json_equal({"a": 1, "b": 2}, {"b": 2, "a": 1})

    def test_numbers_are_type_strict(self):
        assert not json_equal(1, 1.0)
        assert not json_equal(True, 1)
        assert not json_equal(0, False)
        assert json_equal(2.5, 2.5)

    def test_structure_differences(self):
        assert not json_equal({"a": 1}, {"a": 1, "b": None})
        assert not json_equal([1, 2], [2, 1])
        assert not json_equal([1], [1, 1])
        assert not json_equal({"a": None}, {})
        assert not json_equal("1", 1)


class TestCheckOutput:
    """Test suite for expected-output checking."""

    def test_match_has_no_diff(self):
        assert check_output({"title": "X"}, {"title": "X"}) == []

    def test_mismatch_renders_unified_diff(self):
        diff = check_output({"title": "Y"}, {"title": "X"}, expected_label="expected.json")
        assert diff[0] == "--- expected.json"
        assert diff[1] == "+++ actual"
        assert '-  "title": "X"' in diff
        assert '+  "title": "Y"' in diff

    def test_type_only_difference_is_reported(self):
        diff = check_output({"n": 1.0}, {"n": 1})
        assert "-  \"n\": 1" in diff
        assert "+  \"n\": 1.0" in diff

    def test_render_diff_labels(self):
        diff = render_diff([1], [2], expected_label="want", actual_label="got")
        assert diff[:2] == ["--- want", "+++ got"]
