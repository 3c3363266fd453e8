"""Unit tests for the dedup marker helpers."""
from processor.marker import find_marker_ids, has_marker, make_marker


class TestMarker:
    """Test cases for marker encode/decode."""

    def test_make_marker(self):
        assert make_marker(12345) == '### 12345 ###'

    def test_has_marker(self):
        assert has_marker('Convoy\n\n### 12 ###', 12)
        assert not has_marker('Convoy\n\n### 123 ###', 12)
        assert not has_marker(None, 12)
        assert not has_marker('', 12)

    def test_find_marker_ids(self):
        descriptions = ['a ### 1 ###', None, 'no marker', 'b ### 22 ###']

        assert find_marker_ids(descriptions) == [1, 22]
