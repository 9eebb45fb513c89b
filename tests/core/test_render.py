"""
tests/core/test_render.py - mcspy/core/render.py tests
"""

from mcspy.core.render import render_table


class TestRenderTable:
    """render_table tests"""

    def test_layout(self):
        text = render_table([[12, "cache"], [3, "cache_page"]], ["Count", "Bin"])

        assert text.splitlines() == [
            "+-------+------------+",
            "| Count | Bin        |",
            "+-------+------------+",
            "| 12    | cache      |",
            "| 3     | cache_page |",
            "+-------+------------+",
        ]
        assert text.endswith("\n")

    def test_without_headers(self):
        text = render_table([["a", "b"]])

        assert text.splitlines() == ["+---+---+", "| a | b |", "+---+---+"]

    def test_empty_rows(self):
        assert render_table([], ["Count", "Bin"]) == ""

    def test_short_rows_are_padded(self):
        lines = render_table([["x"], ["y", "zz"]], ["A", "B"]).splitlines()

        assert lines[3] == "| x |    |"
        assert lines[4] == "| y | zz |"

    def test_wide_characters(self):
        lines = render_table([["キー"], ["ab"]], ["K"]).splitlines()

        # "キー" is four cells wide
        assert lines[0] == "+------+"
        assert lines[3] == "| キー |"
        assert lines[4] == "| ab   |"

    def test_idempotent(self):
        rows = [["1", "site", "cache", "x"]]
        headers = ["Slab", "Prefix", "Bin", "Id"]

        assert render_table(rows, headers) == render_table(rows, headers)
