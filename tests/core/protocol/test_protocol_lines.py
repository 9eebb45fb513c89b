"""
tests/core/protocol/test_protocol_lines.py - mcspy/core/protocol/lines.py tests
"""

import pytest

from mcspy.core.protocol import LineKind, classify_line, is_terminator, split_slab_stat


class TestClassifyLine:
    """classify_line tests"""

    def test_item(self):
        line = classify_line("ITEM site-cache-x [128 b; 1700000000 s]\r\n")

        assert line.kind is LineKind.ITEM
        assert line.fields == ("site-cache-x", "128", "1700000000")
        assert line.text == "ITEM site-cache-x [128 b; 1700000000 s]"

    def test_item_without_bracket(self):
        assert classify_line("ITEM k").fields == ("k", "0", "0")

    def test_stat(self):
        line = classify_line("STAT 3:used_chunks 12")

        assert line.kind is LineKind.STAT
        assert line.fields == ("3:used_chunks", "12")

    def test_value(self):
        line = classify_line("VALUE k 0 5")

        assert line.kind is LineKind.VALUE
        assert line.fields == ("k", "0", "5")

    @pytest.mark.parametrize("text", ["END", "DELETED", "NOT_FOUND", "OK", "END\r\n"])
    def test_terminators(self, text):
        assert classify_line(text).kind is LineKind.TERMINATOR
        assert is_terminator(text)

    @pytest.mark.parametrize("text", ["ERROR", "", "item lower", "SERVER_ERROR out of memory"])
    def test_unknown(self, text):
        assert classify_line(text).kind is LineKind.UNKNOWN
        assert not is_terminator(text)


class TestSplitSlabStat:
    """split_slab_stat tests"""

    def test_slab_metric(self):
        assert split_slab_stat("12:chunk_size") == (12, "chunk_size")

    def test_global_stat(self):
        assert split_slab_stat("active_slabs") is None
