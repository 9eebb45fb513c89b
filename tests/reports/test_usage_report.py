"""
tests/reports/test_usage_report.py - mcspy/reports/usage.py tests
"""

from mcspy.core.scan import KeyDumpCollector
from mcspy.core.types import ParsedKeyRecord
from mcspy.reports.sections import Section, print_sections
from mcspy.reports.usage import build_usage_report, prefix_sections, run_usage_report


def _records():
    records = [ParsedKeyRecord(1, "big", "cache_entity", f"node%3A{i}") for i in range(4)]
    records += [ParsedKeyRecord(2, "big", "cache_page", "front"), ParsedKeyRecord(2, "small", "cache_page", "x")]
    return records


class TestBuildUsageReport:
    """build_usage_report tests"""

    def test_section_titles(self):
        titles = [s.title for s in build_usage_report(_records())]

        assert titles == [
            "Count by memcache_key_prefix",
            "Count by Bin",
            "Crosstab: Prefix / Bin",
            "Crosstab: Prefix / Slab",
            "Analysing prefix = big",
            "Crosstab: Cache_Bins / Slab",
            None,
        ]

    def test_frequency_tables(self):
        sections = build_usage_report(_records())

        assert sections[0].headers == ("Count", "Prefix")
        assert sections[0].rows == (("5", "big"), ("1", "small"))
        assert sections[1].rows == (("4", "cache_entity"), ("2", "cache_page"))

    def test_prefix_bin_crosstab(self):
        section = build_usage_report(_records())[2]

        assert section.headers == ("Bin", "TOTAL", "big", "small")
        assert section.rows == (
            ("TOTAL", "6", "5", "1"),
            ("cache_entity", "4", "4", "-"),
            ("cache_page", "2", "1", "1"),
        )

    def test_prefix_slab_crosstab(self):
        section = build_usage_report(_records())[3]

        assert section.headers == ("Slab", "TOTAL", "big", "small")
        assert section.rows[1] == ("1", "4", "4", "-")

    def test_patterns(self):
        section = prefix_sections(_records(), "big")[2]

        assert section.text == "Top patterns observed:\n"
        assert section.headers == ("Count", "Pattern")
        assert section.rows == (("4", "cache_entity => node:{num}"), ("1", "cache_page => front"))

    def test_no_significant_prefix(self):
        assert len(build_usage_report(_records(), minimum=100)) == 4

    def test_empty(self):
        sections = build_usage_report([])

        assert sections[0].rows == ()
        assert sections[2].rows == (("TOTAL", "0"),)


class TestPrintSections:
    """print_sections tests"""

    def test_output(self, capsys):
        print_sections([Section(title="Count by Bin", headers=("Count", "Bin"), rows=(("1", "b"),))])

        out = capsys.readouterr().out
        assert "|  Count by Bin" in out
        assert "| 1     | b   |" in out

    def test_keys_printed_literally(self, capsys):
        print_sections([Section(headers=("Id",), rows=(("[red]x[/red] :smile:",),))])

        assert "[red]x[/red] :smile:" in capsys.readouterr().out


class TestRunUsageReport:
    """run_usage_report against a fake server"""

    def test_end_to_end(self, memcache_server, make_config, capsys):
        keys = [(f"site-cache_page-p{i}", 1, 1) for i in range(5)] + [("nodash", 1, 1)]
        server = memcache_server(slabs={3: keys})
        config = make_config([server], slab=3)
        collector = KeyDumpCollector(config)

        sections = run_usage_report(config, collector, cleanup=True)

        out = capsys.readouterr().out
        assert sections[0].rows == (("5", "site"),)
        assert "Analysing prefix = site" in out
        assert "cache_page => p0" in out
        assert not config.raw_dump_path.exists()
