"""
Tests for the search orchestrator.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from deepsearch.config import Mode
from deepsearch.matcher import PatternMatcher
from deepsearch.models import RunCounters
from deepsearch.search import Searcher, iter_content_matches, iter_name_matches, scan_file, split_eol


def _rel(root: Path, path: Path) -> str:
    return path.relative_to(root).as_posix()


class TestScanFile:
    def test_line_numbers_are_one_based(self, tmp_path: Path):
        f = tmp_path / "x.txt"
        f.write_text("a\nfoo\nb\nfoo again\n")
        results = list(scan_file(f, PatternMatcher("foo")))
        assert [(r.line_number, r.line) for r in results] == [(2, "foo"), (4, "foo again")]

    def test_context_window(self, tmp_path: Path):
        f = tmp_path / "x.txt"
        f.write_text("1\n2\nfoo\n4\n5\n6\n")
        (result,) = list(scan_file(f, PatternMatcher("foo"), context_lines=2))
        assert result.before == [(1, "1"), (2, "2")]
        assert result.after == [(4, "4"), (5, "5")]

    def test_context_truncated_at_file_edges(self, tmp_path: Path):
        f = tmp_path / "x.txt"
        f.write_text("foo\nx\nfoo")
        results = list(scan_file(f, PatternMatcher("foo"), context_lines=3))
        assert results[0].before == []
        assert results[0].after == [(2, "x"), (3, "foo")]
        assert results[1].before == [(1, "foo"), (2, "x")]
        assert results[1].after == []

    def test_crlf_preserved_out_of_match_text(self, tmp_path: Path):
        f = tmp_path / "win.txt"
        f.write_bytes(b"foo\r\nbar\r\n")
        results = list(scan_file(f, PatternMatcher("foo$", is_regex=True)))
        assert [r.line for r in results] == ["foo"]

    def test_lone_cr_does_not_split_lines(self, tmp_path: Path):
        f = tmp_path / "mac.txt"
        f.write_bytes(b"xx\rfoo\nbar\n")
        results = list(scan_file(f, PatternMatcher("xx.foo", is_regex=True)))
        assert [(r.line_number, r.line) for r in results] == [(1, "xx\rfoo")]
        assert [r.line_number for r in scan_file(f, PatternMatcher("bar"))] == [2]

    def test_undecodable_bytes(self, tmp_path: Path):
        f = tmp_path / "latin1.txt"
        f.write_bytes(b"caf\xe9 foo\n")
        (result,) = list(scan_file(f, PatternMatcher("foo")))
        assert result.line.endswith("foo")


def test_split_eol():
    assert split_eol("a\r\n") == ("a", "\r\n")
    assert split_eol("a\n") == ("a", "\n")
    assert split_eol("a\r") == ("a\r", "")
    assert split_eol("a") == ("a", "")


def test_scenario_old_directory_suppressed(corpus: Path, make_config):
    counters = RunCounters()
    results = list(iter_content_matches(make_config(), counters))
    paths = {_rel(corpus, r.path) for r in results}
    assert "a.txt" in paths
    assert "old/c.txt" not in paths
    assert "b.txt" not in paths


def test_include_old_reports_old_directory(corpus: Path, make_config):
    counters = RunCounters()
    paths = {_rel(corpus, r.path) for r in iter_content_matches(make_config(include_old=True), counters)}
    assert "old/c.txt" in paths


def test_binary_files_excluded_unless_allowed(corpus: Path, make_config):
    counters = RunCounters()
    paths = {_rel(corpus, r.path) for r in iter_content_matches(make_config(), counters)}
    assert "image.bin" not in paths
    # a.txt, b.txt, src/foo_config.py
    assert counters.scanned == 3

    counters = RunCounters()
    paths = {_rel(corpus, r.path) for r in iter_content_matches(make_config(allow_binary=True), counters)}
    assert "image.bin" in paths
    assert counters.scanned == 4


def test_literal_match_iff_substring(corpus: Path, make_config):
    counters = RunCounters()
    results = list(iter_content_matches(make_config("FOO"), counters))
    assert [(_rel(corpus, r.path), r.line_number) for r in results] == [
        ("src/foo_config.py", 1),
        ("src/foo_config.py", 2),
    ]


def test_counters_per_match(corpus: Path, make_config):
    counters = RunCounters()
    results = list(iter_content_matches(make_config(), counters))
    # a.txt:1, foo_config.py:2 and 3
    assert len(results) == 3
    assert counters.matched == 3
    assert counters.matches_per_file[str(corpus / "src" / "foo_config.py")] == 2


def test_name_matches(corpus: Path, make_config):
    counters = RunCounters()
    results = list(iter_name_matches(make_config(), counters))
    assert [_rel(corpus, r.path) for r in results] == ["src/foo_config.py"]
    assert counters.matched == 1
    assert counters.scanned == 0


def test_name_matches_include_dirs(corpus: Path, make_config):
    (corpus / "foo_dir").mkdir()
    counters = RunCounters()
    results = list(iter_name_matches(make_config(include_dirs=True), counters))
    assert [(_rel(corpus, r.path), r.is_dir) for r in results] == [
        ("foo_dir", True),
        ("src/foo_config.py", False),
    ]


def test_unreadable_file_does_not_abort(corpus: Path, make_config, monkeypatch):
    import deepsearch.search as search_mod

    real_scan = search_mod.scan_file

    def flaky(path, matcher, context_lines=0):
        if path.name == "a.txt":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scan(path, matcher, context_lines)

    monkeypatch.setattr(search_mod, "scan_file", flaky)
    counters = RunCounters()
    paths = {_rel(corpus, r.path) for r in iter_content_matches(make_config(), counters)}
    assert paths == {"src/foo_config.py"}
    assert len(counters.errors) == 1


class TestSearcher:
    def test_both_streams(self, corpus: Path, make_config):
        searcher = Searcher(make_config(), Mode.SEARCH_ALL)
        counters = searcher.run()
        # 1 filename + 3 content lines
        assert counters.matched == 4
        assert searcher.first_name.path.name == "foo_config.py"
        assert searcher.first_content.path.name == "a.txt"

    def test_name_only_does_not_scan_contents(self, make_config):
        counters = Searcher(make_config(name_only=True), Mode.NAME_SEARCH).run()
        assert counters.matched == 1
        assert counters.scanned == 0

    def test_first_stops_whole_run(self, make_config):
        searcher = Searcher(make_config(first_only=True), Mode.SEARCH_ALL)
        counters = searcher.run()
        assert counters.matched == 1
        # filename stream found a match, content stream never started
        assert counters.scanned == 0
        assert searcher.first_content is None

    def test_first_does_not_visit_later_files(self, corpus: Path, make_config, monkeypatch):
        import deepsearch.search as search_mod

        visited = []
        real_scan = search_mod.scan_file

        def tracking(path, matcher, context_lines=0):
            visited.append(path.name)
            return real_scan(path, matcher, context_lines)

        monkeypatch.setattr(search_mod, "scan_file", tracking)
        counters = Searcher(make_config(first_only=True, content_only=True), Mode.CONTENT_SEARCH).run()
        assert counters.matched == 1
        assert visited == ["a.txt"]

    def test_count_only(self, make_config, capsys):
        Searcher(make_config(count_only=True, content_only=True), Mode.CONTENT_SEARCH).run()
        out = capsys.readouterr().out
        assert "foo_config.py: 2" in out
        assert "a.txt: 1" in out

    def test_rejects_replace_mode(self, make_config):
        with pytest.raises(ValueError):
            Searcher(make_config(), Mode.RENAME)

    def test_never_mutates(self, corpus: Path, make_config):
        before = {p: p.read_bytes() for p in corpus.rglob("*") if p.is_file()}
        Searcher(make_config(), Mode.SEARCH_ALL).run()
        after = {p: p.read_bytes() for p in corpus.rglob("*") if p.is_file()}
        assert before == after
