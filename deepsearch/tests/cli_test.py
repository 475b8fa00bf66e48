"""
Tests for argument handling and exit codes of the ds command.
"""
from __future__ import annotations

from pathlib import Path

import pytest

from deepsearch import cli
from deepsearch.config import Mode
from deepsearch.errors import UsageError


def _settings(*argv):
    parser = cli.build_parser()
    return cli.build_settings(parser.parse_intermixed_args(list(argv)))


class TestPositionals:
    def test_pattern_only(self):
        assert cli.resolve_positionals(["foo"], None) == ("foo", None, ".")

    def test_second_token_is_replacement(self):
        assert cli.resolve_positionals(["old", "new"], None) == ("old", "new", ".")

    def test_dot_token_is_path(self):
        assert cli.resolve_positionals(["foo", "./src"], None) == ("foo", None, "./src")

    def test_existing_dir_is_path(self, tmp_path: Path):
        assert cli.resolve_positionals(["foo", str(tmp_path)], None) == ("foo", None, str(tmp_path))

    def test_all_three(self, tmp_path: Path):
        assert cli.resolve_positionals(["a", "b", str(tmp_path)], None) == ("a", "b", str(tmp_path))

    def test_explicit_replacement_makes_second_token_a_path(self):
        assert cli.resolve_positionals(["foo", "somewhere"], "bar") == ("foo", "bar", "somewhere")

    def test_too_many(self, tmp_path: Path):
        with pytest.raises(UsageError):
            cli.resolve_positionals(["a", "b", str(tmp_path), "extra"], None)

    def test_missing_pattern_exit_code(self):
        with pytest.raises(UsageError) as exc:
            cli.resolve_positionals([], None)
        assert exc.value.exit_code == 1


class TestBuildSettings:
    def test_flags_anywhere(self, corpus: Path):
        settings = _settings("foo", "-i", "baz", "--apply", str(corpus))
        assert settings.search.ignore_case
        assert settings.replace.replacement == "baz"
        assert settings.replace.apply
        assert settings.search.root == corpus

    def test_modes(self, corpus: Path):
        assert _settings("foo", str(corpus)).mode is Mode.SEARCH_ALL
        assert _settings("-n", "foo", str(corpus)).mode is Mode.NAME_SEARCH
        assert _settings("-c", "foo", str(corpus)).mode is Mode.CONTENT_SEARCH
        assert _settings("foo", "bar", str(corpus)).mode is Mode.REPLACE_ALL
        assert _settings("-n", "-r", "bar", "foo", str(corpus)).mode is Mode.RENAME
        assert _settings("-l", "3", "foo", str(corpus)).mode is Mode.LINE_VIEW

    def test_replace_config(self, corpus: Path):
        settings = _settings("foo", "bar", str(corpus), "--apply", "--backup", "--diff")
        assert settings.replace.replacement == "bar"
        assert settings.replace.apply and settings.replace.backup and settings.replace.show_diff

    def test_type_and_excludes(self, corpus: Path):
        settings = _settings("-t", "py,*.js", "--exclude", "*.log", "--exclude", "build/*", "foo", str(corpus))
        assert settings.search.type_filters == ("*.py", "*.js")
        assert settings.search.excludes == ["*.log", "build/*"]

    @pytest.mark.parametrize(
        "argv",
        [
            ("foo", "--apply"),
            ("foo", "--backup"),
            ("foo", "--diff"),
            ("foo", "bar", "-e"),
            ("foo", "bar", "--count"),
            ("foo", "bar", "-l", "3"),
            ("foo", "-C", "-1"),
            ("foo", "-l", "0"),
            ("-E", "(unclosed"),
        ],
    )
    def test_usage_errors(self, argv):
        with pytest.raises(UsageError) as exc:
            _settings(*argv)
        assert exc.value.exit_code == 2

    def test_empty_pattern(self):
        with pytest.raises(UsageError) as exc:
            _settings("")
        assert exc.value.exit_code == 1

    def test_empty_replacement(self):
        with pytest.raises(UsageError):
            _settings("foo", "-r", "")


class TestMain:
    def test_found(self, corpus: Path, capsys):
        assert cli.main(["foo", str(corpus)]) == 0
        out = capsys.readouterr().out
        assert "FILENAME MATCHES" in out
        assert "CONTENT MATCHES" in out
        assert "Summary:" in out

    def test_not_found(self, corpus: Path, capsys):
        assert cli.main(["zzz", str(corpus)]) == 1
        assert 'search term "zzz" not found' in capsys.readouterr().out

    def test_help_exits_one(self, capsys):
        assert cli.main(["--help"]) == 1
        assert "EXAMPLES:" in capsys.readouterr().out

    def test_version(self, capsys):
        assert cli.main(["-v"]) == 0
        assert capsys.readouterr().out.startswith("Deepsearch 1.3")

    def test_missing_pattern(self, capsys):
        assert cli.main([]) == 1
        assert "missing search pattern" in capsys.readouterr().err

    def test_unknown_option(self, capsys):
        assert cli.main(["foo", "--bogus"]) == 2
        assert "Error:" in capsys.readouterr().err

    def test_options_between_positionals(self, corpus: Path, monkeypatch, capsys):
        monkeypatch.chdir(corpus)
        assert cli.main(["FOO", "-i", "-c", "."]) == 0
        assert "foo_config.py" in capsys.readouterr().out

    def test_replace_with_flag_before_path(self, corpus: Path):
        assert cli.main(["foo", "baz", "--apply", str(corpus)]) == 0
        assert (corpus / "a.txt").read_text() == "baz bar\n"

    def test_verbose_lists_exclusions(self, corpus: Path, capsys):
        assert cli.main(["foo", str(corpus), "-V"]) == 0
        assert "excluding: .git/*" in capsys.readouterr().out

    def test_bad_regex(self, corpus: Path):
        assert cli.main(["-E", "(unclosed", str(corpus)]) == 2

    def test_missing_root(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert cli.main(["foo", "./does-not-exist"]) == 2

    def test_replace_dry_run_exits_zero(self, corpus: Path, capsys):
        assert cli.main(["foo", "baz", str(corpus)]) == 0
        out = capsys.readouterr().out
        assert "DRY RUN" in out
        assert "To apply changes: add --apply" in out
        assert (corpus / "a.txt").read_text() == "foo bar\n"

    def test_replace_without_matches_exits_zero(self, corpus: Path):
        assert cli.main(["zzz", "baz", str(corpus)]) == 0

    def test_replace_apply(self, corpus: Path):
        assert cli.main(["foo", "baz", str(corpus), "--apply"]) == 0
        assert (corpus / "a.txt").read_text() == "baz bar\n"
        assert (corpus / "src" / "baz_config.py").exists()

    def test_line_view(self, corpus: Path, capsys):
        assert cli.main(["foo", str(corpus), "-l", "3"]) == 0
        assert "[line 3] print(foo)" in capsys.readouterr().out

    def test_line_view_not_found(self, corpus: Path):
        assert cli.main(["zzz", str(corpus), "-l", "1"]) == 1

    def test_output_file(self, corpus: Path, tmp_path_factory):
        target = tmp_path_factory.mktemp("report") / "out.txt"
        assert cli.main(["foo", str(corpus), "-o", str(target)]) == 0
        saved = target.read_text()
        assert "Summary:" in saved
        assert "foo_config.py" in saved

    def test_editor_opens_first_content_match(self, corpus: Path, monkeypatch, no_external_programs):
        monkeypatch.setenv("DEEPSEARCH_EDITOR", "vim")
        assert cli.main(["foo", str(corpus), "-e"]) == 0
        assert no_external_programs == [["vim", "+1", str(corpus / "a.txt")]]

    def test_no_editor_when_nothing_found(self, corpus: Path, no_external_programs):
        assert cli.main(["zzz", str(corpus), "-e"]) == 1
        assert no_external_programs == []

    def test_dialog_prompt_supplies_pattern(self, corpus: Path, monkeypatch):
        monkeypatch.chdir(corpus)
        monkeypatch.setattr(cli, "_prompt_positionals", lambda: ["foo"])
        assert cli.main([]) == 0
