import sys
from pathlib import Path

import pytest

# Ensure the deepsearch package is importable when running tests from a checkout
_REPO_ROOT = Path(__file__).resolve().parents[2]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from deepsearch.config import SearchConfig  # noqa: E402
from deepsearch import external  # noqa: E402


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    """
    Small tree used across tests:

        a.txt              "foo bar"
        b.txt              no match
        old/c.txt          "foo"
        src/foo_config.py  mentions foo twice
        .git/HEAD          "foo" (always excluded)
        image.bin          NUL bytes + foo
    """
    (tmp_path / "a.txt").write_text("foo bar\n")
    (tmp_path / "b.txt").write_text("nothing to see\n")
    (tmp_path / "old").mkdir()
    (tmp_path / "old" / "c.txt").write_text("foo\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "foo_config.py").write_text("FOO = 1\nfoo = FOO + 1\nprint(foo)\n")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("foo\n")
    (tmp_path / "image.bin").write_bytes(b"\x89PNG\x00\x00\x00foo\x00")
    return tmp_path


@pytest.fixture
def make_config(corpus: Path):
    """Build a SearchConfig rooted at the corpus."""
    def _make(pattern: str = "foo", **kwargs) -> SearchConfig:
        kwargs.setdefault("root", corpus)
        return SearchConfig(pattern=pattern, **kwargs)
    return _make


@pytest.fixture(autouse=True)
def no_external_programs(monkeypatch):
    """Never launch real editors or dialogs from tests."""
    launched = []
    monkeypatch.setattr(external, "launch_editor", lambda argv: launched.append(list(argv)))
    monkeypatch.setattr(external, "dialog_available", lambda: False)
    return launched

