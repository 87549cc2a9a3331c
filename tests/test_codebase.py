"""Tests for core/codebase.py."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from codemerge.core.codebase import Codebase


class TestCodebase:
    def test_resolve(self):
        cb = Codebase(path=Path("/work/dest"), project_space="internal")
        assert cb.resolve("foo") == Path("/work/dest/foo")
        assert cb.resolve("a/b/c.py") == Path("/work/dest/a/b/c.py")

    def test_relative_root_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cb = Codebase(path=Path("tree"))
        assert cb.path == tmp_path / "tree"
        assert cb.resolve("x").is_absolute()

    def test_rejects_empty_and_absolute_names(self):
        cb = Codebase(path=Path("/work/dest"))
        with pytest.raises(ValueError):
            cb.resolve("")
        with pytest.raises(ValueError):
            cb.resolve("/etc/passwd")

    def test_frozen(self):
        cb = Codebase(path=Path("/work/dest"))
        with pytest.raises(ValidationError):
            cb.project_space = "other"

    def test_str_uses_description(self):
        assert str(Codebase(path=Path("/w"), description="mod")) == "mod"
        assert str(Codebase(path=Path("/w"))) == "/w"
