"""Tests for CLI commands using context injection.

Commands accept a ``_context`` parameter for dependency injection, so most
tests call them directly; a few go through CliRunner to cover argument
parsing and global options.
"""

from __future__ import annotations

import hashlib
import os
import stat
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import typer
from rich.console import Console
from typer.testing import CliRunner

from resilient_fs import __version__, cli
from resilient_fs.config import Settings
from resilient_fs.context import AppContext
from resilient_fs.display import Display
from resilient_fs.identity import BufferPool

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_display(monkeypatch: pytest.MonkeyPatch) -> None:
    """Print to a wide console so table cells are never wrapped."""
    monkeypatch.setattr(cli, "display", Display(Console(width=300)))


@pytest.fixture
def context() -> AppContext:
    """Create a real-filesystem context with a private pool and fast retries."""
    return AppContext(
        settings=Settings(remove_attempts=2, move_attempts=2),
        pool=BufferPool(max_size=2),
    )


class TestEnsureCommand:
    """Tests for the ensure command."""

    def test_creates_directory_with_mode(self, tmp_path: Path, context: AppContext) -> None:
        """Test the directory is created with the requested octal mode."""
        target = tmp_path / "a" / "b"

        cli.ensure_cmd(target, mode="700", _context=context)

        assert target.is_dir()
        assert stat.S_IMODE(target.stat().st_mode) == 0o700

    def test_file_exits_with_error(self, tmp_path: Path, context: AppContext) -> None:
        """Test a file in the way exits with status 1."""
        target = tmp_path / "file"
        target.write_text("x")

        with pytest.raises(typer.Exit) as exc_info:
            cli.ensure_cmd(target, _context=context)

        assert exc_info.value.exit_code == 1

    def test_bad_mode_rejected(self, tmp_path: Path, context: AppContext) -> None:
        """Test a non-octal mode is a usage error."""
        with pytest.raises(typer.BadParameter):
            cli.ensure_cmd(tmp_path / "x", mode="rwx", _context=context)


class TestRmCommand:
    """Tests for the rm command."""

    def test_removes_paths(self, tmp_path: Path, context: AppContext) -> None:
        """Test every path is removed."""
        (tmp_path / "f").write_text("x")
        (tmp_path / "d").mkdir()

        cli.rm_cmd([tmp_path / "f", tmp_path / "d", tmp_path / "missing"], _context=context)

        assert list(tmp_path.iterdir()) == []

    def test_failure_uses_settings_policy(self, tmp_path: Path) -> None:
        """Test removal failures exit after the configured attempts."""
        fs = MagicMock()
        fs.lstat.side_effect = PermissionError(13, "Permission denied")
        ctx = AppContext(settings=Settings(remove_attempts=3), filesystem=fs)

        with pytest.raises(typer.Exit) as exc_info:
            cli.rm_cmd([tmp_path / "x"], _context=ctx)

        assert exc_info.value.exit_code == 1
        assert fs.lstat.call_count == 3


class TestMvCommand:
    """Tests for the mv command."""

    def test_moves(self, tmp_path: Path, context: AppContext) -> None:
        """Test a file is moved."""
        old = tmp_path / "old"
        old.write_text("x")

        cli.mv_cmd(old, tmp_path / "new", _context=context)

        assert (tmp_path / "new").read_text() == "x"

    def test_missing_parent_fails_without_flag(
        self, tmp_path: Path, context: AppContext
    ) -> None:
        """Test the destination parent is not created by default."""
        old = tmp_path / "old"
        old.write_text("x")

        with pytest.raises(typer.Exit):
            cli.mv_cmd(old, tmp_path / "sub" / "new", _context=context)

        assert old.exists()

    def test_ensure_parent(self, tmp_path: Path, context: AppContext) -> None:
        """Test --ensure-parent creates the destination directory."""
        old = tmp_path / "old"
        old.write_text("x")

        cli.mv_cmd(old, tmp_path / "sub" / "new", ensure_parent=True, _context=context)

        assert (tmp_path / "sub" / "new").read_text() == "x"


class TestCpCommand:
    """Tests for the cp command."""

    def test_copies_into_new_directory(self, tmp_path: Path, context: AppContext) -> None:
        """Test a file is copied into a directory that is created on demand."""
        src = tmp_path / "src"
        src.write_text("content")
        os.chmod(src, 0o640)
        dst = tmp_path / "out" / "dst"

        cli.cp_cmd(src, dst, _context=context)

        assert dst.read_text() == "content"
        assert stat.S_IMODE(dst.stat().st_mode) == 0o640

    def test_missing_source_exits(self, tmp_path: Path, context: AppContext) -> None:
        """Test a missing source exits with status 1."""
        with pytest.raises(typer.Exit):
            cli.cp_cmd(tmp_path / "missing", tmp_path / "dst", _context=context)


class TestCopytreeCommand:
    """Tests for the copytree command."""

    def test_copies_tree(self, tmp_path: Path, sample_tree: Path, context: AppContext) -> None:
        """Test a tree is copied."""
        dst = tmp_path / "dst"

        cli.copytree_cmd(sample_tree, dst, _context=context)

        assert (dst / "C" / "D.txt").read_text() == "delta"

    def test_partial_failure_exits(
        self, tmp_path: Path, sample_tree: Path, flaky_fs
    ) -> None:
        """Test failed entries are reported and the command exits 1."""
        ctx = AppContext(filesystem=flaky_fs(broken={"A"}))
        dst = tmp_path / "dst"

        with pytest.raises(typer.Exit) as exc_info:
            cli.copytree_cmd(sample_tree, dst, _context=ctx)

        assert exc_info.value.exit_code == 1
        assert (dst / "B").exists()


class TestDigestCommand:
    """Tests for the digest command."""

    def test_prints_digest(self, tmp_path: Path) -> None:
        """Test the digest of each file appears in the output."""
        target = tmp_path / "f"
        target.write_bytes(b"hello")

        result = runner.invoke(cli.app, ["digest", str(target)])

        assert result.exit_code == 0
        assert hashlib.md5(b"hello").hexdigest() in result.output

    def test_releases_buffer(self, tmp_path: Path, context: AppContext) -> None:
        """Test the shared record's buffer goes back to the pool."""
        a = tmp_path / "a"
        b = tmp_path / "b"
        a.write_bytes(b"a")
        b.write_bytes(b"b")

        cli.digest_cmd([a, b], _context=context)

        assert len(context.pool) == 1

    def test_missing_file_exits(self, tmp_path: Path, context: AppContext) -> None:
        """Test a missing file is reported after the others are processed."""
        good = tmp_path / "good"
        good.write_bytes(b"x")

        with pytest.raises(typer.Exit):
            cli.digest_cmd([tmp_path / "missing", good], _context=context)

        assert len(context.pool) == 1


class TestClearCommand:
    """Tests for the clear command."""

    def test_clears(self, tmp_path: Path, context: AppContext) -> None:
        """Test directory contents are removed."""
        (tmp_path / "f").write_text("x")

        cli.clear_cmd(tmp_path, _context=context)

        assert tmp_path.is_dir()
        assert list(tmp_path.iterdir()) == []


class TestGlobalOptions:
    """Tests for options handled by the app callback."""

    def test_version(self) -> None:
        """Test --version prints the version."""
        result = runner.invoke(cli.app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_config_file_used(self, tmp_path: Path) -> None:
        """Test --config settings reach the commands."""
        config = tmp_path / "settings.yaml"
        config.write_text("digestAlgorithm: sha256\n")
        target = tmp_path / "f"
        target.write_bytes(b"hello")

        result = runner.invoke(cli.app, ["--config", str(config), "digest", str(target)])

        assert result.exit_code == 0
        assert hashlib.sha256(b"hello").hexdigest()[:16] in result.output

    def test_invalid_config_exits(self, tmp_path: Path) -> None:
        """Test an invalid settings file is reported."""
        config = tmp_path / "settings.yaml"
        config.write_text("removeAttempts: 0\n")

        result = runner.invoke(cli.app, ["--config", str(config), "rm", str(tmp_path / "x")])

        assert result.exit_code == 1
        assert "Invalid settings" in result.output
