"""
Tests for Utilities.

Requires Python 3.11+.
"""

from pathlib import Path

import pytest

from utils.config import Settings, WatcherSettings
from utils.temp_dir import temp_dir


class TestTempDir:
    """Test cases for the temp_dir helper."""

    def test_creates_and_removes(self):
        """Test that the directory exists only inside the block."""
        with temp_dir() as path:
            assert path.is_dir()
            assert path.is_absolute()
            (path / "nested").mkdir()
            (path / "nested" / "file.txt").write_text("x")

        assert not path.exists()

    def test_removes_on_error(self):
        """Test that cleanup happens when the body raises."""
        seen: list[Path] = []

        with pytest.raises(RuntimeError):
            with temp_dir() as path:
                seen.append(path)
                raise RuntimeError("boom")

        assert not seen[0].exists()

    def test_body_may_remove_it(self):
        """Test that an already-removed directory is not an error."""
        with temp_dir() as path:
            path.rmdir()

    def test_prefix(self):
        """Test that the prefix is applied."""
        with temp_dir(prefix="tmp-custom-") as path:
            assert path.name.startswith("tmp-custom-")


class TestSettings:
    """Test cases for configuration."""

    def test_watcher_defaults(self):
        """Test default watcher settings."""
        settings = WatcherSettings()

        assert settings.debounce_delay_ms == 1000
        assert settings.execute_immediately is True
        assert settings.artifacts_dir_name == "web-ext-artifacts"
        assert "node_modules" in settings.ignore_patterns

    def test_ignore_patterns_from_env(self, monkeypatch: pytest.MonkeyPatch):
        """Test comma-separated ignore patterns."""
        monkeypatch.setenv("WATCHER_IGNORE_PATTERNS", "*.log, dist ,")

        settings = WatcherSettings()

        assert settings.ignore_patterns == ["*.log", "dist"]

    def test_debounce_from_env(self, monkeypatch: pytest.MonkeyPatch):
        """Test that numeric settings are read from the environment."""
        monkeypatch.setenv("WATCHER_DEBOUNCE_DELAY_MS", "250")

        assert Settings().watcher.debounce_delay_ms == 250
