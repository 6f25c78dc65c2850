"""Tests for runtime data directory resolution helpers."""

from __future__ import annotations

import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from notemap.core.paths import ensure_data_dir, get_data_dir, resolve_data_file


class DataDirEnvironmentOverrideTests(unittest.TestCase):
    """Verify that NOTEMAP_DATA_DIR overrides the runtime data dir."""

    def test_get_data_dir_honors_environment_override(self) -> None:
        """get_data_dir should return the directory specified by the env var."""
        with TemporaryDirectory() as tmp:
            override = Path(tmp) / "custom-location"
            with mock.patch.dict(os.environ, {"NOTEMAP_DATA_DIR": str(override)}, clear=False):
                data_dir = get_data_dir()
        self.assertEqual(data_dir, override.resolve())

    def test_ensure_data_dir_creates_environment_override_directory(self) -> None:
        """ensure_data_dir should create the directory specified by the env var."""
        with TemporaryDirectory() as tmp:
            override = Path(tmp) / "nested" / "override"
            with mock.patch.dict(os.environ, {"NOTEMAP_DATA_DIR": str(override)}, clear=False):
                data_dir = ensure_data_dir()
                self.assertTrue(override.exists(), "override directory was not created")
        self.assertEqual(data_dir, override.resolve())

    def test_relative_database_file_lands_in_data_dir(self) -> None:
        with TemporaryDirectory() as tmp:
            override = Path(tmp) / "data"
            with mock.patch.dict(os.environ, {"NOTEMAP_DATA_DIR": str(override)}, clear=False):
                path = resolve_data_file(".notemap/notes.db", ensure_parent=True)
        self.assertEqual(path, override.resolve() / "notes.db")

    def test_absolute_file_is_kept(self) -> None:
        with TemporaryDirectory() as tmp:
            target = Path(tmp) / "elsewhere" / "notes.db"
            path = resolve_data_file(str(target), ensure_parent=True)
            self.assertEqual(path, target)
            self.assertTrue(target.parent.is_dir())


if __name__ == "__main__":
    unittest.main()
