"""Tests for export settings and their project-level storage."""

import json
import logging
import unittest
import tempfile
from pathlib import Path

from navexport.navmesh.settings import (
    DEFAULT_TIMESTAMP_FORMAT,
    ExportSettings,
    ExportSettingsManager,
)


class ExportSettingsTest(unittest.TestCase):

    def test_defaults(self):
        settings = ExportSettings()
        self.assertEqual(settings.output_dir, "")
        self.assertEqual(settings.timestamp_format, DEFAULT_TIMESTAMP_FORMAT)
        self.assertTrue(settings.export_areas)
        self.assertTrue(settings.export_level_geometry)

    def test_dict_round_trip(self):
        settings = ExportSettings(output_dir="out", timestamp_format="%H%M", export_areas=False)
        self.assertEqual(ExportSettings.from_dict(settings.to_dict()), settings)

    def test_from_partial_dict(self):
        settings = ExportSettings.from_dict({"export_level_geometry": False})
        self.assertFalse(settings.export_level_geometry)
        self.assertEqual(settings.timestamp_format, DEFAULT_TIMESTAMP_FORMAT)

    def test_resolve_base_path(self):
        self.assertEqual(ExportSettings().resolve_base_path("nav"), "nav")
        self.assertEqual(ExportSettings(output_dir="out").resolve_base_path("nav"), str(Path("out") / "nav"))


class ExportSettingsManagerTest(unittest.TestCase):

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager = ExportSettingsManager()
            manager.set_project_path(Path(tmp))
            manager.update(ExportSettings(output_dir="exports", export_areas=False))
            self.assertTrue(manager.save())

            path = Path(tmp) / "project_settings" / "navmesh_export.json"
            self.assertTrue(path.exists())

            other = ExportSettingsManager()
            other.set_project_path(Path(tmp))
            self.assertEqual(other.settings.output_dir, "exports")
            self.assertFalse(other.settings.export_areas)

    def test_missing_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager = ExportSettingsManager()
            manager.set_project_path(Path(tmp))
            self.assertEqual(manager.settings, ExportSettings())

    def test_broken_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "project_settings" / "navmesh_export.json"
            path.parent.mkdir(parents=True)
            path.write_text("{not json", encoding="utf-8")

            manager = ExportSettingsManager()
            with self.assertLogs("navexport", level=logging.ERROR):
                manager.set_project_path(Path(tmp))
            self.assertEqual(manager.settings, ExportSettings())

    def test_save_without_project(self):
        with self.assertLogs("navexport", level=logging.ERROR):
            self.assertFalse(ExportSettingsManager().save())

    def test_singleton(self):
        self.assertIs(ExportSettingsManager.instance(), ExportSettingsManager.instance())

    def test_written_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager = ExportSettingsManager()
            manager.set_project_path(Path(tmp))
            manager.save()
            data = json.loads((Path(tmp) / "project_settings" / "navmesh_export.json").read_text(encoding="utf-8"))
            self.assertEqual(data["timestamp_format"], DEFAULT_TIMESTAMP_FORMAT)
