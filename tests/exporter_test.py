"""
Тесты для записи OBJ, метаданных и полного экспорта.
"""

import logging
import unittest
from pathlib import Path

import numpy as np
import pytest

from navexport.navmesh.exporter import (
    MeshExporter,
    compose_area_block,
    compose_metadata,
    export_file_path,
    export_navigation_data,
)
from navexport.navmesh.geometry_cache import encode_geometry_cache
from navexport.navmesh.persistence import NavMeshExportReader
from navexport.navmesh.settings import ExportSettings
from navexport.navmesh.sources import (
    AreaModifier,
    Bounds,
    Level,
    NavigationElement,
    NavigationOctree,
    NavigationSystem,
    RecastNavMeshData,
    World,
)
from navexport.navmesh.types import AreaExportEntry, ConvexArea, RecastBuildConfig, ShapeType


TRIANGLE_VERTS = np.array([
    [1.0, 2.0, 3.0],
    [4.0, 5.0, 6.0],
    [7.0, 8.0, 9.0],
], dtype=np.float32)

TOTAL_BOUNDS = Bounds([1.0, 2.0, 3.0], [10.0, 20.0, 30.0])
ELEMENT_BOUNDS = Bounds([0.0, 0.0, 0.0], [5.0, 5.0, 5.0])

SQUARE = np.array([
    [1.0, 1.0, 0.0],
    [2.0, 1.0, 0.0],
    [2.0, 2.0, 0.0],
    [1.0, 2.0, 0.0],
])


class MeshExporterTest(unittest.TestCase):

    def test_line_layout(self):
        """3 вершины, 1 треугольник, 2 строки метаданных — ровно 6 строк в этом порядке."""
        coords = np.arange(1, 10, dtype=np.float32)
        indices = np.array([0, 1, 2], dtype=np.int32)
        text = MeshExporter.format_geometry(coords, indices, "# Tag\nrd_tag 1\n")

        lines = text.splitlines()
        self.assertEqual(len(lines), 6)
        self.assertEqual(lines[0], "v 1.000000 2.000000 3.000000 ")
        self.assertEqual(lines[2], "v 7.000000 8.000000 9.000000 ")
        self.assertEqual(lines[3], "f 1 2 3 ")
        self.assertEqual(lines[4:], ["# Tag", "rd_tag 1"])

    def test_order_preserved(self):
        coords = np.array([3.0, 3.0, 3.0, 1.0, 1.0, 1.0, 2.0, 2.0, 2.0])
        indices = np.array([2, 0, 1, 1, 2, 0])
        lines = MeshExporter.format_geometry(coords, indices).splitlines()

        self.assertEqual([l.split()[1] for l in lines[:3]], ["3.000000", "1.000000", "2.000000"])
        self.assertEqual(lines[3:], ["f 3 1 2 ", "f 2 3 1 "])

    def test_write_file(self):
        import tempfile
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "out.obj"
            ok = MeshExporter.export_geom_to_obj_file(path, TRIANGLE_VERTS, [0, 1, 2], "\n")
            self.assertTrue(ok)
            self.assertEqual(path.read_text(encoding="utf-8").count("\n"), 5)

    def test_unwritable_destination_is_skipped(self):
        import tempfile
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing" / "dir" / "out.obj"
            self.assertFalse(MeshExporter.export_geom_to_obj_file(path, TRIANGLE_VERTS, [0, 1, 2]))
            self.assertFalse(path.exists())


class MetadataTest(unittest.TestCase):
    """Строки метаданных генератора."""

    def test_pairs(self):
        text = compose_metadata(RecastBuildConfig())
        lines = text.splitlines()

        self.assertEqual(lines[0], "# RecastDemo specific data")
        self.assertIn("rd_agh 2.00000", lines)
        self.assertIn("rd_agr 0.60000", lines)
        self.assertIn("rd_cs 0.30000", lines)
        self.assertIn("rd_ch 0.20000", lines)
        self.assertIn("rd_amc 0", lines)
        self.assertIn("rd_ams 45.00000", lines)
        self.assertIn("rd_rmis 8", lines)
        self.assertIn("rd_rmas 20", lines)
        self.assertIn("rd_mel 12", lines)
        self.assertIn("rd_pvf 1", lines)
        self.assertIn("rd_gdm 1", lines)
        self.assertIn("rd_mppt 4096", lines)
        self.assertIn("rd_mvpp 6", lines)
        self.assertIn("rd_ts 64", lines)
        self.assertTrue(text.endswith("rd_ts 64\n\n"))

    def test_comment_precedes_value(self):
        lines = compose_metadata(RecastBuildConfig()).splitlines()
        self.assertEqual(lines[lines.index("rd_agh 2.00000") - 1], "# AgentHeight")
        self.assertEqual(lines[lines.index("rd_rmis 8") - 1], "# Region min size")
        self.assertEqual(lines[lines.index("rd_ts 64") - 1], "# Tile size")

    def test_truncation(self):
        config = RecastBuildConfig(agent_max_climb=35.9, min_region_area=10.0, generate_detailed_mesh=False)
        lines = compose_metadata(config).splitlines()
        self.assertIn("rd_amc 35", lines)
        self.assertIn("rd_rmis 3", lines)
        self.assertIn("rd_gdm 0", lines)

    def test_bbox(self):
        lines = compose_metadata(RecastBuildConfig(), bounds=TOTAL_BOUNDS).splitlines()
        self.assertEqual(
            lines[1],
            "rd_bbox -10.0000000 3.0000000 -20.0000000 -1.0000000 30.0000000 -2.0000000",
        )

    def test_area_block(self):
        entry = AreaExportEntry(area_id=3, convex=ConvexArea(points=SQUARE, min_z=-0.2, max_z=1.2))
        text = compose_metadata(RecastBuildConfig(), [entry])

        self.assertTrue(text.startswith("# Area export\n\nAE 3 4 -0.200000 1.200000\n"))
        lines = text.splitlines()
        self.assertIn("Av -1.000000 0.000000 -1.000000", lines)
        self.assertEqual(sum(1 for l in lines if l.startswith("Av ")), 4)
        self.assertLess(lines.index("AE 3 4 -0.200000 1.200000"), lines.index("# RecastDemo specific data"))

    def test_no_areas_no_block(self):
        self.assertEqual(compose_area_block([]), "")


def make_system(nav_data_set, elements) -> NavigationSystem:
    return NavigationSystem(nav_octree=NavigationOctree(elements), nav_data_set=nav_data_set)


def water_element() -> NavigationElement:
    return NavigationElement(
        bounds=ELEMENT_BOUNDS,
        geometry=False,
        modifiers=[AreaModifier("Water", ShapeType.CONVEX, SQUARE, min_z=0.0, max_z=1.0)],
    )


def triangle_element(**kwargs) -> NavigationElement:
    return NavigationElement(
        bounds=ELEMENT_BOUNDS,
        collision_data=encode_geometry_cache(TRIANGLE_VERTS, [0, 1, 2]),
        **kwargs,
    )


class TestExportNavigationData:
    """Полный экспорт по наборам навигационных данных."""

    def test_file_per_data_set(self, tmp_path):
        system = make_system(
            [RecastNavMeshData(area_classes={"Water": 2}), object(), RecastNavMeshData()],
            [triangle_element(), water_element()],
        )
        world = World(levels=[Level(TRIANGLE_VERTS)])
        paths = export_navigation_data(
            str(tmp_path / "level"), system, world, TOTAL_BOUNDS, ExportSettings(), timestamp="T"
        )

        assert paths == [
            tmp_path / "level_NavDataSet0_T.obj",
            tmp_path / "level_NavDataSet2_T.obj",
        ]
        for path in paths:
            assert path.exists()

        info = NavMeshExportReader.get_info(paths[0])
        assert info["vertex_count"] == 6
        assert info["triangle_count"] == 2
        assert info["area_count"] == 1
        assert info["settings"]["ts"] == 64

    def test_round_trip_through_reader(self, tmp_path):
        system = make_system([RecastNavMeshData(area_classes={"Water": 2})], [triangle_element(), water_element()])
        paths = export_navigation_data(str(tmp_path / "nav"), system, None, TOTAL_BOUNDS, ExportSettings(), timestamp="T")
        data = NavMeshExportReader.load(paths[0])

        np.testing.assert_allclose(data.vertices, TRIANGLE_VERTS)
        np.testing.assert_array_equal(data.triangles, [[0, 1, 2]])
        assert len(data.areas) == 1
        assert data.areas[0].area_id == 2
        assert data.areas[0].points.shape == (4, 3)
        assert data.areas[0].min_z == pytest.approx(-0.2)
        assert data.areas[0].max_z == pytest.approx(1.2)
        assert data.settings["agh"] == pytest.approx(2.0)
        assert data.settings["rmis"] == 8
        assert data.settings["bbox"] == pytest.approx((-10.0, 3.0, -20.0, -1.0, 30.0, -2.0))

    def test_output_dir_setting(self, tmp_path):
        system = make_system([RecastNavMeshData()], [triangle_element()])
        settings = ExportSettings(output_dir=str(tmp_path))
        paths = export_navigation_data("scene", system, None, TOTAL_BOUNDS, settings, timestamp="T")
        assert paths == [tmp_path / "scene_NavDataSet0_T.obj"]

    def test_default_timestamp_format(self, tmp_path):
        system = make_system([RecastNavMeshData()], [triangle_element()])
        paths = export_navigation_data(str(tmp_path / "t"), system, None, TOTAL_BOUNDS, ExportSettings())
        assert len(paths) == 1
        stamp = paths[0].stem.split("_NavDataSet0_")[1]
        assert len(stamp) == len("2024.01.31-12.00.00")

    def test_missing_navigation_system(self, tmp_path, caplog):
        with caplog.at_level(logging.ERROR, logger="navexport"):
            paths = export_navigation_data(str(tmp_path / "x"), None, None, TOTAL_BOUNDS, ExportSettings())
        assert paths == []
        assert "NavigationSystem" in caplog.text
        assert list(tmp_path.iterdir()) == []

    def test_missing_octree(self, tmp_path, caplog):
        system = NavigationSystem(nav_octree=None, nav_data_set=[RecastNavMeshData()])
        with caplog.at_level(logging.ERROR, logger="navexport"):
            paths = export_navigation_data(str(tmp_path / "x"), system, None, TOTAL_BOUNDS, ExportSettings())
        assert paths == []
        assert "NavOctree" in caplog.text
        assert list(tmp_path.iterdir()) == []

    def test_malformed_cache_skips_only_its_data_set(self, tmp_path, caplog):
        broken = NavigationElement(bounds=ELEMENT_BOUNDS, collision_data=b"\x00" * 7, supported_agents={"Small"})
        system = make_system(
            [
                RecastNavMeshData(config=RecastBuildConfig(agent_name="Small")),
                RecastNavMeshData(config=RecastBuildConfig(agent_name="Large")),
            ],
            [broken, triangle_element()],
        )
        with caplog.at_level(logging.ERROR, logger="navexport"):
            paths = export_navigation_data(str(tmp_path / "m"), system, None, TOTAL_BOUNDS, ExportSettings(), timestamp="T")

        assert paths == [tmp_path / "m_NavDataSet1_T.obj"]
        assert "MalformedGeometryCacheError" in caplog.text

    def test_negative_agent_radius_skips_only_its_data_set(self, tmp_path, caplog):
        system = make_system(
            [
                RecastNavMeshData(config=RecastBuildConfig(agent_radius=-1.0), area_classes={"Water": 2}),
                RecastNavMeshData(area_classes={"Water": 2}),
            ],
            [water_element()],
        )
        with caplog.at_level(logging.ERROR, logger="navexport"):
            paths = export_navigation_data(str(tmp_path / "r"), system, None, TOTAL_BOUNDS, ExportSettings(), timestamp="T")

        assert paths == [tmp_path / "r_NavDataSet1_T.obj"]
        assert "Skipping navigation data set 0" in caplog.text

    def test_write_failure_does_not_raise(self, tmp_path):
        system = make_system([RecastNavMeshData(), RecastNavMeshData()], [triangle_element()])
        base = str(tmp_path / "no_such_dir" / "nav")
        assert export_navigation_data(base, system, None, TOTAL_BOUNDS, ExportSettings(), timestamp="T") == []

    def test_export_file_path(self):
        assert export_file_path("base", 3, "2024.01.31-12.00.00") == Path("base_NavDataSet3_2024.01.31-12.00.00.obj")
