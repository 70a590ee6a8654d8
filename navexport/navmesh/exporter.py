"""
Запись собранной геометрии в текстовый формат OBJ с метаданными генератора.

Формат:
    v X Y Z        по строке на вершину
    f i0 i1 i2     по строке на треугольник, индексы с единицы
    <метаданные>   как есть: блок областей (AE/Av) и пары "# имя" / "rd_<тег> значение"
"""

from __future__ import annotations

import math
import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional, Union

import numpy as np

from navexport import log
from navexport.core.profiler import Profiler
from navexport.geombase.coordinates import unreal_to_recast_box, unreal_to_recast_point
from navexport.navmesh.collector import GeometryCollector
from navexport.navmesh.settings import (
    EXPORT_FILE_EXTENSION,
    ExportSettings,
    ExportSettingsManager,
)
from navexport.navmesh.sources import RecastNavMeshData
from navexport.navmesh.types import AreaExportEntry, RecastBuildConfig

if TYPE_CHECKING:
    from navexport.navmesh.sources import Bounds, NavigationSystem, World


def compose_area_block(areas: Iterable[AreaExportEntry]) -> str:
    """Блок "# Area export" или пустая строка, если областей нет."""
    parts = []
    for entry in areas:
        points = entry.convex.points
        parts.append(
            "\nAE %d %d %f %f\n" % (entry.area_id, len(points), entry.convex.min_z, entry.convex.max_z)
        )
        for pt in unreal_to_recast_point(points).reshape(-1, 3):
            parts.append("Av %f %f %f\n" % (pt[0], pt[1], pt[2]))

    if not parts:
        return ""
    return "# Area export\n" + "".join(parts) + "\n"


def compose_metadata(
    config: RecastBuildConfig,
    areas: Iterable[AreaExportEntry] = (),
    bounds: Optional["Bounds"] = None,
) -> str:
    """
    Метаданные одного набора данных: области, бокс навигации и параметры сборки.

    Args:
        config: Конфигурация генератора.
        areas: Раздутые области (точки в координатах движка).
        bounds: Общий бокс навигации в координатах движка; None — без rd_bbox.
    """
    lines = [compose_area_block(areas), "# RecastDemo specific data\n"]

    if bounds is not None:
        box_min, box_max = unreal_to_recast_box(bounds.min, bounds.max)
        lines.append(
            "rd_bbox %7.7f %7.7f %7.7f %7.7f %7.7f %7.7f\n"
            % (box_min[0], box_min[1], box_min[2], box_max[0], box_max[1], box_max[2])
        )

    pairs = [
        ("AgentHeight", "rd_agh %5.5f" % config.agent_height),
        ("AgentRadius", "rd_agr %5.5f" % config.agent_radius),
        ("Cell Size", "rd_cs %5.5f" % config.cell_size),
        ("Cell Height", "rd_ch %5.5f" % config.cell_height),
        ("Agent max climb", "rd_amc %d" % int(config.agent_max_climb)),
        ("Agent max slope", "rd_ams %5.5f" % config.walkable_slope_angle),
        ("Region min size", "rd_rmis %d" % int(math.sqrt(config.min_region_area))),
        ("Region merge size", "rd_rmas %d" % int(math.sqrt(config.merge_region_area))),
        ("Max edge len", "rd_mel %d" % config.max_edge_len),
        ("Perform Voxel Filtering", "rd_pvf %d" % int(config.perform_voxel_filtering)),
        ("Generate Detailed Mesh", "rd_gdm %d" % int(config.generate_detailed_mesh)),
        ("MaxPolysPerTile", "rd_mppt %d" % config.max_polys_per_tile),
        ("maxVertsPerPoly", "rd_mvpp %d" % config.max_verts_per_poly),
        ("Tile size", "rd_ts %d" % config.tile_size),
    ]
    for comment, data in pairs:
        lines.append(f"# {comment}\n")
        lines.append(f"{data}\n")

    lines.append("\n")
    return "".join(lines)


class MeshExporter:
    """
    Сериализация буферов в текст.

    Порядок вершин и треугольников сохраняется, ничего не проверяется
    и не переупорядочивается.
    """

    @staticmethod
    def format_geometry(coords: np.ndarray, indices: np.ndarray, additional_data: str = "") -> str:
        coords = np.asarray(coords).reshape(-1, 3)
        faces = np.asarray(indices, dtype=np.int64).reshape(-1, 3) + 1

        parts = ["v %f %f %f \n" % (v[0], v[1], v[2]) for v in coords]
        parts.extend("f %d %d %d \n" % (f[0], f[1], f[2]) for f in faces)
        parts.append(additional_data)
        return "".join(parts)

    @staticmethod
    def export_geom_to_obj_file(
        path: Union[str, Path],
        coords: np.ndarray,
        indices: np.ndarray,
        additional_data: str = "",
    ) -> bool:
        """
        Записать геометрию в файл.

        Returns:
            False, если файл открыть или записать не удалось (ошибка логируется).
        """
        path = Path(path)
        text = MeshExporter.format_geometry(coords, indices, additional_data)
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            log.warn(f"[NavMeshExport] Cannot write {path}: {e}")
            return False
        return True


def export_file_path(base_name: str, index: int, timestamp: str) -> Path:
    return Path(f"{base_name}_NavDataSet{index}_{timestamp}{EXPORT_FILE_EXTENSION}")


def export_navigation_data(
    base_name: str,
    navigation_system: Optional["NavigationSystem"],
    world: Optional["World"],
    total_bounds: "Bounds",
    settings: Optional[ExportSettings] = None,
    timestamp: Optional[str] = None,
) -> list[Path]:
    """
    Экспортировать все наборы навигационных данных, по файлу на набор.

    Без навигационной системы или её индекса экспорт не выполняется
    (ошибка в лог, пустой список). Повреждённый кэш геометрии, недопустимая
    конфигурация набора или ошибка записи пропускают только свой набор данных.

    Args:
        base_name: Начало имени файла.
        navigation_system: Источник наборов данных и пространственного индекса.
        world: Сцена с уровнями (статическая геометрия), может быть None.
        total_bounds: Бокс навигации в координатах движка.
        settings: Настройки экспорта; по умолчанию из ExportSettingsManager.
        timestamp: Метка времени в имени файла; по умолчанию текущее время.

    Returns:
        Пути записанных файлов.
    """
    octree = navigation_system.nav_octree if navigation_system is not None else None
    if octree is None:
        missing = "NavigationSystem" if navigation_system is None else "NavOctree"
        log.error(f"[NavMeshExport] Failed to export navigation data due to {missing} being None")
        return []

    if settings is None:
        settings = ExportSettingsManager.instance().settings
    if timestamp is None:
        timestamp = datetime.now().strftime(settings.timestamp_format)
    base_path = settings.resolve_base_path(base_name)

    profiler = Profiler()
    start_time = time.perf_counter()
    written: list[Path] = []

    for index, nav_data in enumerate(navigation_system.nav_data_set):
        if not isinstance(nav_data, RecastNavMeshData):
            continue

        collector = GeometryCollector(
            nav_data,
            export_areas=settings.export_areas,
            export_level_geometry=settings.export_level_geometry,
        )
        try:
            with profiler.section("Collect"):
                collected = collector.collect(octree, total_bounds, world)
        except ValueError as e:
            log.error(e, f"[NavMeshExport] Skipping navigation data set {index}")
            continue

        metadata = compose_metadata(nav_data.config, collected.areas, total_bounds)
        path = export_file_path(base_path, index, timestamp)
        with profiler.section("Write"):
            ok = MeshExporter.export_geom_to_obj_file(
                path,
                collected.buffers.coord_buffer,
                collected.buffers.index_buffer,
                metadata,
            )
        if ok:
            written.append(path)

    log.info(f"[NavMeshExport] ExportNavigation time: {time.perf_counter() - start_time:.3f} sec.")
    for line in profiler.report_lines():
        log.debug(f"[NavMeshExport] {line}")
    return written
