"""
Сбор геометрии и навигационных областей для одного набора навигационных данных.

Проход по элементам пространственного индекса:
1. Элемент с коллизионной геометрией, подходящей под фильтр навмеша,
   даёт треугольники (один раз или по копии на каждый экземпляр).
2. Иначе его выпуклые модификаторы областей раздуваются на радиус агента
   и становятся записями AreaExportEntry.
Затем добавляется запечённая статическая геометрия всех уровней сцены.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np

from navexport import log
from navexport.geombase.coordinates import (
    recast_to_unreal_point,
    transform_points,
    unreal_to_recast_matrix,
)
from navexport.navmesh.convex_offset import grow_convex_hull
from navexport.navmesh.geometry_cache import GeometryCache
from navexport.navmesh.types import (
    AreaExportEntry,
    CollectedNavGeometry,
    ConvexArea,
    GeometryBuffers,
    ShapeType,
)
from navexport.navmesh.vertex_soup import transform_vertex_soup_to_recast

if TYPE_CHECKING:
    from navexport.geombase.instance_transform import InstanceTransform
    from navexport.navmesh.sources import (
        Bounds,
        NavigationElement,
        NavigationOctree,
        RecastNavMeshData,
        World,
    )


def append_geometry_cache(
    buffers: GeometryBuffers,
    cache: GeometryCache,
    instance_transforms: Sequence["InstanceTransform"] = (),
) -> None:
    """
    Добавить геометрию кэша в буферы.

    Без трансформов вершины копируются как есть (они уже в пространстве
    генератора). С N трансформами добавляется N копий: вершина переводится
    в координаты движка, размещается трансформом экземпляра и переводится
    обратно.
    """
    vertices = cache.vertices()
    if not instance_transforms:
        buffers.append(vertices, cache.indices)
        return

    local_unreal = recast_to_unreal_point(vertices)
    to_recast = unreal_to_recast_matrix()
    for transform in instance_transforms:
        local_to_recast_world = to_recast @ transform.as_matrix()
        buffers.append(transform_points(local_to_recast_world, local_unreal), cache.indices)


def append_vertex_soup(buffers: GeometryBuffers, vertex_soup) -> None:
    """Добавить суп вершин (координаты движка) как индексированную сетку."""
    vertices, faces = transform_vertex_soup_to_recast(vertex_soup)
    buffers.append(vertices, faces)


class GeometryCollector:
    """
    Собирает (CoordBuffer, IndexBuffer, список областей) для одного набора данных.

    Источники не изменяются; растут только буферы результата.
    """

    def __init__(
        self,
        nav_data: "RecastNavMeshData",
        export_areas: bool = True,
        export_level_geometry: bool = True,
    ):
        self.nav_data = nav_data
        self.export_areas = export_areas
        self.export_level_geometry = export_level_geometry

    def collect(
        self,
        octree: "NavigationOctree",
        bounds: "Bounds",
        world: Optional["World"] = None,
    ) -> CollectedNavGeometry:
        """
        Полный проход: элементы индекса в пределах bounds, затем уровни мира.

        Raises:
            MalformedGeometryCacheError: Если буфер кэша элемента повреждён.
        """
        result = CollectedNavGeometry()

        element_count = 0
        for element in octree.find_elements_with_bounds_test(bounds):
            self.collect_element(element, result)
            element_count += 1

        if world is not None and self.export_level_geometry:
            self.collect_level_geometry(world, result.buffers)

        log.debug(
            f"[GeometryCollector] {element_count} elements -> "
            f"{result.buffers.vertex_count} verts, {result.buffers.face_count} faces, "
            f"{len(result.areas)} areas"
        )
        return result

    def collect_element(self, element: "NavigationElement", result: CollectedNavGeometry) -> None:
        export_geometry = element.has_geometry() and element.should_use_geometry(self.nav_data.config)
        instance_transforms = element.get_per_instance_transforms(element.bounds)

        if export_geometry and len(element.collision_data):
            cache = GeometryCache(element.collision_data)
            append_geometry_cache(result.buffers, cache, instance_transforms)
        elif self.export_areas:
            result.areas.extend(self.collect_areas(element, instance_transforms))

    def collect_areas(
        self,
        element: "NavigationElement",
        instance_transforms: Sequence["InstanceTransform"],
    ) -> list[AreaExportEntry]:
        """Раздуть выпуклые модификаторы элемента на радиус агента."""
        entries = []
        for modifier in element.modifiers:
            if modifier.shape_type == ShapeType.CONVEX:
                convexes = [modifier.get_convex()]
            elif modifier.shape_type == ShapeType.INSTANCED_CONVEX:
                convexes = [modifier.get_per_instance_convex(t) for t in instance_transforms]
            else:
                continue

            area_id = self.nav_data.get_area_id(modifier.area_class)
            for convex in convexes:
                entry = self.grow_area(area_id, convex)
                if entry is not None:
                    entries.append(entry)
        return entries

    def grow_area(self, area_id: int, convex: ConvexArea) -> Optional[AreaExportEntry]:
        """
        Раздутая область или None для вырожденного контура.

        Вертикальные границы расширяются на высоту ячейки с каждой стороны.
        """
        grown = grow_convex_hull(self.nav_data.agent_radius, convex.points)
        if len(grown) == 0:
            return None

        cell_height = self.nav_data.cell_height
        return AreaExportEntry(
            area_id=area_id,
            convex=ConvexArea(
                points=grown,
                min_z=convex.min_z - cell_height,
                max_z=convex.max_z + cell_height,
            ),
        )

    @staticmethod
    def collect_level_geometry(world: "World", buffers: GeometryBuffers) -> None:
        for level in world.levels:
            if level is None:
                continue
            geometry = level.get_static_navigable_geometry()
            if geometry is None or len(np.asarray(geometry).reshape(-1)) == 0:
                continue
            append_vertex_soup(buffers, geometry)
