"""
Экспорт геометрии для построения NavMesh во внешнем генераторе.

Алгоритм:
1. Обходим элементы пространственного индекса в пределах бокса навигации
2. Коллизионную геометрию складываем в общий буфер вершин и индексов
3. Выпуклые модификаторы областей раздуваем на радиус агента
4. Добавляем статическую геометрию уровней
5. Пишем OBJ с метаданными генератора
"""

from navexport.navmesh.types import (
    AreaExportEntry,
    CollectedNavGeometry,
    ConvexArea,
    GeometryBuffers,
    RecastBuildConfig,
    ShapeType,
)
from navexport.navmesh.geometry_cache import (
    GeometryCache,
    GeometryCacheHeader,
    MalformedGeometryCacheError,
    encode_geometry_cache,
)
from navexport.navmesh.vertex_soup import transform_vertex_soup_to_recast
from navexport.navmesh.convex_offset import Winding, detect_winding, grow_convex_hull
from navexport.navmesh.collector import GeometryCollector
from navexport.navmesh.exporter import (
    MeshExporter,
    compose_metadata,
    export_navigation_data,
)
from navexport.navmesh.persistence import NavMeshExportReader
from navexport.navmesh.settings import ExportSettings, ExportSettingsManager

__all__ = [
    "AreaExportEntry",
    "CollectedNavGeometry",
    "ConvexArea",
    "GeometryBuffers",
    "RecastBuildConfig",
    "ShapeType",
    "GeometryCache",
    "GeometryCacheHeader",
    "MalformedGeometryCacheError",
    "encode_geometry_cache",
    "transform_vertex_soup_to_recast",
    "Winding",
    "detect_winding",
    "grow_convex_hull",
    "GeometryCollector",
    "MeshExporter",
    "compose_metadata",
    "export_navigation_data",
    "NavMeshExportReader",
    "ExportSettings",
    "ExportSettingsManager",
]
