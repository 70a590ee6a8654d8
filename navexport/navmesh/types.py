"""
Базовые структуры данных для экспорта геометрии NavMesh.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
import numpy as np


class ShapeType(IntEnum):
    """Форма модификатора навигационной области."""
    UNKNOWN = 0
    CYLINDER = 1
    BOX = 2
    CONVEX = 3
    INSTANCED_CONVEX = 4


@dataclass
class RecastBuildConfig:
    """
    Конфигурация генератора навмеша.

    Только читается: значения попадают в метаданные экспорта как есть.
    """

    agent_name: str = "Default"
    agent_height: float = 2.0
    agent_radius: float = 0.6
    cell_size: float = 0.3
    cell_height: float = 0.2
    agent_max_climb: float = 0.9
    walkable_slope_angle: float = 45.0
    min_region_area: float = 64.0
    """Минимальная площадь региона в ячейках. В метаданные пишется корень."""

    merge_region_area: float = 400.0
    """Площадь слияния регионов в ячейках. В метаданные пишется корень."""

    max_edge_len: int = 12
    perform_voxel_filtering: bool = True
    generate_detailed_mesh: bool = True
    max_polys_per_tile: int = 4096
    max_verts_per_poly: int = 6
    tile_size: int = 64


@dataclass
class ConvexArea:
    """
    Выпуклая навигационная область: контур в горизонтальной плоскости
    и вертикальные границы объёма.
    """

    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    """Точки контура shape (N, 3), порядок CW или CCW."""

    min_z: float = 0.0
    max_z: float = 0.0


@dataclass
class AreaExportEntry:
    """Раздутая на радиус агента область, готовая к записи в файл."""

    area_id: int
    convex: ConvexArea


class GeometryBuffers:
    """
    Накопитель вершин и треугольников одного экспорта.

    Каждый новый блок граней сдвигается на текущее число вершин,
    поэтому любой индекс в буфере индексов < vertex_count.
    """

    def __init__(self):
        self._coords: list[np.ndarray] = []
        self._indices: list[np.ndarray] = []
        self.vertex_count = 0
        self.face_count = 0

    def append(self, vertices: np.ndarray, faces: np.ndarray) -> None:
        """
        Добавить блок геометрии.

        Args:
            vertices: Вершины shape (N, 3) или плоский массив длины 3N.
            faces: Индексы треугольников (0..N-1) shape (M, 3) или плоский длины 3M.
        """
        vertices = np.array(vertices, dtype=np.float32, copy=True).reshape(-1, 3)
        faces = np.asarray(faces, dtype=np.int64).reshape(-1)
        if len(faces) % 3 != 0:
            raise ValueError(f"Face index count must be a multiple of 3, got {len(faces)}")
        if len(faces) and (faces.min() < 0 or faces.max() >= len(vertices)):
            raise ValueError("Face index out of range of the appended vertices")

        self._indices.append((faces + self.vertex_count).astype(np.int32))
        self._coords.append(vertices)
        self.vertex_count += len(vertices)
        self.face_count += len(faces) // 3

    @property
    def coord_buffer(self) -> np.ndarray:
        """Плоский float32 массив длины 3 * vertex_count."""
        if not self._coords:
            return np.zeros(0, dtype=np.float32)
        return np.concatenate(self._coords).reshape(-1)

    @property
    def index_buffer(self) -> np.ndarray:
        """Плоский int32 массив длины 3 * face_count."""
        if not self._indices:
            return np.zeros(0, dtype=np.int32)
        return np.concatenate(self._indices)


@dataclass
class CollectedNavGeometry:
    """Результат сбора для одного набора навигационных данных."""

    buffers: GeometryBuffers = field(default_factory=GeometryBuffers)
    areas: list[AreaExportEntry] = field(default_factory=list)
