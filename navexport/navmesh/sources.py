"""
Источники данных для сбора геометрии.

Движок и его пространственный индекс сюда не входят; эти классы дают
тот же интерфейс поверх обычных структур в памяти. Сборщик обращается
к ним только через перечисленные методы, поэтому любой объект с такими
же методами подходит как замена.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

import numpy as np

from navexport.geombase.instance_transform import InstanceTransform
from navexport.navmesh.types import ConvexArea, RecastBuildConfig, ShapeType


DEFAULT_AREA_ID = 0


@dataclass
class Bounds:
    """Осевой бокс в координатах движка."""

    min: np.ndarray
    max: np.ndarray

    def __post_init__(self):
        self.min = np.asarray(self.min, dtype=np.float64)
        self.max = np.asarray(self.max, dtype=np.float64)

    def intersects(self, other: "Bounds") -> bool:
        return bool(np.all(self.min <= other.max) and np.all(other.min <= self.max))


@dataclass
class AreaModifier:
    """
    Модификатор навигационной области.

    points — контур в локальных координатах (для CONVEX — уже в мировых),
    min_z/max_z — вертикальные границы объёма.
    """

    area_class: str
    shape_type: ShapeType = ShapeType.CONVEX
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float64))
    min_z: float = 0.0
    max_z: float = 0.0

    def __post_init__(self):
        self.points = np.asarray(self.points, dtype=np.float64).reshape(-1, 3)

    def get_convex(self) -> ConvexArea:
        return ConvexArea(points=self.points.copy(), min_z=self.min_z, max_z=self.max_z)

    def get_per_instance_convex(self, transform: InstanceTransform) -> ConvexArea:
        """
        Контур, размещённый трансформом экземпляра.

        Вертикальные границы — Z-протяжённость призмы (каждая точка на
        min_z и на max_z) после трансформа.
        """
        points = transform.transform_point(self.points)
        if len(self.points) == 0:
            return ConvexArea(points=points.reshape(-1, 3), min_z=self.min_z, max_z=self.max_z)

        prism = np.vstack((
            np.column_stack((self.points[:, :2], np.full(len(self.points), self.min_z))),
            np.column_stack((self.points[:, :2], np.full(len(self.points), self.max_z))),
        ))
        prism_z = transform.transform_point(prism)[:, 2]
        return ConvexArea(points=points, min_z=float(prism_z.min()), max_z=float(prism_z.max()))


@dataclass
class NavigationElement:
    """
    Элемент пространственного индекса.

    collision_data — буфер кэша геометрии (см. geometry_cache) или пустые байты.
    supported_agents — имена агентов, для которых геометрия учитывается;
    None означает всех.
    """

    bounds: Bounds
    collision_data: bytes = b""
    modifiers: list[AreaModifier] = field(default_factory=list)
    instance_transforms: list[InstanceTransform] = field(default_factory=list)
    geometry: bool = True
    supported_agents: Optional[set[str]] = None

    def has_geometry(self) -> bool:
        return self.geometry

    def should_use_geometry(self, config: RecastBuildConfig) -> bool:
        return self.supported_agents is None or config.agent_name in self.supported_agents

    def get_per_instance_transforms(self, bounds: Bounds) -> list[InstanceTransform]:
        """Трансформы экземпляров, попадающие в бокс запроса."""
        if not self.instance_transforms:
            return []
        return [
            t for t in self.instance_transforms
            if bounds.intersects(Bounds(t.lin, t.lin))
        ]


class NavigationOctree:
    """Пространственный индекс: отдаёт элементы, чей бокс пересекает запрос."""

    def __init__(self, elements: Sequence[NavigationElement] = ()):
        self.elements = list(elements)

    def find_elements_with_bounds_test(self, bounds: Bounds) -> Iterator[NavigationElement]:
        for element in self.elements:
            if element.bounds.intersects(bounds):
                yield element


@dataclass
class RecastNavMeshData:
    """Набор навигационных данных генератора Recast."""

    config: RecastBuildConfig = field(default_factory=RecastBuildConfig)
    area_classes: dict[str, int] = field(default_factory=dict)

    @property
    def agent_radius(self) -> float:
        return self.config.agent_radius

    @property
    def cell_height(self) -> float:
        return self.config.cell_height

    def get_area_id(self, area_class: str) -> int:
        return self.area_classes.get(area_class, DEFAULT_AREA_ID)


@dataclass
class Level:
    """Уровень сцены с заранее запечённой статической геометрией (суп вершин)."""

    static_navigable_geometry: Optional[np.ndarray] = None

    def get_static_navigable_geometry(self) -> Optional[np.ndarray]:
        return self.static_navigable_geometry


@dataclass
class World:
    levels: list[Optional[Level]] = field(default_factory=list)


@dataclass
class NavigationSystem:
    """
    Навигационная система: индекс + список наборов данных.

    Наборы, которые не являются RecastNavMeshData, экспортёр пропускает.
    """

    nav_octree: Optional[NavigationOctree] = None
    nav_data_set: list = field(default_factory=list)
