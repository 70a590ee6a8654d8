"""
Чтение экспортированных файлов для офлайн-просмотра.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import numpy as np


@dataclass
class ExportedArea:
    area_id: int
    points: np.ndarray
    """Точки в пространстве генератора, shape (N, 3)."""

    min_z: float
    max_z: float


@dataclass
class ExportedNavGeometry:
    """Содержимое экспортированного файла."""

    vertices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.float32))
    """shape (N, 3)."""

    triangles: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int32))
    """Индексы с нуля, shape (M, 3)."""

    areas: list[ExportedArea] = field(default_factory=list)
    settings: dict[str, object] = field(default_factory=dict)
    """Значения rd_<тег> по тегу (без префикса rd_)."""


def _parse_number(token: str):
    try:
        return int(token)
    except ValueError:
        return float(token)


class NavMeshExportReader:
    """
    Разбор файла, записанного MeshExporter.

    Формат — строки v / f / AE / Av / rd_<тег>, комментарии начинаются с #.
    """

    @staticmethod
    def load(path: Union[str, Path]) -> ExportedNavGeometry:
        """
        Загрузить экспортированный файл.

        Raises:
            ValueError: Если блок AE содержит меньше точек Av, чем объявлено.
            FileNotFoundError: Если файл не найден.
        """
        path = Path(path)

        vertices = []
        triangles = []
        areas: list[ExportedArea] = []
        settings: dict[str, object] = {}
        pending_points = 0

        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                parts = line.split()
                if not parts or parts[0].startswith("#"):
                    continue

                cmd = parts[0]
                if cmd == "v":
                    vertices.append((float(parts[1]), float(parts[2]), float(parts[3])))
                elif cmd == "f":
                    triangles.append((int(parts[1]) - 1, int(parts[2]) - 1, int(parts[3]) - 1))
                elif cmd == "AE":
                    if pending_points:
                        raise ValueError(f"Area block is missing {pending_points} points")
                    pending_points = int(parts[2])
                    areas.append(ExportedArea(
                        area_id=int(parts[1]),
                        points=np.zeros((0, 3), dtype=np.float64),
                        min_z=float(parts[3]),
                        max_z=float(parts[4]),
                    ))
                elif cmd == "Av":
                    if not pending_points:
                        raise ValueError("Area point outside of an area block")
                    point = np.array([[float(parts[1]), float(parts[2]), float(parts[3])]])
                    areas[-1].points = np.vstack((areas[-1].points, point))
                    pending_points -= 1
                elif cmd == "rd_bbox":
                    settings["bbox"] = tuple(float(p) for p in parts[1:7])
                elif cmd.startswith("rd_"):
                    settings[cmd[3:]] = _parse_number(parts[1])

        if pending_points:
            raise ValueError(f"Area block is missing {pending_points} points")

        return ExportedNavGeometry(
            vertices=np.array(vertices, dtype=np.float32).reshape(-1, 3),
            triangles=np.array(triangles, dtype=np.int32).reshape(-1, 3),
            areas=areas,
            settings=settings,
        )

    @staticmethod
    def get_info(path: Union[str, Path]) -> dict:
        """
        Получить информацию о файле без построения массивов.

        Returns:
            Словарь: vertex_count, triangle_count, area_count, settings.
        """
        path = Path(path)

        vertex_count = 0
        triangle_count = 0
        area_count = 0
        settings: dict[str, object] = {}

        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                if line.startswith("v "):
                    vertex_count += 1
                elif line.startswith("f "):
                    triangle_count += 1
                elif line.startswith("AE "):
                    area_count += 1
                elif line.startswith("rd_") and not line.startswith("rd_bbox"):
                    tag, value = line.split()[:2]
                    settings[tag[3:]] = _parse_number(value)

        return {
            "name": path.stem,
            "vertex_count": vertex_count,
            "triangle_count": triangle_count,
            "area_count": area_count,
            "settings": settings,
        }
