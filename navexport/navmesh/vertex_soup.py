"""
Перевод "супа" вершин (неиндексированного списка треугольников) в индексированную сетку.
"""

from __future__ import annotations

import numpy as np

from navexport.geombase.coordinates import unreal_to_recast_point


def transform_vertex_soup_to_recast(vertex_soup) -> tuple[np.ndarray, np.ndarray]:
    """
    Превратить суп вершин в индексированную сетку в пространстве генератора.

    Каждые три подряд идущие точки — один треугольник. Каждый треугольник
    даёт три новые вершины и три индекса в обратном порядке (2, 1, 0):
    перевод координат меняет ориентацию системы, и обход нужно развернуть.

    Args:
        vertex_soup: Точки в координатах движка, shape (3K, 3).

    Returns:
        (vertices, faces): вершины shape (3K, 3) и индексы shape (K, 3).

    Raises:
        ValueError: Если количество точек не кратно трём.
    """
    soup = np.asarray(vertex_soup, dtype=np.float64).reshape(-1, 3)
    if len(soup) % 3 != 0:
        raise ValueError(f"Vertex soup must contain whole triangles, got {len(soup)} points")

    vertices = unreal_to_recast_point(soup)
    face_count = len(soup) // 3
    base = np.arange(face_count, dtype=np.int32)[:, None] * 3
    faces = base + np.array([2, 1, 0], dtype=np.int32)
    return vertices, faces
