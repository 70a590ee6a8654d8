"""
Раздувание выпуклого контура навигационной области на радиус агента.

Каждое ребро сдвигается наружу на ExpandBy, новая вершина — пересечение
двух соседних сдвинутых рёбер в горизонтальной плоскости. Если пересечение
уходит от исходной вершины дальше 2 * ExpandBy (острый угол), точка
притягивается на расстояние ExpandBy * 1.4142 вдоль того же направления.

Вершина результата i соответствует вершине входа (i + 1) % N: обход
начинается с угла между рёбрами [0, 1] и [1, 2] и замыкается через
[N-1, 0] и [0, 1].
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

import numpy as np


CLAMP_FACTOR = 1.4142
"""Множитель притяжения: точка ставится на ExpandBy * CLAMP_FACTOR от вершины."""

THRESHOLD_FACTOR = 2.0
"""Порог притяжения: THRESHOLD_FACTOR * ExpandBy от исходной вершины."""

_SMALL_NUMBER = 1e-8
_WINDING_EPSILON = 1e-6
_PARALLEL_EPSILON = 1e-9


class Winding(IntEnum):
    CW = -1
    CCW = 1


def _safe_normal_2d(v: np.ndarray) -> np.ndarray:
    """Нормированная горизонтальная проекция вектора, ноль для вырожденного."""
    length_sq = v[0] * v[0] + v[1] * v[1]
    if length_sq < _SMALL_NUMBER:
        return np.zeros(3, dtype=np.float64)
    length = np.sqrt(length_sq)
    return np.array([v[0] / length, v[1] / length, 0.0])


def _rotate_90(v: np.ndarray, sign: int) -> np.ndarray:
    """Поворот на sign * 90° вокруг вертикальной оси."""
    return np.array([-v[1] * sign, v[0] * sign, 0.0])


def _line_intersection(
    line1: tuple[np.ndarray, np.ndarray],
    line2: tuple[np.ndarray, np.ndarray],
) -> Optional[np.ndarray]:
    """
    Пересечение двух прямых в плоскости XY через определитель.

    Returns:
        Точку на line1 (Z интерполируется вдоль line1) или None для параллельных.
    """
    p1, p2 = line1
    q1, q2 = line2

    a1 = p2[0] - p1[0]
    b1 = q1[0] - q2[0]
    c1 = q1[0] - p1[0]

    a2 = p2[1] - p1[1]
    b2 = q1[1] - q2[1]
    c2 = q1[1] - p1[1]

    denominator = a2 * b1 - a1 * b2
    scale = np.hypot(a1, a2) * np.hypot(b1, b2)
    if abs(denominator) <= _PARALLEL_EPSILON * max(scale, _SMALL_NUMBER):
        return None

    t = (b1 * c2 - b2 * c1) / denominator
    return p1 + t * (p2 - p1)


def _as_points(verts) -> np.ndarray:
    points = np.asarray(verts, dtype=np.float64)
    if points.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise ValueError(f"Expected points of shape (N, 3) or (N, 2), got {points.shape}")
    if points.shape[1] == 2:
        points = np.hstack((points, np.zeros((len(points), 1))))
    return points


def detect_winding(verts) -> Optional[Winding]:
    """
    Определить направление обхода по первой невырожденной тройке вершин.

    Ребро V1->V2 поворачивается на 90° и скалярно умножается на ребро V2->V3:
    отрицательное значение — CW, положительное — CCW, ноль — тройка
    коллинеарна, берём следующую.

    Returns:
        Winding или None, если ни одна тройка не дала знака.
    """
    points = _as_points(verts)
    count = len(points)
    if count < 3:
        return None

    for index in range(count):
        v1 = points[index]
        v2 = points[(index + 1) % count]
        v3 = points[(index + 2) % count]

        v01 = _safe_normal_2d(v1 - v2)
        v12 = _safe_normal_2d(v2 - v3)
        d = float(np.dot(_rotate_90(v01, 1), v12))

        if d < -_WINDING_EPSILON:
            return Winding.CW
        if d > _WINDING_EPSILON:
            return Winding.CCW

    return None


def grow_convex_hull(expand_by: float, verts) -> np.ndarray:
    """
    Сдвинуть контур наружу на expand_by.

    Args:
        expand_by: Дистанция сдвига, >= 0.
        verts: Точки контура shape (N, 3) (или (N, 2)), простой многоугольник.

    Returns:
        Точки shape (N, 3). Пустой массив shape (0, 3), если точек меньше трёх
        или направление обхода определить не удалось.

    Raises:
        ValueError: Если expand_by < 0.
    """
    if expand_by < 0:
        raise ValueError(f"expand_by must be >= 0, got {expand_by}")

    points = _as_points(verts)
    empty = np.zeros((0, 3), dtype=np.float64)
    if len(points) < 3:
        return empty

    winding = detect_winding(points)
    if winding is None:
        return empty

    sign = int(winding)
    all_verts = np.vstack((points, points[0], points[1]))
    threshold_sq = (THRESHOLD_FACTOR * expand_by) ** 2

    result = np.empty((len(points), 3), dtype=np.float64)
    previous_line = None
    for index in range(len(all_verts) - 2):
        v1 = all_verts[index]
        v2 = all_verts[index + 1]
        v3 = all_verts[index + 2]

        if previous_line is None:
            move_dir1 = _rotate_90(_safe_normal_2d(v1 - v2), sign) * expand_by
            line1 = (v1 + move_dir1, v2 + move_dir1)
        else:
            line1 = previous_line

        move_dir2 = _rotate_90(_safe_normal_2d(v2 - v3), sign) * expand_by
        line2 = (v2 + move_dir2, v3 + move_dir2)

        new_point = _line_intersection(line1, line2)
        if new_point is None:
            # Рёбра параллельны — просто сдвигаем вершину
            result[index] = v2 + move_dir2
        else:
            to_new_point = new_point - v2
            dist_sq = to_new_point[0] ** 2 + to_new_point[1] ** 2
            if dist_sq > threshold_sq:
                result[index] = v2 + _safe_normal_2d(to_new_point) * expand_by * CLAMP_FACTOR
            else:
                result[index] = new_point

        previous_line = line2

    return result
