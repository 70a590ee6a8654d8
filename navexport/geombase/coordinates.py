"""
Перевод координат между соглашением движка и соглашением генератора навмеша.

Движок: X вперёд, Y вправо, Z вверх.
Генератор (Recast): Y вверх.

Все функции принимают точку shape (3,) или пачку точек shape (N, 3).
"""

from __future__ import annotations

import numpy as np


_UNREAL_TO_RECAST = np.array([
    [-1.0, 0.0, 0.0, 0.0],
    [0.0, 0.0, 1.0, 0.0],
    [0.0, -1.0, 0.0, 0.0],
    [0.0, 0.0, 0.0, 1.0],
])


def unreal_to_recast_point(point: np.ndarray) -> np.ndarray:
    """(x, y, z) -> (-x, z, -y)."""
    p = np.asarray(point, dtype=np.float64)
    return np.stack((-p[..., 0], p[..., 2], -p[..., 1]), axis=-1)


def recast_to_unreal_point(point: np.ndarray) -> np.ndarray:
    """(x, y, z) -> (-x, -z, y). Обратное к unreal_to_recast_point."""
    p = np.asarray(point, dtype=np.float64)
    return np.stack((-p[..., 0], -p[..., 2], p[..., 1]), axis=-1)


def unreal_to_recast_box(
    box_min: np.ndarray,
    box_max: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Перевести AABB в пространство генератора.

    Углы меняют знак по некоторым осям, поэтому min/max пересчитываются
    покомпонентно по обоим переведённым углам.
    """
    a = unreal_to_recast_point(box_min)
    b = unreal_to_recast_point(box_max)
    return np.minimum(a, b), np.maximum(a, b)


def unreal_to_recast_matrix() -> np.ndarray:
    """4x4 матрица M: M @ [x, y, z, 1] == [*unreal_to_recast_point((x, y, z)), 1]."""
    return _UNREAL_TO_RECAST.copy()


def transform_points(matrix: np.ndarray, points: np.ndarray) -> np.ndarray:
    """Применить однородную 4x4 матрицу к пачке точек shape (N, 3)."""
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return points @ matrix[:3, :3].T + matrix[:3, 3]
