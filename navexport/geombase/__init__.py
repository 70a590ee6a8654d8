"""
Базовые геометрические классы (Geometric Base).

- InstanceTransform - размещение экземпляра геометрии (поворот + перенос + масштаб)
- coordinates - перевод точек, боксов и матриц между соглашениями осей
"""

from .instance_transform import InstanceTransform
from .coordinates import (
    unreal_to_recast_point,
    recast_to_unreal_point,
    unreal_to_recast_box,
    unreal_to_recast_matrix,
    transform_points,
)

__all__ = [
    'InstanceTransform',
    'unreal_to_recast_point',
    'recast_to_unreal_point',
    'unreal_to_recast_box',
    'unreal_to_recast_matrix',
    'transform_points',
]
