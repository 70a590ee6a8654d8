"""
Navexport - выгрузка геометрии навигации для внешнего генератора навмеша.

Основные модули:
- geombase - трансформы экземпляров и перевод координат
- navmesh - сбор геометрии, раздувание областей и запись OBJ
"""

from .navmesh import export_navigation_data, grow_convex_hull, GeometryCollector, MeshExporter

__version__ = '0.1.0'

__all__ = [
    'export_navigation_data',
    'grow_convex_hull',
    'GeometryCollector',
    'MeshExporter',
]
