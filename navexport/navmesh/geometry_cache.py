"""
Кэш коллизионной геометрии: заголовок + массив вершин + массив индексов
в одном байтовом буфере.

Формат (little-endian):
    int32 data_size    полный размер буфера в байтах
    int32 num_verts
    int32 num_faces
    float32[num_verts * 3]   вершины в пространстве генератора
    int32[num_faces * 3]     треугольники, индексы с нуля
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

import numpy as np


HEADER_FORMAT = "<iii"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
FLOAT_SIZE = 4
INDEX_SIZE = 4


class MalformedGeometryCacheError(ValueError):
    """Буфер не соответствует собственному заголовку."""


@dataclass(frozen=True)
class GeometryCacheHeader:
    data_size: int
    num_verts: int
    num_faces: int

    def expected_size(self) -> int:
        return HEADER_SIZE + self.num_verts * 3 * FLOAT_SIZE + self.num_faces * 3 * INDEX_SIZE


class GeometryCache:
    """
    Read-only представление буфера кэша.

    verts и indices — numpy view поверх переданного буфера без копирования,
    поэтому буфер должен жить не меньше, чем этот объект.
    """

    __slots__ = ("header", "verts", "indices")

    def __init__(self, memory):
        view = memoryview(memory).cast("B")
        if view.nbytes < HEADER_SIZE:
            raise MalformedGeometryCacheError(
                f"Geometry cache is {view.nbytes} bytes, header alone needs {HEADER_SIZE}"
            )

        header = GeometryCacheHeader(*struct.unpack_from(HEADER_FORMAT, view, 0))
        if header.num_verts < 0 or header.num_faces < 0:
            raise MalformedGeometryCacheError(
                f"Negative counts in geometry cache header: {header.num_verts} verts, {header.num_faces} faces"
            )
        if header.data_size != view.nbytes:
            raise MalformedGeometryCacheError(
                f"Geometry cache header declares {header.data_size} bytes, buffer has {view.nbytes}"
            )
        if header.expected_size() != view.nbytes:
            raise MalformedGeometryCacheError(
                f"Geometry cache with {header.num_verts} verts and {header.num_faces} faces "
                f"must be {header.expected_size()} bytes, got {view.nbytes}"
            )

        verts_offset = HEADER_SIZE
        indices_offset = verts_offset + header.num_verts * 3 * FLOAT_SIZE
        verts = _view(view, "<f4", header.num_verts * 3, verts_offset)
        indices = _view(view, "<i4", header.num_faces * 3, indices_offset)

        if len(indices) and (indices.min() < 0 or indices.max() >= header.num_verts):
            raise MalformedGeometryCacheError(
                f"Geometry cache face index out of range [0, {header.num_verts})"
            )

        self.header = header
        self.verts = verts
        self.indices = indices

    @property
    def num_verts(self) -> int:
        return self.header.num_verts

    @property
    def num_faces(self) -> int:
        return self.header.num_faces

    def vertices(self) -> np.ndarray:
        """Вершины shape (num_verts, 3), тоже view."""
        return self.verts.reshape(-1, 3)


def _view(view: memoryview, dtype: str, count: int, offset: int) -> np.ndarray:
    if count == 0:
        return np.zeros(0, dtype=dtype)
    return np.frombuffer(view, dtype=dtype, count=count, offset=offset)


def encode_geometry_cache(verts, indices) -> bytes:
    """
    Собрать буфер кэша из вершин и индексов.

    Args:
        verts: Вершины shape (N, 3) или плоский массив длины 3N.
        indices: Индексы треугольников shape (M, 3) или плоский массив длины 3M.
    """
    verts = np.asarray(verts, dtype="<f4").reshape(-1)
    indices = np.asarray(indices, dtype="<i4").reshape(-1)
    if len(verts) % 3 != 0 or len(indices) % 3 != 0:
        raise ValueError("Vertex and index arrays must hold whole triples")

    num_verts = len(verts) // 3
    num_faces = len(indices) // 3
    header = GeometryCacheHeader(0, num_verts, num_faces)
    data_size = header.expected_size()
    return struct.pack(HEADER_FORMAT, data_size, num_verts, num_faces) + verts.tobytes() + indices.tobytes()
