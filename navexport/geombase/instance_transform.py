"""InstanceTransform - placement of a shared geometry template in the world.

Rotation quaternion (x, y, z, w), translation vector and per-axis scale.

Point transform:
    p' = qrot(ang, scale * p) + lin
"""

import math
import numpy
from navexport.util import qmatrix, qrot


class InstanceTransform:
    """Affine instance placement: rotation quaternion, translation vector and scale."""

    __slots__ = ('ang', 'lin', 'scale', '_mat')

    def __init__(
        self,
        ang: numpy.ndarray = None,
        lin: numpy.ndarray = None,
        scale: numpy.ndarray = None
    ):
        if ang is None:
            ang = numpy.array([0.0, 0.0, 0.0, 1.0])
        if lin is None:
            lin = numpy.array([0.0, 0.0, 0.0])
        if scale is None:
            scale = numpy.array([1.0, 1.0, 1.0])
        self.ang = numpy.asarray(ang, dtype=numpy.float64)
        self.lin = numpy.asarray(lin, dtype=numpy.float64)
        self.scale = numpy.asarray(scale, dtype=numpy.float64)
        self._mat = None

    @staticmethod
    def identity() -> 'InstanceTransform':
        return InstanceTransform()

    def rotation_matrix(self) -> numpy.ndarray:
        """Get the 3x3 rotation matrix corresponding to the orientation."""
        return qmatrix(self.ang)

    def as_matrix(self) -> numpy.ndarray:
        """Get the 4x4 transformation matrix with scale baked in.

        Returns TRS matrix: Translation * Rotation * Scale
        """
        if self._mat is None:
            RS = self.rotation_matrix() @ numpy.diag(self.scale)
            self._mat = numpy.eye(4)
            self._mat[:3, :3] = RS
            self._mat[:3, 3] = self.lin
        return self._mat

    def transform_point(self, point: numpy.ndarray) -> numpy.ndarray:
        """Transform a 3D point (or an (N, 3) batch) using the transform (with scale)."""
        return qrot(self.ang, self.scale * numpy.asarray(point, dtype=numpy.float64)) + self.lin

    def __repr__(self):
        return f"InstanceTransform(ang={self.ang}, lin={self.lin}, scale={self.scale})"

    # --- Factory methods ---

    @staticmethod
    def rotation(axis: numpy.ndarray, angle: float) -> 'InstanceTransform':
        """Create a rotation around a given axis by a given angle (radians)."""
        axis = numpy.asarray(axis, dtype=numpy.float64)
        axis = axis / numpy.linalg.norm(axis)
        s = math.sin(angle / 2)
        c = math.cos(angle / 2)
        q = numpy.array([axis[0] * s, axis[1] * s, axis[2] * s, c])
        return InstanceTransform(ang=q)

    @staticmethod
    def translation(x: float, y: float, z: float) -> 'InstanceTransform':
        return InstanceTransform(lin=numpy.array([x, y, z]))

    @staticmethod
    def scaling(sx: float, sy: float = None, sz: float = None) -> 'InstanceTransform':
        """Create a scale-only transform.

        If only sx is given, uniform scale is applied.
        """
        if sy is None:
            sy = sx
        if sz is None:
            sz = sx
        return InstanceTransform(scale=numpy.array([sx, sy, sz]))

    @staticmethod
    def rotateZ(angle: float) -> 'InstanceTransform':
        """Create a rotation around the vertical (Z) axis."""
        return InstanceTransform.rotation(numpy.array([0.0, 0.0, 1.0]), angle)
