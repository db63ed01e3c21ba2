"""Kernel-neutral curve descriptors shared by the kernels and the DXF writer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

Vec3 = Tuple[float, float, float]

TWO_PI = 2.0 * math.pi
ANGLE_TOL = 1e-9
POINT_TOL = 1e-7


def to_vec3(point_like: Sequence[float]) -> Vec3:
    """Return ``point_like`` as an XYZ float tuple; z defaults to 0."""

    if len(point_like) < 2:
        raise ValueError("point must have at least two components")
    z = float(point_like[2]) if len(point_like) > 2 else 0.0
    return float(point_like[0]), float(point_like[1]), z


def same_point(a: Vec3, b: Vec3, tol: float = POINT_TOL) -> bool:
    return (abs(a[0] - b[0]) <= tol
            and abs(a[1] - b[1]) <= tol
            and abs(a[2] - b[2]) <= tol)


def polygon_corners(points: Sequence[Sequence[float]]) -> List[Vec3]:
    """Distinct corners of a polygon: consecutive repeats and the closing repeat removed."""
    corners: List[Vec3] = []
    for pt in points:
        vec = to_vec3(pt)
        if corners and same_point(corners[-1], vec):
            continue
        corners.append(vec)
    if len(corners) > 1 and same_point(corners[0], corners[-1]):
        corners.pop()
    return corners


@dataclass(frozen=True)
class LineSegment:
    """Straight curve between two points."""

    start: Vec3
    end: Vec3


@dataclass(frozen=True)
class CircularArc:
    """Circle (or part of one) in a plane parallel to XY.

    Angles are radians, counter-clockwise from +x, ``end_angle`` is never
    smaller than ``start_angle``.
    """

    center: Vec3
    radius: float
    start_angle: float = 0.0
    end_angle: float = TWO_PI

    @property
    def is_full(self) -> bool:
        return self.end_angle - self.start_angle >= TWO_PI - ANGLE_TOL

    def point_at(self, angle: float) -> Vec3:
        cx, cy, cz = self.center
        return (cx + self.radius * math.cos(angle),
                cy + self.radius * math.sin(angle),
                cz)

    @property
    def start_point(self) -> Vec3:
        return self.point_at(self.start_angle)

    @property
    def end_point(self) -> Vec3:
        return self.point_at(self.end_angle)


__all__ = [
    "Vec3",
    "TWO_PI",
    "LineSegment",
    "CircularArc",
    "polygon_corners",
    "to_vec3",
    "same_point",
]
