"""Pure-Python shape records for line/arc/polygon geometry.

This kernel covers exactly what the DXF codec builds and writes: edges on
straight or circular curves, wires chaining edges, planar polygon faces and
compounds.  It has no solid modelling and no exchange-format readers; those
live in :mod:`cadexchange.kernel.occ`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from cadexchange.geometry import (
    TWO_PI,
    CircularArc,
    LineSegment,
    Vec3,
    polygon_corners,
    same_point,
    to_vec3,
)

KERNEL_NAME = 'native'

Curve = Union[LineSegment, CircularArc]


@dataclass(eq=False)
class Edge:
    curve: Curve

    @property
    def start(self) -> Vec3:
        if isinstance(self.curve, LineSegment):
            return self.curve.start
        return self.curve.start_point

    @property
    def end(self) -> Vec3:
        if isinstance(self.curve, LineSegment):
            return self.curve.end
        return self.curve.end_point


@dataclass(eq=False)
class Wire:
    edges: Tuple[Edge, ...]


@dataclass(eq=False)
class Face:
    boundary: Wire


@dataclass(eq=False)
class Compound:
    children: Tuple[object, ...]
    kind: str = 'compound'


def is_available() -> bool:
    return True


def require() -> None:
    return None


## construction

def make_segment(p1: Sequence[float], p2: Sequence[float]) -> Optional[Edge]:
    start, end = to_vec3(p1), to_vec3(p2)
    if same_point(start, end):
        return None
    return Edge(LineSegment(start, end))


def make_circle_edge(center: Sequence[float], radius: float,
                     first: float = 0.0, last: float = TWO_PI) -> Edge:
    if not radius > 0.0:
        raise ValueError(f"circle radius must be positive, got {radius!r}")
    first = float(first)
    last = float(last)
    # periodic curve: the trimmed range always runs counter-clockwise
    while last <= first:
        last += TWO_PI
    return Edge(CircularArc(to_vec3(center), float(radius), first, last))


def _connected(prev: Edge, nxt: Edge) -> bool:
    return any(same_point(a, b) for a in (prev.start, prev.end) for b in (nxt.start, nxt.end))


def make_wire(edges: Iterable[Edge]) -> Optional[Wire]:
    edge_list = [edge for edge in edges if edge is not None]
    if not edge_list:
        return None
    for prev, nxt in zip(edge_list, edge_list[1:]):
        if not _connected(prev, nxt):
            return None
    return Wire(tuple(edge_list))


def make_polygon_face(points: Sequence[Sequence[float]]) -> Optional[Face]:
    corners = polygon_corners(points)
    if len(corners) < 3:
        return None
    edges = [Edge(LineSegment(a, b)) for a, b in zip(corners, corners[1:] + corners[:1])]
    return Face(Wire(tuple(edges)))


def make_compound(shapes: Iterable[object]) -> Compound:
    return Compound(tuple(shapes))


## queries

def is_null(shape) -> bool:
    return shape is None


def shape_kind(shape) -> str:
    if isinstance(shape, Compound):
        return shape.kind
    if isinstance(shape, Face):
        return 'face'
    if isinstance(shape, Wire):
        return 'wire'
    if isinstance(shape, Edge):
        return 'edge'
    raise TypeError(f"not a native shape: {shape!r}")


def components(shape) -> Tuple[object, ...]:
    if isinstance(shape, Compound):
        return shape.children
    if isinstance(shape, Face):
        return (shape.boundary,)
    if isinstance(shape, Wire):
        return shape.edges
    return ()


def edges(shape) -> Iterator[Edge]:
    if isinstance(shape, Edge):
        yield shape
        return
    for child in components(shape):
        yield from edges(child)


def faces(shape) -> Iterator[Face]:
    if isinstance(shape, Face):
        yield shape
        return
    for child in components(shape):
        yield from faces(child)


def curve_info(edge: Edge) -> Optional[Curve]:
    return edge.curve


def wire_points(wire: Wire) -> Tuple[List[Vec3], bool]:
    if not wire.edges:
        return [], False
    points = [edge.start for edge in wire.edges]
    closed = same_point(wire.edges[-1].end, wire.edges[0].start)
    if not closed:
        points.append(wire.edges[-1].end)
    return points, closed


def face_points(face: Face) -> List[Vec3]:
    points, _ = wire_points(face.boundary)
    return points


__all__ = [
    'Edge',
    'Wire',
    'Face',
    'Compound',
    'is_available',
    'require',
    'make_segment',
    'make_circle_edge',
    'make_wire',
    'make_polygon_face',
    'make_compound',
    'is_null',
    'shape_kind',
    'components',
    'edges',
    'faces',
    'curve_info',
    'wire_points',
    'face_points',
]
