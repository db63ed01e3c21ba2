"""Rebuild kernel geometry from DXF entities.

Each supported entity type has its own builder.  A builder returns ``None``
when the fields it needs are absent, so no partial geometry is produced;
a field that is present but not numeric raises
:class:`~cadexchange.dxf.entities.DxfFieldError`, which
:func:`build_shape` contains to the one entity.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, List, Sequence, Tuple

from cadexchange.dxf.entities import DxfEntity, parse_float
from cadexchange.geometry import TWO_PI, Vec3, same_point

logger = logging.getLogger(__name__)

FLAG_CLOSED = 1
FLAG_3D_POLYLINE = 8


def _z(entity: DxfEntity, code: int) -> float:
    return entity.float_field(code) if entity.has(code) else 0.0


def build_line(entity: DxfEntity, kernel):
    if not entity.has(10, 20, 11, 21):
        return None
    start = (entity.float_field(10), entity.float_field(20), _z(entity, 30))
    end = (entity.float_field(11), entity.float_field(21), _z(entity, 31))
    return kernel.make_segment(start, end)


def build_circle(entity: DxfEntity, kernel):
    if not entity.has(10, 20, 40):
        return None
    center = (entity.float_field(10), entity.float_field(20), _z(entity, 30))
    return kernel.make_circle_edge(center, entity.float_field(40), 0.0, TWO_PI)


def build_arc(entity: DxfEntity, kernel):
    if not entity.has(10, 20, 40, 50, 51):
        return None
    center = (entity.float_field(10), entity.float_field(20), _z(entity, 30))
    start = math.radians(entity.float_field(50))
    end = math.radians(entity.float_field(51))
    return kernel.make_circle_edge(center, entity.float_field(40), start, end)


def polyline_points(entity: DxfEntity,
                    vertices: Sequence[DxfEntity] = ()) -> List[Vec3]:
    """Points of a (LW)POLYLINE, pairing x/y/z values in reading order.

    ``vertices`` are VERTEX records that followed a POLYLINE; when given
    they supply the coordinates instead of the POLYLINE's own codes.
    """
    sources = list(vertices) if vertices else [entity]
    xs: List[float] = []
    ys: List[float] = []
    zs: List[float] = []
    for source in sources:
        for code, value in source.tags:
            if code == 10:
                xs.append(parse_float(value, entity.type, code))
            elif code == 20:
                ys.append(parse_float(value, entity.type, code))
            elif code == 30:
                zs.append(parse_float(value, entity.type, code))

    flags = entity.int_field(70)
    if entity.type == 'POLYLINE' and flags & FLAG_3D_POLYLINE:
        return list(zip(xs, ys, zs))
    return [(x, y, 0.0) for x, y in zip(xs, ys)]


def build_polyline(entity: DxfEntity, kernel, vertices: Sequence[DxfEntity] = ()):
    points = polyline_points(entity, vertices)
    if len(points) < 2:
        return None
    edges = [kernel.make_segment(a, b) for a, b in zip(points, points[1:])]
    if (entity.type == 'LWPOLYLINE' and len(points) > 2
            and entity.int_field(70) & FLAG_CLOSED):
        edges.append(kernel.make_segment(points[-1], points[0]))
    edges = [edge for edge in edges if edge is not None]
    if not edges:
        return None
    return kernel.make_wire(edges)


def face_corners(entity: DxfEntity) -> List[Vec3]:
    corners: List[Vec3] = []
    for i in range(4):
        codes = (10 + i, 20 + i, 30 + i)
        if entity.has(*codes):
            corners.append(tuple(entity.float_field(code) for code in codes))
    # a repeated fourth corner is how the format spells a triangle
    if len(corners) == 4 and same_point(corners[3], corners[2]):
        corners.pop()
    return corners


def build_3dface(entity: DxfEntity, kernel):
    corners = face_corners(entity)
    if len(corners) < 3:
        return None
    return kernel.make_polygon_face(corners)


BUILDERS: Dict[str, Callable] = {
    'LINE': build_line,
    'CIRCLE': build_circle,
    'ARC': build_arc,
    'POLYLINE': build_polyline,
    'LWPOLYLINE': build_polyline,
    '3DFACE': build_3dface,
}


def build_shape(entity: DxfEntity, kernel, vertices: Sequence[DxfEntity] = ()):
    """Shape for one entity, or ``None`` if it cannot (or need not) be built."""
    builder = BUILDERS.get(entity.type)
    if builder is None:
        return None
    try:
        if builder is build_polyline:
            return builder(entity, kernel, vertices)
        return builder(entity, kernel)
    except ValueError as exc:
        logger.debug("skipping %s entity on layer %s: %s", entity.type, entity.layer, exc)
        return None


def _following_vertices(entities: Sequence[DxfEntity], index: int) -> List[DxfEntity]:
    vertices = []
    for follower in entities[index + 1:]:
        if follower.type != 'VERTEX':
            break
        vertices.append(follower)
    return vertices


def reconstruct(entities: Sequence[DxfEntity], kernel) -> Tuple[object, int]:
    """Compound of every buildable entity and the number of shapes in it."""
    shapes = []
    for index, entity in enumerate(entities):
        vertices: List[DxfEntity] = []
        if entity.type == 'POLYLINE':
            vertices = _following_vertices(entities, index)
        shape = build_shape(entity, kernel, vertices)
        if shape is not None and not kernel.is_null(shape):
            shapes.append(shape)
    return kernel.make_compound(shapes), len(shapes)


__all__ = [
    'BUILDERS',
    'build_shape',
    'build_line',
    'build_circle',
    'build_arc',
    'build_polyline',
    'build_3dface',
    'face_corners',
    'polyline_points',
    'reconstruct',
]
