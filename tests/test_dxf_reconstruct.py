import math

import pytest

from cadexchange.dxf import build_shape, parse_entities, reconstruct
from cadexchange.geometry import CircularArc, LineSegment
from cadexchange.kernel import native


def _dxf(*pairs):
    return "".join(f"{code}\n{value}\n" for code, value in pairs)


def _one(*pairs):
    entities = parse_entities(_dxf(*pairs))
    assert len(entities) == 1
    return build_shape(entities[0], native)


def _close(a, b):
    return all(math.isclose(x, y, abs_tol=1e-9) for x, y in zip(a, b))


def test_line_example_reconstructs_edge():
    text = "0\nLINE\n 8\n0\n 10\n0.0\n 20\n0.0\n 11\n5.0\n 21\n0.0\n"
    compound, count = reconstruct(parse_entities(text), native)
    assert count == 1
    (edge,) = compound.children
    assert edge.start == (0.0, 0.0, 0.0)
    assert edge.end == (5.0, 0.0, 0.0)


def test_line_uses_z_codes_when_present():
    edge = _one((0, "LINE"), (10, 0), (20, 0), (30, 1), (11, 1), (21, 1), (31, 2))
    assert edge.start == (0.0, 0.0, 1.0)
    assert edge.end == (1.0, 1.0, 2.0)


def test_line_missing_endpoint_builds_nothing():
    assert _one((0, "LINE"), (10, 0), (20, 0), (11, 1)) is None


def test_circle_is_full_circle():
    edge = _one((0, "CIRCLE"), (10, 1), (20, 2), (40, 3))
    assert isinstance(edge.curve, CircularArc)
    assert edge.curve.is_full
    assert edge.curve.center == (1.0, 2.0, 0.0)
    assert edge.curve.radius == 3.0


def test_circle_keeps_centre_elevation():
    edge = _one((0, "CIRCLE"), (10, 1), (20, 2), (30, 4), (40, 3))
    assert edge.curve.center == (1.0, 2.0, 4.0)
    assert edge.start[2] == 4.0


def test_arc_angles_are_converted_to_radians():
    edge = _one((0, "ARC"), (10, 0), (20, 0), (40, 2), (50, 0), (51, 90))
    arc = edge.curve
    assert not arc.is_full
    assert math.isclose(arc.start_angle, 0.0)
    assert math.isclose(arc.end_angle, math.pi / 2)
    assert _close(edge.end, (0.0, 2.0, 0.0))


def test_arc_crossing_zero_degrees_runs_counter_clockwise():
    arc = _one((0, "ARC"), (10, 0), (20, 0), (40, 1), (50, 270), (51, 90)).curve
    assert math.isclose(arc.end_angle - arc.start_angle, math.pi)


def test_arc_without_angles_builds_nothing():
    assert _one((0, "ARC"), (10, 0), (20, 0), (40, 2), (50, 0)) is None


def test_zero_radius_circle_is_skipped():
    assert _one((0, "CIRCLE"), (10, 0), (20, 0), (40, 0)) is None


def _square(kind, flags):
    pairs = [(0, kind), (70, flags)]
    for x, y in [(0, 0), (1, 0), (1, 1), (0, 1)]:
        pairs += [(10, x), (20, y)]
    return pairs


def test_closed_lwpolyline_has_one_edge_per_point():
    wire = _one(*_square("LWPOLYLINE", 1))
    assert len(wire.edges) == 4
    assert wire.edges[-1].end == wire.edges[0].start


def test_open_lwpolyline_has_one_edge_less_than_points():
    wire = _one(*_square("LWPOLYLINE", 0))
    assert len(wire.edges) == 3


def test_polyline_closed_flag_does_not_add_closing_edge():
    wire = _one(*_square("POLYLINE", 1))
    assert len(wire.edges) == 3


def test_two_point_closed_lwpolyline_is_a_single_edge():
    wire = _one((0, "LWPOLYLINE"), (70, 1), (10, 0), (20, 0), (10, 3), (20, 0))
    assert len(wire.edges) == 1


def test_single_point_polyline_builds_nothing():
    assert _one((0, "LWPOLYLINE"), (10, 0), (20, 0)) is None


def test_3d_polyline_keeps_z():
    wire = _one((0, "POLYLINE"), (70, 8),
                (10, 0), (20, 0), (30, 1),
                (10, 1), (20, 0), (30, 2))
    assert wire.edges[0].start == (0.0, 0.0, 1.0)
    assert wire.edges[0].end == (1.0, 0.0, 2.0)


def test_2d_polyline_forces_z_to_zero():
    for kind, flags in (("POLYLINE", 0), ("LWPOLYLINE", 8)):
        wire = _one((0, kind), (70, flags),
                    (10, 0), (20, 0), (30, 1),
                    (10, 1), (20, 0), (30, 2))
        assert wire.edges[0].start == (0.0, 0.0, 0.0)
        assert wire.edges[0].end == (1.0, 0.0, 0.0)


def test_polyline_points_come_from_following_vertices():
    text = _dxf(
        (0, "POLYLINE"), (66, 1), (10, 0), (20, 0), (30, 0),
        (0, "VERTEX"), (10, 0), (20, 0),
        (0, "VERTEX"), (10, 2), (20, 0),
        (0, "VERTEX"), (10, 2), (20, 2),
        (0, "SEQEND"),
        (0, "LINE"), (10, 0), (20, 0), (11, 0), (21, 5),
    )
    compound, count = reconstruct(parse_entities(text), native)
    assert count == 2
    wire, line = compound.children
    assert [edge.start for edge in wire.edges] == [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0)]
    assert wire.edges[-1].end == (2.0, 2.0, 0.0)
    assert isinstance(line.curve, LineSegment)


def _face(corner_count, repeat_last=False):
    corners = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)][:corner_count]
    if repeat_last:
        corners.append(corners[-1])
    pairs = [(0, "3DFACE")]
    for i, (x, y, z) in enumerate(corners):
        pairs += [(10 + i, x), (20 + i, y), (30 + i, z)]
    return pairs


def test_3dface_with_three_corners_is_a_triangle():
    face = _one(*_face(3))
    assert len(native.face_points(face)) == 3


def test_3dface_with_four_corners_is_a_quad():
    face = _one(*_face(4))
    assert native.face_points(face) == [
        (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)
    ]


def test_3dface_repeated_fourth_corner_is_a_triangle():
    face = _one(*_face(3, repeat_last=True))
    assert len(native.face_points(face)) == 3


def test_3dface_with_two_corners_builds_nothing():
    assert _one(*_face(2)) is None


def test_bad_number_skips_only_that_entity():
    text = _dxf(
        (0, "LINE"), (10, "zero"), (20, 0), (11, 1), (21, 0),
        (0, "CIRCLE"), (10, 0), (20, 0), (40, 1),
        (0, "LWPOLYLINE"), (10, 0), (20, "x"), (10, 1), (20, 1),
    )
    compound, count = reconstruct(parse_entities(text), native)
    assert count == 1
    assert isinstance(compound.children[0].curve, CircularArc)


def test_unknown_entities_are_skipped():
    text = _dxf((0, "SECTION"), (2, "ENTITIES"), (0, "TEXT"), (1, "hi"), (0, "ENDSEC"))
    compound, count = reconstruct(parse_entities(text), native)
    assert count == 0
    assert compound.children == ()


@pytest.mark.parametrize("kind", ["LINE", "CIRCLE", "ARC", "POLYLINE", "LWPOLYLINE", "3DFACE"])
def test_entity_without_fields_builds_nothing(kind):
    assert _one((0, kind)) is None
