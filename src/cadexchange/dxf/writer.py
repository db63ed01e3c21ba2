"""Serialise kernel shapes as DXF text.

Every edge is written as LINE, CIRCLE or ARC according to its curve.  Wires
are also written as one LWPOLYLINE and faces as one 3DFACE, so the edges of
a wire appear twice in the output.
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Sequence

from cadexchange.geometry import CircularArc, LineSegment, Vec3
from cadexchange.kernel import resolve_kernel
from cadexchange.options import DxfOptions

logger = logging.getLogger(__name__)


class _DxfText:
    """Accumulates ``code``/``value`` line pairs."""

    def __init__(self, options: DxfOptions):
        self.options = options
        self.lines: List[str] = []
        self.records = 0

    def tag(self, code: int, value) -> None:
        self.lines.append(f"{code:>3}")
        self.lines.append(str(value))

    def number(self, code: int, value: float) -> None:
        self.tag(code, self.options.format_number(value))

    def point(self, code: int, point: Sequence[float], dims: int = 3) -> None:
        # y and z codes sit 10 and 20 above the x code
        for axis in range(dims):
            self.number(code + 10 * axis, point[axis])

    def entity(self, kind: str) -> None:
        self.tag(0, kind)
        self.tag(8, self.options.layer)
        self.records += 1

    def header(self) -> None:
        self.tag(0, "SECTION")
        self.tag(2, "HEADER")
        self.tag(9, "$ACADVER")
        self.tag(1, self.options.acad_version)
        self.tag(9, "$INSUNITS")
        self.tag(70, self.options.insunits)
        self.tag(0, "ENDSEC")

    def tables(self) -> None:
        self.tag(0, "SECTION")
        self.tag(2, "TABLES")
        self.tag(0, "TABLE")
        self.tag(2, "LAYER")
        layers = ["0"]
        if self.options.layer != "0":
            layers.append(self.options.layer)
        for name in layers:
            self.tag(0, "LAYER")
            self.tag(2, name)
            self.tag(70, 0)
            self.tag(62, 7)
            self.tag(6, "CONTINUOUS")
        self.tag(0, "ENDTAB")
        self.tag(0, "ENDSEC")

    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def _degrees(angle: float) -> float:
    return math.degrees(angle) % 360.0


def write_curve(out: _DxfText, curve) -> None:
    if isinstance(curve, LineSegment):
        out.entity("LINE")
        out.point(10, curve.start)
        out.point(11, curve.end)
    elif isinstance(curve, CircularArc):
        out.entity("CIRCLE" if curve.is_full else "ARC")
        out.point(10, curve.center)
        out.number(40, curve.radius)
        if not curve.is_full:
            out.number(50, _degrees(curve.start_angle))
            out.number(51, _degrees(curve.end_angle))


def write_polyline(out: _DxfText, points: Sequence[Vec3], closed: bool) -> None:
    if len(points) < 2:
        return
    out.entity("LWPOLYLINE")
    out.tag(90, len(points))
    out.tag(70, 1 if closed else 0)
    for point in points:
        out.point(10, point, dims=2)


def write_face(out: _DxfText, points: Sequence[Vec3]) -> None:
    if len(points) < 3:
        return
    out.entity("3DFACE")
    for index, point in enumerate(points[:4]):
        out.point(10 + index, point)


def write_dxf(shapes: Iterable, kernel=None, options: Optional[DxfOptions] = None) -> str:
    """Return DXF text for ``shapes``.

    Curves the format cannot express are left out; the writer does not
    raise for geometry it cannot represent.
    """
    kernel = resolve_kernel(kernel)
    out = _DxfText(options or DxfOptions())
    out.header()
    out.tables()
    out.tag(0, "SECTION")
    out.tag(2, "ENTITIES")

    for shape in shapes:
        if shape is None or kernel.is_null(shape):
            continue
        for edge in kernel.edges(shape):
            curve = kernel.curve_info(edge)
            if curve is None:
                logger.debug("skipping edge with unsupported curve type")
                continue
            write_curve(out, curve)
        kind = kernel.shape_kind(shape)
        if kind == 'wire':
            write_polyline(out, *kernel.wire_points(shape))
        elif kind == 'face':
            write_face(out, kernel.face_points(shape))

    out.tag(0, "ENDSEC")
    out.tag(0, "EOF")
    logger.info("wrote %d DXF entities", out.records)
    return out.text()


__all__ = ['write_dxf', 'write_curve', 'write_face', 'write_polyline']
