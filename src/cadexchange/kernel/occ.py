"""OpenCASCADE kernel (pythonocc-core).

Importing this module without pythonocc-core installed is allowed; the
first call that needs OCC raises a ``RuntimeError`` naming the missing
package.  Besides the shape primitives shared with the native kernel, this
module owns the exchange-format readers and writers that OCC provides:
STEP and IGES (through XCAF documents, so names and colours survive), STL
and the native BRep text format.
"""

from __future__ import annotations

import contextlib
import logging
import math
import os
import tempfile
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

from cadexchange.document import ColorChannel, AGGREGATE_KINDS, rgb_to_hex
from cadexchange.geometry import (
    ANGLE_TOL,
    TWO_PI,
    CircularArc,
    LineSegment,
    Vec3,
    polygon_corners,
    same_point,
    to_vec3,
)

logger = logging.getLogger(__name__)

try:  # pragma: no cover - exercised indirectly in environments with OCC
    from OCC.Core.BRep import BRep_Builder, BRep_Tool
    from OCC.Core.BRepAdaptor import BRepAdaptor_Curve
    from OCC.Core.BRepBuilderAPI import (
        BRepBuilderAPI_MakeEdge,
        BRepBuilderAPI_MakeFace,
        BRepBuilderAPI_MakePolygon,
        BRepBuilderAPI_MakeWire,
    )
    from OCC.Core.BRepTools import BRepTools_WireExplorer, breptools
    from OCC.Core.GeomAbs import GeomAbs_Circle, GeomAbs_Line
    from OCC.Core.IFSelect import IFSelect_RetDone
    from OCC.Core.IGESCAFControl import IGESCAFControl_Reader
    from OCC.Core.IGESControl import IGESControl_Controller, IGESControl_Writer
    from OCC.Core.Quantity import Quantity_Color, Quantity_TOC_sRGB
    from OCC.Core.STEPCAFControl import STEPCAFControl_Reader
    from OCC.Core.STEPControl import STEPControl_AsIs, STEPControl_Writer
    from OCC.Core.StlAPI import StlAPI_Reader
    from OCC.Core.TDF import TDF_ChildIterator, TDF_Label
    from OCC.Core.TDocStd import TDocStd_Document
    from OCC.Core.TopAbs import (
        TopAbs_COMPOUND,
        TopAbs_COMPSOLID,
        TopAbs_EDGE,
        TopAbs_FACE,
        TopAbs_SHELL,
        TopAbs_SOLID,
        TopAbs_VERTEX,
        TopAbs_WIRE,
    )
    from OCC.Core.TopExp import TopExp_Explorer, topexp
    from OCC.Core.TopoDS import TopoDS_Compound, TopoDS_Iterator, TopoDS_Shape, topods
    from OCC.Core.XCAFDoc import (
        XCAFDoc_ColorCurv,
        XCAFDoc_ColorGen,
        XCAFDoc_ColorSurf,
        XCAFDoc_DocumentTool,
        XCAFDoc_ShapeTool,
    )
    from OCC.Core.gp import gp_Ax2, gp_Circ, gp_Dir, gp_Pnt

    _OCC_IMPORT_ERROR: Optional[Exception] = None
    _HAVE_OCC = True
except ImportError as exc:  # pragma: no cover - handled during runtime detection
    BRep_Builder = BRep_Tool = BRepAdaptor_Curve = None
    BRepBuilderAPI_MakeEdge = BRepBuilderAPI_MakeFace = None
    BRepBuilderAPI_MakePolygon = BRepBuilderAPI_MakeWire = None
    BRepTools_WireExplorer = breptools = None
    GeomAbs_Circle = GeomAbs_Line = None
    IFSelect_RetDone = None
    IGESCAFControl_Reader = IGESControl_Controller = IGESControl_Writer = None
    Quantity_Color = Quantity_TOC_sRGB = None
    STEPCAFControl_Reader = STEPControl_AsIs = STEPControl_Writer = None
    StlAPI_Reader = None
    TDF_ChildIterator = TDF_Label = TDocStd_Document = None
    TopAbs_COMPOUND = TopAbs_COMPSOLID = TopAbs_SOLID = TopAbs_SHELL = None
    TopAbs_FACE = TopAbs_WIRE = TopAbs_EDGE = TopAbs_VERTEX = None
    TopExp_Explorer = topexp = None
    TopoDS_Compound = TopoDS_Iterator = TopoDS_Shape = topods = Any
    XCAFDoc_ColorCurv = XCAFDoc_ColorGen = XCAFDoc_ColorSurf = None
    XCAFDoc_DocumentTool = XCAFDoc_ShapeTool = None
    gp_Ax2 = gp_Circ = gp_Dir = gp_Pnt = None
    _OCC_IMPORT_ERROR = exc
    _HAVE_OCC = False

KERNEL_NAME = 'occ'


def occ_available() -> bool:
    """Return True when pythonocc-core imports succeeded."""
    return _HAVE_OCC


def require_occ() -> None:
    """Raise a descriptive error if pythonocc-core is not installed."""
    if _HAVE_OCC:
        return
    raise RuntimeError(
        "pythonocc-core is not available. Install it from conda-forge "
        "(conda install -c conda-forge pythonocc-core) to read or write "
        "STEP, IGES, STL and BRep data."
    ) from _OCC_IMPORT_ERROR


is_available = occ_available
require = require_occ


## staging files for the file-based OCC readers and writers

@contextlib.contextmanager
def staged_file(suffix: str, data: Optional[bytes] = None) -> Iterator[str]:
    """Yield a temporary path (holding ``data`` if given), removed on exit."""
    handle = tempfile.NamedTemporaryFile(delete=False, suffix=suffix)
    try:
        if data is not None:
            handle.write(data)
        handle.close()
        yield handle.name
    finally:
        handle.close()
        with contextlib.suppress(FileNotFoundError):
            os.remove(handle.name)


def _read_back(path: str) -> bytes:
    with open(path, "rb") as fp:
        return fp.read()


## construction

def _pnt(point: Sequence[float]):
    return gp_Pnt(*to_vec3(point))


def _xyz(pnt) -> Vec3:
    return (pnt.X(), pnt.Y(), pnt.Z())


def make_segment(p1: Sequence[float], p2: Sequence[float]):
    require_occ()
    if same_point(to_vec3(p1), to_vec3(p2)):
        return None
    maker = BRepBuilderAPI_MakeEdge(_pnt(p1), _pnt(p2))
    if not maker.IsDone():
        return None
    return maker.Edge()


def make_circle_edge(center: Sequence[float], radius: float,
                     first: float = 0.0, last: float = TWO_PI):
    require_occ()
    if not radius > 0.0:
        raise ValueError(f"circle radius must be positive, got {radius!r}")
    first = float(first)
    last = float(last)
    while last <= first:
        last += TWO_PI
    circle = gp_Circ(gp_Ax2(_pnt(center), gp_Dir(0.0, 0.0, 1.0)), float(radius))
    maker = BRepBuilderAPI_MakeEdge(circle, first, last)
    if not maker.IsDone():
        return None
    return maker.Edge()


def make_wire(edges: Iterable[Any]):
    require_occ()
    maker = BRepBuilderAPI_MakeWire()
    count = 0
    for edge in edges:
        if edge is None:
            continue
        maker.Add(edge)
        count += 1
    if count == 0 or not maker.IsDone():
        return None
    return maker.Wire()


def make_polygon_face(points: Sequence[Sequence[float]]):
    require_occ()
    corners = polygon_corners(points)
    if len(corners) < 3:
        return None
    polygon = BRepBuilderAPI_MakePolygon()
    for corner in corners:
        polygon.Add(gp_Pnt(*corner))
    polygon.Close()
    if not polygon.IsDone():
        return None
    maker = BRepBuilderAPI_MakeFace(polygon.Wire(), True)
    if not maker.IsDone():
        return None
    return maker.Face()


def make_compound(shapes: Iterable[Any]):
    require_occ()
    builder = BRep_Builder()
    compound = TopoDS_Compound()
    builder.MakeCompound(compound)
    for shape in shapes:
        if shape is not None and not shape.IsNull():
            builder.Add(compound, shape)
    return compound


## queries

def is_null(shape) -> bool:
    return shape is None or shape.IsNull()


def shape_kind(shape) -> str:
    require_occ()
    if not hasattr(shape, "ShapeType"):
        raise TypeError(f"not an OCC shape: {shape!r}")
    kinds = {
        TopAbs_COMPOUND: 'compound',
        TopAbs_COMPSOLID: 'compsolid',
        TopAbs_SOLID: 'solid',
        TopAbs_SHELL: 'shell',
        TopAbs_FACE: 'face',
        TopAbs_WIRE: 'wire',
        TopAbs_EDGE: 'edge',
        TopAbs_VERTEX: 'vertex',
    }
    return kinds.get(shape.ShapeType(), 'shape')


def components(shape) -> Tuple[Any, ...]:
    require_occ()
    children = []
    iterator = TopoDS_Iterator(shape)
    while iterator.More():
        children.append(iterator.Value())
        iterator.Next()
    return tuple(children)


def edges(shape) -> Iterator[Any]:
    require_occ()
    explorer = TopExp_Explorer(shape, TopAbs_EDGE)
    while explorer.More():
        yield topods.Edge(explorer.Current())
        explorer.Next()


def faces(shape) -> Iterator[Any]:
    require_occ()
    explorer = TopExp_Explorer(shape, TopAbs_FACE)
    while explorer.More():
        yield topods.Face(explorer.Current())
        explorer.Next()


def _angle_of(center: Vec3, point: Vec3) -> float:
    return math.atan2(point[1] - center[1], point[0] - center[0])


def curve_info(edge):
    """Describe the curve under ``edge``; ``None`` for anything but lines and circles."""
    require_occ()
    adaptor = BRepAdaptor_Curve(topods.Edge(edge))
    first = adaptor.FirstParameter()
    last = adaptor.LastParameter()
    curve_type = adaptor.GetType()
    if curve_type == GeomAbs_Line:
        return LineSegment(_xyz(adaptor.Value(first)), _xyz(adaptor.Value(last)))
    if curve_type != GeomAbs_Circle:
        return None

    circle = adaptor.Circle()
    center = _xyz(circle.Location())
    radius = circle.Radius()
    if last - first >= TWO_PI - ANGLE_TOL:
        return CircularArc(center, radius)
    start = _angle_of(center, _xyz(adaptor.Value(first)))
    end = _angle_of(center, _xyz(adaptor.Value(last)))
    if circle.Axis().Direction().Z() < 0.0:
        # clockwise seen from +z: the same arc runs counter-clockwise from end to start
        start, end = end, start
    while end <= start:
        end += TWO_PI
    return CircularArc(center, radius, start, end)


def wire_points(wire) -> Tuple[List[Vec3], bool]:
    """Vertices of ``wire`` in traversal order and whether it is closed."""
    require_occ()
    explorer = BRepTools_WireExplorer(topods.Wire(wire))
    points: List[Vec3] = []
    last_edge = None
    while explorer.More():
        points.append(_xyz(BRep_Tool.Pnt(explorer.CurrentVertex())))
        last_edge = explorer.Current()
        explorer.Next()
    if last_edge is None:
        return [], False
    end = _xyz(BRep_Tool.Pnt(topexp.LastVertex(last_edge, True)))
    closed = same_point(end, points[0])
    if not closed:
        points.append(end)
    return points, closed


def face_points(face) -> List[Vec3]:
    require_occ()
    outer = breptools.OuterWire(topods.Face(face))
    if outer.IsNull():
        return []
    points, _ = wire_points(outer)
    return points


## XCAF documents

class XcafDocument:
    """Adapter exposing an OCAF/XCAF document to the scene-tree builder.

    The wrapped ``TDocStd_Document`` is kept alive for as long as the adapter
    is, so shapes handed out stay valid.
    """

    def __init__(self, doc):
        require_occ()
        self.doc = doc
        self.shape_tool = XCAFDoc_DocumentTool.ShapeTool(doc.Main())
        self.color_tool = XCAFDoc_DocumentTool.ColorTool(doc.Main())
        self._color_types = {
            ColorChannel.SURFACE: XCAFDoc_ColorSurf,
            ColorChannel.CURVE: XCAFDoc_ColorCurv,
            ColorChannel.GENERIC: XCAFDoc_ColorGen,
        }

    def root(self):
        return self.shape_tool.Label()

    def children(self, label) -> List[Any]:
        found = []
        iterator = TDF_ChildIterator(label, False)
        while iterator.More():
            found.append(iterator.Value())
            iterator.Next()
        return found

    def has_children(self, label) -> bool:
        return label.HasChild()

    def shape(self, label):
        shape = TopoDS_Shape()
        if not XCAFDoc_ShapeTool.GetShape(label, shape) or shape.IsNull():
            return None
        return shape

    def is_free(self, label) -> bool:
        return XCAFDoc_ShapeTool.IsFree(label)

    def is_sub_shape(self, label) -> bool:
        return XCAFDoc_ShapeTool.IsSubShape(label)

    def is_reference(self, label) -> bool:
        return XCAFDoc_ShapeTool.IsReference(label)

    def referred(self, label):
        target = TDF_Label()
        if XCAFDoc_ShapeTool.GetReferredShape(label, target):
            return target
        return None

    def own_name(self, label) -> Optional[str]:
        return label.GetLabelName() or None

    def own_color(self, label, channel: ColorChannel) -> Optional[str]:
        color = Quantity_Color()
        if not self.color_tool.GetColor(label, self._color_types[channel], color):
            return None
        return rgb_to_hex(*color.Values(Quantity_TOC_sRGB))

    def find_label(self, shape):
        if shape is None:
            return None
        label = TDF_Label()
        if self.shape_tool.Search(shape, label):
            return label
        return None

    def is_aggregate(self, shape) -> bool:
        return shape_kind(shape) in AGGREGATE_KINDS

    def components(self, shape):
        return components(shape)


def _new_document():
    return TDocStd_Document("cadexchange-import")


def _read_cad_document(reader, data: bytes, suffix: str, color_mode: bool,
                       name_mode: bool) -> Optional[XcafDocument]:
    reader.SetColorMode(color_mode)
    reader.SetNameMode(name_mode)
    doc = _new_document()
    with staged_file(suffix, data) as path:
        status = reader.ReadFile(path)
        if status != IFSelect_RetDone:
            logger.warning("%s reader failed with status %s", suffix.lstrip("."), status)
            return None
        if not reader.Transfer(doc):
            logger.warning("%s transfer into XCAF document failed", suffix.lstrip("."))
            return None
    return XcafDocument(doc)


def read_step_document(data: bytes, color_mode: bool = True,
                       name_mode: bool = True) -> Optional[XcafDocument]:
    require_occ()
    return _read_cad_document(STEPCAFControl_Reader(), data, ".step", color_mode, name_mode)


def read_iges_document(data: bytes, color_mode: bool = True,
                       name_mode: bool = True) -> Optional[XcafDocument]:
    require_occ()
    return _read_cad_document(IGESCAFControl_Reader(), data, ".iges", color_mode, name_mode)


def read_stl_shape(data: bytes):
    require_occ()
    shape = TopoDS_Shape()
    with staged_file(".stl", data) as path:
        if not StlAPI_Reader().Read(shape, path):
            logger.warning("stl reader failed")
            return None
    if shape.IsNull():
        logger.warning("stl reader produced no shape")
        return None
    return shape


def write_step(shapes: Iterable[Any]) -> bytes:
    require_occ()
    writer = STEPControl_Writer()
    for shape in shapes:
        if not is_null(shape):
            writer.Transfer(shape, STEPControl_AsIs)
    with staged_file(".step") as path:
        status = writer.Write(path)
        if status != IFSelect_RetDone:
            raise RuntimeError(f"STEP writer failed with status {status}")
        return _read_back(path)


def write_iges(shapes: Iterable[Any]) -> bytes:
    require_occ()
    IGESControl_Controller.Init()
    writer = IGESControl_Writer("MM", 0)
    for shape in shapes:
        if not is_null(shape):
            writer.AddShape(shape)
    writer.ComputeModel()
    with staged_file(".iges") as path:
        if not writer.Write(path):
            raise RuntimeError("IGES writer failed")
        return _read_back(path)


def write_brep(shape) -> str:
    require_occ()
    with staged_file(".brep") as path:
        breptools.Write(shape, path)
        return _read_back(path).decode("ascii")


def read_brep(text: str):
    require_occ()
    shape = TopoDS_Shape()
    with staged_file(".brep", text.encode("ascii")) as path:
        if not breptools.Read(shape, path, BRep_Builder()):
            logger.warning("brep reader failed")
            return None
    if shape.IsNull():
        return None
    return shape


__all__ = [
    'XcafDocument',
    'occ_available',
    'require_occ',
    'is_available',
    'require',
    'staged_file',
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
    'read_step_document',
    'read_iges_document',
    'read_stl_shape',
    'write_step',
    'write_iges',
    'write_brep',
    'read_brep',
]
