"""Conversion entry points between exchange formats and scene trees.

Every ``convert_from_*`` function returns ``None`` when the source cannot be
read at all; partial DXF content is imported entity by entity.  STEP, IGES,
STL and BRep need the OCC kernel; DXF works with any kernel.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from cadexchange.dxf import decode_dxf, parse_entities, reconstruct, write_dxf
from cadexchange.kernel import occ, resolve_kernel
from cadexchange.options import DxfOptions, ImportOptions
from cadexchange.scene import ShapeNode
from cadexchange.scene_tree import build_scene_tree

logger = logging.getLogger(__name__)

DXF_NODE_NAME = "DXF Import ({count} entities)"
WIREFRAME_KINDS = ('edge', 'wire')
MESH_KINDS = ('face', 'solid')

Shapes = Union[ShapeNode, Iterable]


def _shape_list(shapes: Shapes) -> List:
    if isinstance(shapes, ShapeNode):
        return list(shapes.iter_shapes())
    return [shape for shape in shapes if shape is not None]


def _import_document(reader, data: bytes, options: Optional[ImportOptions],
                     label: str) -> Optional[ShapeNode]:
    occ.require_occ()
    options = options or ImportOptions()
    try:
        document = reader(data, color_mode=options.color_mode, name_mode=options.name_mode)
    except RuntimeError as exc:
        logger.warning("%s import failed: %s", label, exc)
        return None
    if document is None:
        return None
    tree = build_scene_tree(document)
    logger.info("%s import produced %d top-level nodes", label, len(tree.children))
    return tree


def convert_from_step(data: bytes, options: Optional[ImportOptions] = None) -> Optional[ShapeNode]:
    return _import_document(occ.read_step_document, data, options, "STEP")


def convert_from_iges(data: bytes, options: Optional[ImportOptions] = None) -> Optional[ShapeNode]:
    return _import_document(occ.read_iges_document, data, options, "IGES")


def convert_from_stl(data: bytes, options: Optional[ImportOptions] = None) -> Optional[ShapeNode]:
    """Single leaf node holding the STL mesh as one shape."""
    occ.require_occ()
    options = options or ImportOptions()
    try:
        shape = occ.read_stl_shape(data)
    except RuntimeError as exc:
        logger.warning("STL import failed: %s", exc)
        return None
    if shape is None:
        return None
    return ShapeNode(name=options.stl_node_name, shape=shape)


def convert_from_dxf(data: bytes, kernel=None) -> Optional[ShapeNode]:
    """One node holding a compound of every DXF entity that could be built.

    Only a buffer that is not readable as DXF text yields ``None``; bad or
    unsupported entities are left out of the compound.
    """
    kernel = resolve_kernel(kernel)
    text = decode_dxf(data)
    if text is None:
        return None
    entities = parse_entities(text)
    compound, built = reconstruct(entities, kernel)
    logger.info("DXF import: %d entities read, %d shapes built", len(entities), built)
    return ShapeNode(name=DXF_NODE_NAME.format(count=len(entities)), shape=compound)


def convert_to_step(shapes: Shapes) -> bytes:
    return occ.write_step(_shape_list(shapes))


def convert_to_iges(shapes: Shapes) -> bytes:
    return occ.write_iges(_shape_list(shapes))


def convert_to_dxf(shapes: Shapes, kernel=None, options: Optional[DxfOptions] = None,
                   wireframe: bool = False, mesh: bool = False) -> str:
    """DXF text for ``shapes``.

    ``wireframe`` keeps only edges and wires.  ``mesh`` keeps only faces
    and solids, and splits each solid into its faces so every face is
    written as a 3DFACE.
    """
    if wireframe and mesh:
        raise ValueError("wireframe and mesh export are exclusive")
    kernel = resolve_kernel(kernel)
    shape_list = _shape_list(shapes)
    if wireframe:
        shape_list = [s for s in shape_list if kernel.shape_kind(s) in WIREFRAME_KINDS]
    elif mesh:
        shape_list = [face for s in shape_list if kernel.shape_kind(s) in MESH_KINDS
                      for face in kernel.faces(s)]
    return write_dxf(shape_list, kernel, options)


def convert_to_brep(shape) -> str:
    return occ.write_brep(shape)


def convert_from_brep(text: str):
    occ.require_occ()
    try:
        return occ.read_brep(text)
    except (RuntimeError, UnicodeEncodeError) as exc:
        logger.warning("BRep import failed: %s", exc)
        return None


__all__ = [
    'DXF_NODE_NAME',
    'convert_from_brep',
    'convert_from_dxf',
    'convert_from_iges',
    'convert_from_step',
    'convert_from_stl',
    'convert_to_brep',
    'convert_to_dxf',
    'convert_to_iges',
    'convert_to_step',
]
