"""Flatten an assembly document into a :class:`~cadexchange.scene.ShapeNode` tree."""

from __future__ import annotations

import logging
from typing import List, Optional

from cadexchange.labels import (
    is_free_shape,
    is_mesh_node,
    label_color,
    label_name,
    shape_color,
    shape_name,
)
from cadexchange.scene import ShapeNode

logger = logging.getLogger(__name__)


def _label_node(document, label) -> ShapeNode:
    return ShapeNode(name=label_name(document, label), color=label_color(document, label))


def parse_shape(document, shape) -> ShapeNode:
    """Node for ``shape``; compounds become groups of their components."""
    if document.is_aggregate(shape):
        group = ShapeNode(name=shape_name(document, shape))
        for component in document.components(shape):
            group.children.append(parse_shape(document, component))
        return group
    return ShapeNode(
        name=shape_name(document, shape),
        shape=shape,
        color=shape_color(document, shape),
    )


def _free_children(document, label, path: List) -> List[ShapeNode]:
    nodes = []
    for child in document.children(label):
        if is_free_shape(document, child):
            nodes.append(parse_label(document, child, _path=path))
    return nodes


def parse_label(document, label, _path: Optional[List] = None) -> ShapeNode:
    """Node for ``label``: a geometry leaf for mesh nodes, else an assembly."""
    path = [] if _path is None else _path
    if any(label == other for other in path):
        raise ValueError(f"label cycle detected at {label!r}")

    if is_mesh_node(document, label):
        shape = document.shape(label)
        if shape is None:
            return _label_node(document, label)
        node = parse_shape(document, shape)
        if not document.is_aggregate(shape):
            # an instance may carry its own attributes over the part's
            node.name = label_name(document, label) or node.name
            node.color = label_color(document, label) or node.color
        return node

    node = _label_node(document, label)
    path.append(label)
    try:
        node.children.extend(_free_children(document, label, path))
    finally:
        path.pop()
    return node


def build_scene_tree(document) -> ShapeNode:
    """Scene tree for a whole document, starting from its root label."""
    root = document.root()
    node = _label_node(document, root)
    node.children.extend(_free_children(document, root, [root]))
    logger.debug("scene tree built with %d top-level nodes", len(node.children))
    return node


__all__ = ['build_scene_tree', 'parse_label', 'parse_shape']
