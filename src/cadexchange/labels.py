"""Label classification and attribute resolution for assembly documents.

All functions are pure predicates/lookups over a document implementing the
interface described in :mod:`cadexchange.document`.
"""

from __future__ import annotations

import logging
from typing import Optional

from cadexchange.document import COLOR_PRIORITY

logger = logging.getLogger(__name__)


def is_free_shape(document, label) -> bool:
    """True when ``label`` owns a shape that is not placed by a reference."""
    return document.shape(label) is not None and document.is_free(label)


def is_mesh_node(document, label) -> bool:
    """Decide whether ``label`` is read as one geometry leaf.

    A label is a mesh node when it has no children, when any child is a
    sub-shape description, or when no child is a free shape.  Only
    structural children holding free shapes make it an assembly.
    """
    children = list(document.children(label))
    if not children:
        return True
    if any(document.is_sub_shape(child) for child in children):
        return True
    return not any(is_free_shape(document, child) for child in children)


def label_name(document, label) -> str:
    """Name stored on ``label``, following references; ``""`` if none."""
    seen = []
    while label is not None:
        if any(label == other for other in seen):
            logger.debug("reference cycle while resolving name of %r", label)
            return ""
        seen.append(label)
        name = document.own_name(label)
        if name:
            return name
        if not document.is_reference(label):
            return ""
        label = document.referred(label)
    return ""


def label_color(document, label) -> Optional[str]:
    """First colour found on ``label`` (surface, curve, generic), following references."""
    seen = []
    while label is not None:
        if any(label == other for other in seen):
            logger.debug("reference cycle while resolving color of %r", label)
            return None
        seen.append(label)
        for channel in COLOR_PRIORITY:
            color = document.own_color(label, channel)
            if color:
                return color
        if not document.is_reference(label):
            return None
        label = document.referred(label)
    return None


def shape_name(document, shape) -> str:
    label = document.find_label(shape)
    if label is None:
        return ""
    return label_name(document, label)


def shape_color(document, shape) -> Optional[str]:
    label = document.find_label(shape)
    if label is None:
        return None
    return label_color(document, label)


__all__ = [
    'is_free_shape',
    'is_mesh_node',
    'label_name',
    'label_color',
    'shape_name',
    'shape_color',
]
