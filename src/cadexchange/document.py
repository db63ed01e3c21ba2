"""Assembly documents walked by the scene-tree builder.

The builder talks to a document through a small set of methods:

``root()``
    label whose children are the document's top-level shapes
``children(label)`` / ``has_children(label)``
    child labels in document order
``shape(label)``
    shape held by the label (a reference yields the shape it places)
``is_free(label)``
    label holds a shape that no reference label points at
``is_sub_shape(label)``
    label describes a sub-shape of its parent's shape
``is_reference(label)`` / ``referred(label)``
    reference labels point at another label instead of owning geometry
``own_name(label)`` / ``own_color(label, channel)``
    attributes stored directly on the label, ``None`` when absent
``find_label(shape)``
    label registered for ``shape``, ``None`` when the shape is unknown
``is_aggregate(shape)`` / ``components(shape)``
    compound handling, delegated to the geometry kernel

:class:`cadexchange.kernel.occ.XcafDocument` implements these over an
OCAF/XCAF document.  :class:`ArenaDocument` implements them over an
in-memory arena, which is convenient for assembling scenes by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class ColorChannel(Enum):
    """Colour attributes, in the order they are consulted."""
    SURFACE = "surface"
    CURVE = "curve"
    GENERIC = "generic"


COLOR_PRIORITY = (ColorChannel.SURFACE, ColorChannel.CURVE, ColorChannel.GENERIC)

AGGREGATE_KINDS = ('compound', 'compsolid')


def rgb_to_hex(red: float, green: float, blue: float) -> str:
    """Encode 0..1 channel values as ``#RRGGBB``."""
    channels = []
    for value in (red, green, blue):
        level = int(round(float(value) * 255.0))
        channels.append(max(0, min(255, level)))
    return "#{:02X}{:02X}{:02X}".format(*channels)


@dataclass
class _Label:
    parent: Optional[int]
    shape: Any = None
    name: Optional[str] = None
    colors: Dict[ColorChannel, str] = field(default_factory=dict)
    target: Optional[int] = None
    sub_shape: bool = False
    children: List[int] = field(default_factory=list)


class ArenaDocument:
    """Label graph stored as integer ids into one list.

    References are a points-to relation between ids; the referenced
    geometry is never copied.
    """

    ROOT = 0

    def __init__(self, kernel):
        self.kernel = kernel
        self._labels: List[_Label] = [_Label(parent=None)]
        self._referenced: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._labels)

    ## building

    def _get(self, label: int) -> _Label:
        if not isinstance(label, int) or not 0 <= label < len(self._labels):
            raise KeyError(f"no such label: {label!r}")
        return self._labels[label]

    def _append(self, parent: int, record: _Label) -> int:
        owner = self._get(parent)
        self._labels.append(record)
        label = len(self._labels) - 1
        owner.children.append(label)
        return label

    def add_shape(self, shape, *, parent: int = ROOT, name: Optional[str] = None,
                  color: Optional[str] = None,
                  channel: ColorChannel = ColorChannel.SURFACE) -> int:
        """Add a label owning ``shape`` (``None`` for a pure assembly label)."""
        record = _Label(parent=parent, shape=shape, name=name)
        if color is not None:
            record.colors[channel] = color
        return self._append(parent, record)

    def add_reference(self, target: int, *, parent: int, name: Optional[str] = None,
                      shape=None, color: Optional[str] = None,
                      channel: ColorChannel = ColorChannel.SURFACE) -> int:
        """Add a label placing the shape of ``target`` under ``parent``.

        ``shape`` may give the placed (located) shape; by default the
        target's own shape is shared.
        """
        self._get(target)
        record = _Label(parent=parent, shape=shape, name=name, target=target)
        if color is not None:
            record.colors[channel] = color
        label = self._append(parent, record)
        self._referenced[target] = self._referenced.get(target, 0) + 1
        return label

    def add_sub_shape(self, shape, *, parent: int, name: Optional[str] = None,
                      color: Optional[str] = None,
                      channel: ColorChannel = ColorChannel.SURFACE) -> int:
        record = _Label(parent=parent, shape=shape, name=name, sub_shape=True)
        if color is not None:
            record.colors[channel] = color
        return self._append(parent, record)

    def set_name(self, label: int, name: Optional[str]) -> None:
        self._get(label).name = name

    def set_color(self, label: int, color: Optional[str],
                  channel: ColorChannel = ColorChannel.SURFACE) -> None:
        colors = self._get(label).colors
        if color is None:
            colors.pop(channel, None)
        else:
            colors[channel] = color

    def retarget(self, label: int, target: int) -> None:
        """Point an existing reference label at another target."""
        record = self._get(label)
        self._get(target)
        if record.target is not None:
            self._referenced[record.target] -= 1
        record.target = target
        self._referenced[target] = self._referenced.get(target, 0) + 1

    ## document interface

    def root(self) -> int:
        return self.ROOT

    def children(self, label: int) -> Iterable[int]:
        return tuple(self._get(label).children)

    def has_children(self, label: int) -> bool:
        return bool(self._get(label).children)

    def shape(self, label: int):
        record = self._get(label)
        if record.shape is None and record.target is not None:
            return self._get(record.target).shape
        return record.shape

    def is_free(self, label: int) -> bool:
        if self.shape(label) is None:
            return False
        return self._referenced.get(label, 0) == 0

    def is_sub_shape(self, label: int) -> bool:
        return self._get(label).sub_shape

    def is_reference(self, label: int) -> bool:
        return self._get(label).target is not None

    def referred(self, label: int) -> Optional[int]:
        return self._get(label).target

    def own_name(self, label: int) -> Optional[str]:
        return self._get(label).name

    def own_color(self, label: int, channel: ColorChannel) -> Optional[str]:
        return self._get(label).colors.get(channel)

    def find_label(self, shape) -> Optional[int]:
        if shape is None:
            return None
        for index, record in enumerate(self._labels):
            if record.shape is shape:
                return index
        return None

    def is_aggregate(self, shape) -> bool:
        return self.kernel.shape_kind(shape) in AGGREGATE_KINDS

    def components(self, shape) -> Iterable[Any]:
        return self.kernel.components(shape)


__all__ = [
    'ColorChannel',
    'COLOR_PRIORITY',
    'AGGREGATE_KINDS',
    'ArenaDocument',
    'rgb_to_hex',
]
