# -*- coding: utf-8 -*-
try:  # Python >= 3.8
    from importlib.metadata import PackageNotFoundError, version
except ModuleNotFoundError:  # pragma: no cover - for Python < 3.8
    from importlib_metadata import PackageNotFoundError, version


try:
    __version__ = version("cadexchange")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"

from cadexchange.scene import ShapeNode
from cadexchange.converter import (
    convert_from_brep,
    convert_from_dxf,
    convert_from_iges,
    convert_from_step,
    convert_from_stl,
    convert_to_brep,
    convert_to_dxf,
    convert_to_iges,
    convert_to_step,
)

__all__ = [
    "ShapeNode",
    "convert_from_brep",
    "convert_from_dxf",
    "convert_from_iges",
    "convert_from_step",
    "convert_from_stl",
    "convert_to_brep",
    "convert_to_dxf",
    "convert_to_iges",
    "convert_to_step",
    "__version__",
]
