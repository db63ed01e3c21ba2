"""Geometry kernels reachable by the converters.

A kernel is a module exposing the construction and query functions the
scene-tree builder and the DXF codec need (``make_segment``,
``make_circle_edge``, ``make_wire``, ``make_polygon_face``,
``make_compound``, ``shape_kind``, ``components``, ``edges``,
``curve_info``, ``wire_points``, ``face_points``, ``is_null``).
"""

from . import native as native
from . import occ as occ

DEFAULT_KERNEL = 'occ'

KERNEL_REGISTRY = {'native': native, 'occ': occ}


def get_kernel(name: str):
    return KERNEL_REGISTRY.get(name)


def resolve_kernel(kernel=None):
    """Return a usable kernel module for ``kernel`` (a name or a module).

    ``None`` selects :data:`DEFAULT_KERNEL`.  Unknown names raise
    ``ValueError``; a known kernel whose backend is missing raises
    ``RuntimeError``.
    """
    if kernel is None:
        kernel = DEFAULT_KERNEL
    if isinstance(kernel, str):
        module = get_kernel(kernel)
        if module is None:
            raise ValueError(
                f"unknown kernel '{kernel}' (expected one of {sorted(KERNEL_REGISTRY)})"
            )
        kernel = module
    if not kernel.is_available():
        kernel.require()
    return kernel


__all__ = ['native', 'occ', 'DEFAULT_KERNEL', 'KERNEL_REGISTRY', 'get_kernel', 'resolve_kernel']
