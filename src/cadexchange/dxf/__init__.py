"""Reader, geometry reconstructor and writer for ASCII DXF."""

from .entities import (
    DEFAULT_LAYER,
    DxfEntity,
    DxfFieldError,
    decode_dxf,
    iter_group_pairs,
    parse_entities,
    read_entities,
)
from .reconstruct import build_shape, reconstruct
from .writer import write_dxf

__all__ = [
    'DEFAULT_LAYER',
    'DxfEntity',
    'DxfFieldError',
    'build_shape',
    'decode_dxf',
    'iter_group_pairs',
    'parse_entities',
    'read_entities',
    'reconstruct',
    'write_dxf',
]
