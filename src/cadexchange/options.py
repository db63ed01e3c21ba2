"""Import and DXF-export options, optionally loaded from a YAML file."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

STL_NODE_NAME = "STL Shape"


@dataclass(frozen=True)
class ImportOptions:
    """Switches for the STEP/IGES/STL readers."""

    color_mode: bool = True
    name_mode: bool = True
    stl_node_name: str = STL_NODE_NAME


@dataclass(frozen=True)
class DxfOptions:
    """Header values and number formatting used by the DXF writer.

    ``insunits`` is the ``$INSUNITS`` drawing unit code (4 = millimetres).
    ``precision`` gives a fixed number of decimals; ``None`` writes the
    shortest text that reads back as the same float.
    """

    acad_version: str = "AC1015"
    insunits: int = 4
    layer: str = "0"
    precision: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.layer:
            raise ValueError("DXF layer name must not be empty")
        if self.precision is not None and self.precision < 0:
            raise ValueError(f"precision must be >= 0, got {self.precision}")

    def format_number(self, value: float) -> str:
        value = float(value)
        if self.precision is None:
            return repr(value)
        return f"{value:.{self.precision}f}"


def _build(cls, raw: Any, section: str):
    if raw is None:
        return cls()
    if not isinstance(raw, Mapping):
        raise ValueError(f"'{section}' options must be a mapping, got {type(raw)!r}")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"unknown '{section}' option(s): {', '.join(map(str, unknown))}")
    return cls(**dict(raw))


def options_from_dict(data: Mapping[str, Any]) -> Tuple[ImportOptions, DxfOptions]:
    unknown = sorted(set(data) - {"import", "dxf"})
    if unknown:
        raise ValueError(f"unknown option section(s): {', '.join(map(str, unknown))}")
    return _build(ImportOptions, data.get("import"), "import"), _build(DxfOptions, data.get("dxf"), "dxf")


def load_options(path: Path | str) -> Tuple[ImportOptions, DxfOptions]:
    """Load ``import:`` and ``dxf:`` options from a YAML file."""

    options_path = Path(path)
    if not options_path.exists():
        raise FileNotFoundError(f"options file not found: {options_path}")
    import yaml

    with options_path.open("r", encoding="utf-8") as fp:
        data: Dict[str, Any] = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError(f"options file must be a mapping, got {type(data)!r}")
    return options_from_dict(data)


__all__ = [
    "DxfOptions",
    "ImportOptions",
    "STL_NODE_NAME",
    "load_options",
    "options_from_dict",
]
