#!/usr/bin/env python3
"""
Command line front end for cadexchange.

Usage:
    python -m cadexchange inspect FILE [--json]
    python -m cadexchange convert INPUT OUTPUT

The input format is chosen from the file suffix (.step/.stp, .iges/.igs,
.stl, .dxf); ``convert`` writes .dxf, .step/.stp, .iges/.igs or .brep.
STEP, IGES, STL and BRep need pythonocc-core; DXF to DXF also runs with
``--kernel native``.

Examples:
    python -m cadexchange inspect bracket.step
    python -m cadexchange --kernel native inspect plate.dxf --json
    python -m cadexchange --options export.yaml convert bracket.step bracket.dxf
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from cadexchange import converter
from cadexchange.kernel import DEFAULT_KERNEL, KERNEL_REGISTRY
from cadexchange.options import DxfOptions, ImportOptions, load_options

EXIT_OK = 0
EXIT_UNREADABLE = 1
EXIT_USAGE = 2

INPUT_FORMATS = {
    '.step': 'step', '.stp': 'step',
    '.iges': 'iges', '.igs': 'iges',
    '.stl': 'stl',
    '.dxf': 'dxf',
}
OUTPUT_FORMATS = {
    '.dxf': 'dxf',
    '.step': 'step', '.stp': 'step',
    '.iges': 'iges', '.igs': 'iges',
    '.brep': 'brep',
}


class UsageError(Exception):
    pass


def read_input(path: Path, kernel: str, import_options: ImportOptions):
    """Import ``path`` into a scene tree; ``None`` if it cannot be read."""
    fmt = INPUT_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise UsageError(f"unsupported input format: {path.suffix or path.name}")
    data = path.read_bytes()
    if fmt == 'dxf':
        return converter.convert_from_dxf(data, kernel=kernel)
    if kernel != 'occ':
        raise UsageError(f"{fmt.upper()} input requires the occ kernel")
    if fmt == 'step':
        return converter.convert_from_step(data, import_options)
    if fmt == 'iges':
        return converter.convert_from_iges(data, import_options)
    return converter.convert_from_stl(data, import_options)


def format_tree(tree) -> str:
    lines = []
    for depth, node in tree.walk():
        label = node.name or "<unnamed>"
        if node.color:
            label += f" {node.color}"
        if node.shape is not None:
            label += " [shape]"
        lines.append("  " * depth + label)
    return "\n".join(lines)


def _load(args):
    if args.options is None:
        return ImportOptions(), DxfOptions()
    return load_options(args.options)


def cmd_inspect(args) -> int:
    import_options, _ = _load(args)
    source = Path(args.file)
    if not source.exists():
        print(f"Error: File not found: {source}", file=sys.stderr)
        return EXIT_UNREADABLE
    tree = read_input(source, args.kernel, import_options)
    if tree is None:
        print(f"Error: could not read {source}", file=sys.stderr)
        return EXIT_UNREADABLE
    if args.json:
        print(json.dumps(tree.to_dict(), indent=2))
    else:
        print(format_tree(tree))
    return EXIT_OK


def cmd_convert(args) -> int:
    import_options, dxf_options = _load(args)
    source = Path(args.input)
    target = Path(args.output)
    fmt = OUTPUT_FORMATS.get(target.suffix.lower())
    if fmt is None:
        raise UsageError(f"unsupported output format: {target.suffix or target.name}")
    if fmt != 'dxf' and args.kernel != 'occ':
        raise UsageError(f"{fmt.upper()} output requires the occ kernel")
    if not source.exists():
        print(f"Error: File not found: {source}", file=sys.stderr)
        return EXIT_UNREADABLE

    tree = read_input(source, args.kernel, import_options)
    if tree is None:
        print(f"Error: could not read {source}", file=sys.stderr)
        return EXIT_UNREADABLE

    if fmt == 'dxf':
        target.write_text(converter.convert_to_dxf(tree, kernel=args.kernel, options=dxf_options))
    elif fmt == 'step':
        target.write_bytes(converter.convert_to_step(tree))
    elif fmt == 'iges':
        target.write_bytes(converter.convert_to_iges(tree))
    else:
        shapes = list(tree.iter_shapes())
        if len(shapes) != 1:
            raise UsageError(f"BRep output holds one shape, the input has {len(shapes)}")
        target.write_text(converter.convert_to_brep(shapes[0]))
    print(f"Exported to: {target}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m cadexchange",
        description="Inspect and convert CAD exchange files.",
    )
    parser.add_argument('--kernel', choices=sorted(KERNEL_REGISTRY), default=DEFAULT_KERNEL,
                        help='Geometry kernel (default: %(default)s)')
    parser.add_argument('--options', metavar='FILE.yaml',
                        help='YAML file with import: and dxf: option mappings')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Log progress (-vv for debug detail)')
    subparsers = parser.add_subparsers(dest='action', required=True)

    inspect_parser = subparsers.add_parser('inspect', help='Print the scene tree of a file')
    inspect_parser.add_argument('file', help='Input file')
    inspect_parser.add_argument('--json', action='store_true',
                                help='Print the tree as JSON')

    convert_parser = subparsers.add_parser('convert', help='Convert between formats')
    convert_parser.add_argument('input', help='Input file')
    convert_parser.add_argument('output', help='Output file; format from its suffix')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.action == 'inspect':
            return cmd_inspect(args)
        return cmd_convert(args)
    except (UsageError, ValueError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except RuntimeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_UNREADABLE


if __name__ == '__main__':
    sys.exit(main())
