import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .codegen import JavaWriter, WriterConfig
from .types import mk_declaration
from .validation import validate_declaration

logger = logging.getLogger(__name__)


def _load_spec(source: str) -> dict[str, Any]:
    if source == "-":
        text = sys.stdin.read()
    else:
        text = Path(source).read_text(encoding="utf-8")
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Declaration spec must be a JSON object")
    return data


def render_spec(spec: dict[str, Any], *, skip_package_declaration: bool = False) -> str:
    """Build the declaration described by ``spec`` and render it, honouring ``spec["imports"]``."""
    node = mk_declaration(spec)
    writer = JavaWriter(WriterConfig(
        package_name=node.package_name,
        skip_package_declaration=skip_package_declaration or not node.package_name,
    ))
    for name in spec.get("imports", []):
        writer.add_import(name)
    writer.write_node(node)
    return writer.render()


def cmd_render(args: argparse.Namespace) -> int:
    spec = _load_spec(args.file)
    print(render_spec(spec, skip_package_declaration=args.skip_package), end="")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    spec = _load_spec(args.file)
    res = validate_declaration(mk_declaration(spec))
    for err in res.errors:
        print(err, file=sys.stderr)
    if res.ok:
        print("OK")
        return 0
    return 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser("mkjava", description="Render Java source from JSON declaration specs")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(required=True)

    s = sub.add_parser("render", help="Render a class, interface or enum spec to Java")
    s.add_argument("file", help="JSON spec path, or '-' for stdin")
    s.add_argument("--skip-package", action="store_true", help="Omit the package declaration")
    s.set_defaults(func=cmd_render)

    s = sub.add_parser("check", help="Run structural checks over a declaration spec")
    s.add_argument("file", help="JSON spec path, or '-' for stdin")
    s.set_defaults(func=cmd_check)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except (OSError, json.JSONDecodeError, ValueError, KeyError, TypeError) as e:
        logger.debug("Command failed", exc_info=True)
        parser.error(str(e))


if __name__ == "__main__":
    raise SystemExit(main())
