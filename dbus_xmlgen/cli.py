"""Command line entry point for dbus-xmlgen"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .config import CallMode, GeneratorConfig
from .errors import GenerationError
from .logging import configure_logging
from .pipeline import generate_bindings


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbus-xmlgen",
        description="Generate Python D-Bus proxies from introspection XML",
    )
    parser.add_argument("xml_file", help="Introspection XML file, or '-' for stdin")
    parser.add_argument("--output", "-o", default="-",
                        help="Output file (defaults to stdout)")
    parser.add_argument("--interface", "-i", action="append", default=[], dest="interfaces",
                        metavar="NAME",
                        help="Only generate this interface (may be repeated)")
    parser.add_argument("--async", action="store_true", dest="use_async",
                        help="Generate async methods instead of blocking ones")
    parser.add_argument("--skip-standard", action="store_true",
                        help="Skip org.freedesktop.DBus.* standard interfaces")
    parser.add_argument("--destination", default=None,
                        help="Default bus name for the generated proxies")
    parser.add_argument("--path", default=None,
                        help="Default object path for the generated proxies")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Increase log verbosity")
    return parser


def _read_input(xml_file: str) -> tuple[str, str]:
    if xml_file == "-":
        return sys.stdin.read(), "standard input"
    path = Path(xml_file)
    return path.read_text(encoding="utf-8"), path.name


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for dbus-xmlgen."""
    start_time = time.perf_counter()
    parser = _build_parser()
    args = parser.parse_args(argv)
    logger = configure_logging(verbose=args.verbose)

    try:
        xml, source = _read_input(args.xml_file)
    except OSError as exc:
        parser.exit(1, f"error: cannot read {args.xml_file}: {exc}\n")

    try:
        config = GeneratorConfig(
            interfaces=args.interfaces,
            call_mode=CallMode.ASYNC if args.use_async else CallMode.BLOCKING,
            skip_standard_interfaces=args.skip_standard,
            destination=args.destination,
            path=args.path,
            source=source,
        )
        code = generate_bindings(xml, config)
    except GenerationError as exc:
        parser.exit(1, f"error: {exc.kind}: {exc}\n")

    if args.output == "-":
        sys.stdout.write(code)
    else:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(code, encoding="utf-8")
        logger.info("Generated: %s", output)

    elapsed = time.perf_counter() - start_time
    logger.debug("Generation completed in %.2f ms", elapsed * 1000)


if __name__ == "__main__":
    main()
