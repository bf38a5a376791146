"""Command-line interface for Screenshot Agent.

Entry point flow:
1. Parse arguments (bad arguments exit 2, --help exits 0)
2. Answer introspection flags without resolving
3. Resolve, print "source" and "temp path" lines, map errors to exit codes
"""

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from . import __version__
from .config import (
    Config,
    config_defaults,
    config_schema,
    config_to_dict,
    load_config,
    validate_config_file,
)
from .emit import EVENT_CATALOG, EventEmitter
from .errors import NotFoundError, ScreenshotAgentError
from .hooks import HOOK_CONTRACT, notify_resolved
from .resolver import Options, resolve

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2

OPERATION_TYPE = "screenshot.resolve"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI usage."""
    parser = argparse.ArgumentParser(
        prog="screenshot-agent",
        description=(
            "Print two lines: source (clipboard or original file path) and\n"
            "the temp path of a PNG/JPG/JPEG image from Desktop or Downloads.\n"
            "Desktop files are copied to temp and trashed; Downloads are moved.\n"
            "Exits 1 if nothing is found."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                     # Clipboard or latest Desktop screenshot
  %(prog)s --downloads         # Clipboard or latest image in Downloads
  %(prog)s --clipboard-only    # Clipboard only, never touch files
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"screenshot-agent {__version__}",
    )

    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: platform config dir)",
    )

    # Introspection
    parser.add_argument(
        "--print-defaults",
        action="store_true",
        help="Print default configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-config-schema",
        action="store_true",
        help="Print configuration schema as JSON and exit",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration file and exit",
    )
    parser.add_argument(
        "--print-hook-contract",
        action="store_true",
        help="Print hook contract as JSON and exit",
    )
    parser.add_argument(
        "--print-resolved",
        action="store_true",
        help="Print resolved configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-event-catalog",
        action="store_true",
        help="Print event catalog as JSON and exit",
    )

    # Sources
    parser.add_argument(
        "--clipboard-only",
        action="store_true",
        help="Use clipboard only (no file fallback)",
    )
    parser.add_argument(
        "--downloads",
        action="store_true",
        help="Search Downloads instead of Desktop",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging to stderr",
    )

    return parser


def build_options(args: argparse.Namespace) -> Options:
    """Build Options from parsed arguments."""
    return Options(
        use_downloads=args.downloads,
        clipboard_only=args.clipboard_only,
        verbose=args.verbose,
    )


def _emit_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _handle_introspection(args: argparse.Namespace) -> Optional[int]:
    config_path = Path(args.config).expanduser() if args.config else None

    if args.print_defaults:
        _emit_json(config_defaults())
        return EXIT_OK

    if args.print_config_schema:
        _emit_json(config_schema())
        return EXIT_OK

    if args.validate_config:
        errors = validate_config_file(config_path)
        if errors:
            for error in errors:
                print(error, file=sys.stderr)
            return 1
        return EXIT_OK

    if args.print_hook_contract:
        _emit_json(HOOK_CONTRACT)
        return EXIT_OK

    if args.print_resolved:
        config = load_config(config_path=config_path)
        _emit_json(config_to_dict(config))
        return EXIT_OK

    if args.print_event_catalog:
        _emit_json({"catalog": EVENT_CATALOG})
        return EXIT_OK

    return None


def handle_resolve(options: Options, config: Config, events: EventEmitter) -> int:
    """Resolve an image and print the result lines."""
    operation_id = str(uuid.uuid4())
    events.emit("operation.started", {
        "operation_type": OPERATION_TYPE,
        "operation_id": operation_id,
        "clipboard_only": options.clipboard_only,
        "use_downloads": options.use_downloads,
    })

    try:
        result = resolve(options, config)
    except NotFoundError as e:
        log.debug("Nothing found: %s", e)
        events.emit("operation.completed", {
            "operation_type": OPERATION_TYPE,
            "operation_id": operation_id,
            "success": False,
            "error_message": str(e),
        })
        return EXIT_NOT_FOUND
    except (ScreenshotAgentError, OSError) as e:
        events.emit("error.handled", {"error_type": type(e).__name__, "message": str(e)})
        events.emit("operation.completed", {
            "operation_type": OPERATION_TYPE,
            "operation_id": operation_id,
            "success": False,
            "error_message": str(e),
        })
        print(str(e), file=sys.stderr)
        return EXIT_ERROR

    print(result.source)
    print(result.temp_path, flush=True)

    events.emit("artifact.created", {"file_path": result.temp_path, "source": result.source})
    events.emit("operation.completed", {
        "operation_type": OPERATION_TYPE,
        "operation_id": operation_id,
        "success": True,
        "outputs": [result.to_dict()],
    })

    notify_resolved(result, config)
    return EXIT_OK


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 success, 1 nothing found, 2 error
    """
    parser = create_argument_parser()
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit as e:
        # --help/--version exit 0, bad arguments exit 2
        return e.code if isinstance(e.code, int) else EXIT_ERROR

    # Introspection flags short-circuit normal execution
    result = _handle_introspection(parsed_args)
    if result is not None:
        return result

    options = build_options(parsed_args)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config_path = Path(parsed_args.config).expanduser() if parsed_args.config else None
    config = load_config(config_path=config_path)

    events = EventEmitter("screenshot-agent", enabled=config.emit_events)
    events.emit("config.resolved", {
        "config_path": str(config_path or "default"),
        "source": "cli" if config_path else "default",
    })

    return handle_resolve(options, config, events)


if __name__ == "__main__":
    sys.exit(main())
