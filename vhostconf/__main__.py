"""
Entry point for vhostconf.

Usage:
    python -m vhostconf /path/to/webserv.conf
    python -m vhostconf --help
"""

import argparse
import sys

from . import __version__
from .config.errors import ParseError, ValidationError
from .config.loader import ConfigLoader
from .config.schema import Config, ServerBlock
from .const import DEFAULT_CONFIG_PATH
from .logging import LogConfig, get_logger, setup_logging
from .utils.ports import find_busy_listens

logger = get_logger("main")


def format_server(server: ServerBlock, index: int) -> str:
    """Render one server block as an indented, human readable summary."""
    lines = [
        f"=== Server #{index} ===",
        f"listens: {', '.join(str(listen) for listen in server.listens)}",
        f"root: {server.root}",
        f"server_name: {server.server_name}",
        f"client_max_body_size: {server.client_max_body_size}",
        f"index: {' '.join(server.index_files)}",
        "error_pages:",
    ]
    for code, path in sorted(server.error_pages.items()):
        lines.append(f"  {code} -> {path}")

    for location in server.locations:
        redirect = location.redirect
        lines.extend([
            f"  - location: {location.path_prefix}",
            f"    root: {location.root}",
            f"    autoindex: {'on' if location.autoindex else 'off'}",
            f"    methods: {' '.join(sorted(location.methods))}",
            f"    index: {' '.join(location.index_files)}",
            f"    upload_store: {location.upload_store}",
            f"    redirect: {f'{redirect.code} {redirect.target}' if redirect else '(none)'}",
            "    cgi_map:",
        ])
        for extension, interpreter in sorted(location.cgi_map.items()):
            lines.append(f"      {extension} -> {interpreter}")

    return "\n".join(lines)


def print_config(config: Config) -> None:
    print(f"Loaded config with {len(config.servers)} server(s)\n")
    for index, server in enumerate(config.servers):
        print(format_server(server, index))
        print()
    print(f"Collected {len(config.collect_all_listens())} listen entries")


def check_ports(config: Config) -> None:
    for busy in find_busy_listens(config.collect_all_listens()):
        logger.warning(f"Listen {busy}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="vhostconf",
        description="Parse and validate an nginx-style virtual server configuration",
    )

    parser.add_argument(
        "config",
        nargs="?",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--base-dir",
        metavar="DIR",
        help="Directory that relative server roots are resolved against",
    )

    parser.add_argument(
        "--no-validate",
        action="store_true",
        help="Only parse, skip port and path validation",
    )

    parser.add_argument(
        "--check-ports",
        action="store_true",
        help="Warn about listen ports already in use on this host",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args(argv)

    log_config = LogConfig()

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"

    if args.no_color:
        log_config.console_colors = False

    if args.log_file:
        log_config.file_enabled = True
        log_config.file_path = args.log_file

    setup_logging(log_config)

    try:
        config = ConfigLoader().load_file(
            args.config,
            base_dir=args.base_dir,
            validate=not args.no_validate,
        )
    except ParseError as e:
        print(f"[parse-error] {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"[validation-error] {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[error] Cannot open config file: {e}", file=sys.stderr)
        return 1

    print_config(config)

    if args.check_ports:
        check_ports(config)

    return 0


if __name__ == "__main__":
    sys.exit(main())
