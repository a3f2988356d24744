#!/usr/bin/env python3
"""
gitignore-ls entry point

Starts the language server on stdio (default) or TCP. stdout is reserved
for the protocol stream, so all logging goes to stderr or a log file.
"""

import argparse
import sys
from typing import List, Optional

from gitignore_ls import __version__
from gitignore_ls.config import LOG_FORMATS, ServerConfig
from gitignore_ls.utils import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='gitignore-ls',
        description='Language server for .gitignore-style ignore files',
    )
    parser.add_argument('--tcp', action='store_true', help='Serve over TCP instead of stdio')
    parser.add_argument('--host', default='127.0.0.1', help='TCP bind address')
    parser.add_argument('--port', type=int, default=2087, help='TCP port')
    parser.add_argument('--log-level', help='Log level (TRACE, DEBUG, INFO, WARNING, ERROR)')
    parser.add_argument('--log-file', help='Also write logs to this file (rotated)')
    parser.add_argument('--log-format', choices=LOG_FORMATS, help='Log output format')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(args)


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment settings overridden by command line flags"""
    return ServerConfig.from_env().with_overrides(
        log_level=args.log_level,
        log_file=args.log_file,
        log_format=args.log_format,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = build_config(args)
    except ValueError as e:
        print(f"gitignore-ls: {e}", file=sys.stderr)
        return 2

    configure_logging(
        log_level=config.log_level,
        log_file=config.log_file,
        log_format=config.log_format,
    )

    # Imported late so logging is configured before pygls loads
    from gitignore_ls.lsp_server import create_server

    server = create_server(config)
    if args.tcp:
        logger.info(f"Starting gitignore-ls {__version__} on {args.host}:{args.port}")
        server.start_tcp(args.host, args.port)
    else:
        logger.info(f"Starting gitignore-ls {__version__} on stdio")
        server.start_io()
    return 0


if __name__ == "__main__":
    sys.exit(main())
