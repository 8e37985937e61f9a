# =============================================================================
# gemlark Main Application
# =============================================================================
# Command-line entry point. Parses arguments, loads configuration, sets up
# logging and hands over to the Navigator with the terminal in its care.
#
# The app manages:
#   - Configuration loading (and writing the defaults on first run)
#   - Logging to the XDG state directory (the screen belongs to the pager)
#   - Terminal setup and restoration on every exit path
# =============================================================================

import argparse
import logging
import sys
from pathlib import Path

from gemlark import __app_name__, __version__
from gemlark.config import Config, ConfigError, ensure_directories, print_paths
from gemlark.core.session import Session
from gemlark.navigator import Navigator
from gemlark.storage import BookmarkStore, CertificateRegistry
from gemlark.ui.terminal import Terminal

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Entry Point
# =============================================================================

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="gemlark: a terminal client for the Gemini protocol",
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="URL to open (default: the configured homepage)",
    )

    parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Render a local gemtext file instead of fetching a URL",
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--paths",
        action="store_true",
        help="Print configuration paths and exit",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (default: XDG config location)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (verbose logging)",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Send log records to the log file; the terminal is in use by the pager."""
    log_path = Config.log_path()
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=log_path,
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_config(path: Path | None) -> Config:
    """
    Load the configuration, writing the defaults first if there is none.

    Raises:
        ConfigError: If the file exists but can't be parsed.
    """
    config_path = path or Config.config_file_path()
    if not config_path.exists():
        written = Config().save(config_path)
        logger.info(f"Wrote default configuration to {written}")
    return Config.load(config_path)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for gemlark.

    This function:
        1. Parses command-line arguments
        2. Handles special commands (--paths, --version)
        3. Loads configuration
        4. Runs the navigator until the user quits

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = parse_args(argv)

    # Handle --paths flag
    if args.paths:
        print_paths()
        return 0

    ensure_directories()
    setup_logging(args.debug)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1

    document = None
    if args.file:
        try:
            document = args.file.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            print(f"Cannot read {args.file}: {e}", file=sys.stderr)
            return 1

    session = Session(
        config=config,
        bookmarks=BookmarkStore(Config.bookmarks_path()),
        certificates=CertificateRegistry(Config.certificates_dir()),
    )

    with Terminal() as terminal:
        navigator = Navigator(session, terminal)
        if document is not None:
            navigator.open_document(document, title=args.file.name)
        else:
            navigator.start(args.url or config.homepage)

        try:
            return navigator.run()
        except KeyboardInterrupt:
            logger.info("Interrupted")
            return 130


if __name__ == "__main__":
    sys.exit(main())
