"""
Command-line interface for apisnip.
"""

import argparse
import sys
import logging

from . import __version__
from .app import AppModel
from .config import load_config
from .core import ApiSnip, DEFAULT_OUTPUT_FILE
from .errors import ApiSnipError
from .tui import run_tui


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the CLI.

    Args:
        verbose: Enable verbose logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(message)s' if not verbose else '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='apisnip',
        description='Trim an OpenAPI description down to the endpoints you pick',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s openapi.yaml                     # Write the selection to {DEFAULT_OUTPUT_FILE}
  %(prog)s openapi.json small.json          # Custom output file (format from extension)
  %(prog)s https://example.com/api.yaml     # Fetch the document over HTTP
        """
    )

    parser.add_argument(
        'input',
        help='Path or URL of the input OpenAPI document (.json, .yaml or .yml)'
    )

    parser.add_argument(
        'output',
        nargs='?',
        default=DEFAULT_OUTPUT_FILE,
        help=f'Output file (default: {DEFAULT_OUTPUT_FILE})'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def main(argv=None):
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = load_config()
    verbose = args.verbose or settings.verbose

    # Set up logging
    setup_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        snipper = ApiSnip(args.input, args.output)
        snipper.load_spec()

        model = AppModel(snipper.endpoints, infile=args.input)
        run_tui(model, verbose=verbose)

        if not model.write_requested:
            return

        selected = model.selected_endpoints()
        path = snipper.write(selected)
        print(f"Wrote {len(selected)} endpoints to {path}")

    except ApiSnipError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
