"""Entry point for running gitpush as a module."""

import logging

from gitpush.cli import app


def main() -> None:
    """Main entry point."""
    try:
        app()
    finally:
        logging.shutdown()


if __name__ == "__main__":
    main()
