"""Entry point

``python -m relay_engine`` runs the service:
1. load settings
2. configure logging
3. bind the database
4. start the polling loops and block until a shutdown signal
"""

import logging
import sys

from .config import load_settings
from .service import run


def main():
    try:
        settings = load_settings()
        logging.basicConfig(
            level=settings.LOGGING.level,
            format=settings.LOGGING.format,
        )
        run(settings)
    except Exception as e:
        logging.error(f"Failed to start relay engine: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
