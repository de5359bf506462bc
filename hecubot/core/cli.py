"""
Handles command-line interface parsing and actions.
"""
import argparse
import sys
from typing import List, Optional

from .. import __version__
from ..config import load_config, validate_required_env
from ..exceptions import ConfigurationError
from ..utils.logging import get_logger

_SECRET_MARKERS = ("TOKEN", "SECRET", "KEY")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="HECU Discord Bot")
    parser.add_argument('--debug', action='store_true', help='Enable debug logging.')
    parser.add_argument('--config-check', action='store_true', help='Validate configuration and exit.')
    parser.add_argument('--version', action='store_true', help='Show version info and exit.')
    return parser.parse_args(argv)


def show_version_info() -> None:
    """Display version and system information."""
    print(f"HECU Bot - Version {__version__}")
    print(f"Python Version: {sys.version}")


def validate_configuration_only() -> None:
    """Validate configuration and exit with status 1 on failure."""
    logger = get_logger(__name__)
    try:
        logger.info("--- Running Configuration-Only Validation ---", extra={'subsys': 'core', 'event': 'config_check_start'})
        validate_required_env()
        config = load_config()
        logger.info("Configuration validation successful. The following settings are active:", extra={'subsys': 'core', 'event': 'config_valid_start'})

        for key, value in config.items():
            if any(marker in key for marker in _SECRET_MARKERS) and value:
                value = '********'
            logger.info(f"  • {key}: {value}", extra={'subsys': 'core', 'event': 'config_valid'})

    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}", extra={'subsys': 'core', 'event': 'config_fail'})
        sys.exit(1)
