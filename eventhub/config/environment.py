"""Environment configuration module.

Importing this module loads the .env file, so it must come before any
module that reads environment variables at import time. The server, the
client library and the tests all go through it.

Usage:
    from eventhub.config.environment import ENVIRONMENT, IS_PRODUCTION_ENVIRONMENT

Note:
    In production, variables should be set in the platform's environment
    configuration rather than in a .env file.
"""

import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

ENVIRONMENTS = ('development', 'production')

env_setting = os.environ.get('ENVIRONMENT', '').lower()
if env_setting not in ENVIRONMENTS:
    logger.warning(
        f"Environment setting '{env_setting}' is invalid or not specified. "
        "Expected 'development' or 'production'. Defaulting to development environment."
    )
    env_setting = 'development'

ENVIRONMENT = env_setting
IS_PRODUCTION_ENVIRONMENT = ENVIRONMENT == 'production'


def env_int(name: str, default: int) -> int:
    """Read an integer variable, falling back to ``default`` when unset or malformed."""
    raw = os.environ.get(name, '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}; using {default}")
        return default


__all__ = ['ENVIRONMENT', 'IS_PRODUCTION_ENVIRONMENT', 'env_int']
