"""
Credentials and HTTP settings from the environment (and a `.env` file, if any).
"""

import logging
import os

from typing import Dict, Optional

from dotenv import load_dotenv

from .oauth import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def load_auth_params(env_file: Optional[str] = None) -> Dict[str, str]:
    """
    Read the Twitter app credentials.

    CONSUMER_KEY and CONSUMER_SECRET are required;
    ACCESS_TOKEN and ACCESS_TOKEN_SECRET default to "" (not yet authorized).

    Args:
        env_file: Path of a dotenv file; by default `.env` is searched for.

    Returns:
        A dict with 'consumer_key', 'consumer_secret', 'access_token', 'access_token_secret'.

    Raises:
        KeyError: If a consumer credential is not set.
    """

    load_dotenv(dotenv_path=env_file)

    auth_params = {
        'consumer_key': os.environ["CONSUMER_KEY"],
        'consumer_secret': os.environ["CONSUMER_SECRET"],
        'access_token': os.environ.get("ACCESS_TOKEN", ""),
        'access_token_secret': os.environ.get("ACCESS_TOKEN_SECRET", ""),
    }

    logger.debug("Loaded credentials (access token: %s).", "yes" if auth_params['access_token'] else "no")

    return auth_params


def load_http_settings(env_file: Optional[str] = None) -> Dict[str, object]:
    """
    Optional overrides: OAUTH_BIRD_USER_AGENT and OAUTH_BIRD_TIMEOUT (seconds).
    """

    load_dotenv(dotenv_path=env_file)

    settings = {}

    if os.environ.get("OAUTH_BIRD_USER_AGENT"):
        settings['user_agent'] = os.environ["OAUTH_BIRD_USER_AGENT"]

    timeout = os.environ.get("OAUTH_BIRD_TIMEOUT")

    if timeout:
        try:
            settings['timeout'] = float(timeout)
        except ValueError:
            raise ValueError(f"OAUTH_BIRD_TIMEOUT should be a number of seconds, got {timeout!r}.")
    else:
        settings['timeout'] = DEFAULT_TIMEOUT

    return settings
