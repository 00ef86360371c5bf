# restuser/app/main.py
"""Smoke entry point: validate settings from the environment and show pool stats.

Usage::

    RESTUSER_BASEURL=http://rest-users-api:8081/ python -m restuser.app.main [username]

Every configuration option can be supplied as ``RESTUSER_<OPTION>`` with the
option name upper-cased (``RESTUSER_MAXHTTPCONNECTIONS`` and so on).
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Dict, List, Mapping, Optional

from ..domain.errors import BackendAuthenticationError, ConfigurationError
from ..domain.settings import CONFIG_PROPERTIES
from ..utils.logging import configure_logging
from .factory import ProviderFactory

ENV_PREFIX = "RESTUSER_"


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect configuration options present in the environment."""
    env = os.environ if environ is None else environ
    config: Dict[str, str] = {}
    for prop in CONFIG_PROPERTIES:
        value = env.get(ENV_PREFIX + prop.name.upper())
        if value:
            config[prop.name] = value
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    level = configure_logging()
    log = logging.getLogger(__name__)
    log.debug("Logging at %s", logging.getLevelName(level))

    factory = ProviderFactory()
    config = config_from_env()
    try:
        factory.validate_configuration(config)
        provider = factory.create(config)
    except ConfigurationError as exc:
        log.error("Invalid configuration: %s", exc.message)
        return 2

    try:
        with provider:
            output: Dict[str, object] = {}
            if args:
                user = provider.get_user_by_username(args[0])
                output["user"] = user.record if user is not None else None
            output["stats"] = provider.gateway.get_stats().as_dict()
    except BackendAuthenticationError as exc:
        log.error("Directory call failed: %s", exc.code)
        return 1
    finally:
        factory.close()

    print(json.dumps(output, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
