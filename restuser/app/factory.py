"""Provider factory that owns the memoized directory gateways.

The identity host calls :meth:`ProviderFactory.create` once per unit of work.
Gateways (and their connection pools) are expensive, so the factory keeps one
per distinct :class:`Settings` value and rebuilds only when the value changes.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from restuser import __version__
from restuser.adapters.directory_rest import DirectoryRestAdapter
from restuser.adapters.http_client import probe_base_url
from restuser.domain.settings import CONFIG_PROPERTIES, ConfigProperty, Settings
from restuser.usecases.user_provider import RestUserProvider

PROVIDER_ID = "rest-repo-provider"

GatewayBuilder = Callable[[Settings], DirectoryRestAdapter]


class ProviderFactory:
    """Create per-unit-of-work providers over a shared, settings-keyed gateway.

    Call chain:
        host -> ``validate_configuration`` when options are saved;
        host -> ``create`` for each request/transaction -> ``RestUserProvider``.
    """

    def __init__(
        self,
        *,
        gateway_builder: Optional[GatewayBuilder] = None,
        probe: Optional[Callable[[str], None]] = probe_base_url,
    ) -> None:
        """Initialize an empty gateway table.

        Args:
            gateway_builder: Builds a gateway for new settings; defaults to
                ``DirectoryRestAdapter``.
            probe: Connectivity check used by ``validate_configuration``.
        """
        self._log = logging.getLogger(__name__)
        self._build_gateway = gateway_builder or DirectoryRestAdapter
        self._probe = probe
        self._gateways: Dict[Settings, DirectoryRestAdapter] = {}
        self._lock = threading.Lock()
        self._log.info("Initializing REST user directory factory version: %s", __version__)

    @property
    def provider_id(self) -> str:
        return PROVIDER_ID

    def config_properties(self) -> Tuple[ConfigProperty, ...]:
        return CONFIG_PROPERTIES

    def validate_configuration(self, config: Mapping[str, Any]) -> Settings:
        """Validate host options, including a connectivity probe of the base URL.

        Raises:
            ConfigurationError: If any option is invalid or the URL is unreachable.
        """
        return Settings.from_config(config, probe=self._probe)

    def gateway_for(self, settings: Settings) -> DirectoryRestAdapter:
        """Return the gateway for ``settings``, building it on first use.

        A gateway built for different settings is dropped and closed; requests
        already running on it complete on their own.
        """
        with self._lock:
            gateway = self._gateways.get(settings)
            if gateway is not None:
                self._log.info("Gateway already instantiated")
                return gateway
            self._log.info("Creating a new gateway for %s", settings)
            gateway = self._build_gateway(settings)
            stale = list(self._gateways.values())
            self._gateways = {settings: gateway}
        for old in stale:
            old.close()
        return gateway

    def create(self, config: Mapping[str, Any]) -> RestUserProvider:
        settings = Settings.from_config(config)
        return RestUserProvider(self.gateway_for(settings))

    def close(self) -> None:
        with self._lock:
            gateways = list(self._gateways.values())
            self._gateways = {}
        for gateway in gateways:
            gateway.close()


__all__ = ["PROVIDER_ID", "ProviderFactory"]
