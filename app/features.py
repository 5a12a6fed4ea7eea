"""
app/features.py -- Feature gate for advanced transaction filtering.

FeatureGate
  Holds one boolean ("advancedFilters") in a lock-guarded cell.
  start()    -- one synchronous provider setup, then a background refresh thread
  is_advanced_filtering_enabled() -- non-blocking read of the cell
  shutdown() -- stop the refresh thread and release the provider

FlagProvider
  Anything with setup() / fetch() -> bool / shutdown(). RoxFlagProvider talks
  to CloudBees Feature Management; tests pass their own fakes.

Provider failures never propagate: the cell falls back to the registered
default (False) and a warning is logged.
"""
from __future__ import annotations

import threading
from typing import Optional, Protocol

from app.config import AppSettings
from app.logger import get_logger

log = get_logger("features")

ADVANCED_FILTERS_FLAG = "advancedFilters"
DEFAULT_ADVANCED_FILTERS = False


class FlagProvider(Protocol):
    def setup(self) -> None: ...

    def fetch(self) -> bool: ...

    def shutdown(self) -> None: ...


class RoxFlagProvider:
    """
    CloudBees Feature Management (Rox) backed provider.

    Registers flag `<namespace>.advancedFilters` with default False. The SDK
    is imported on setup() so the service runs without the `flags` extra when
    no API key is configured.
    """

    def __init__(self, api_key: str, namespace: str = "api", setup_timeout: float = 10.0) -> None:
        self.api_key = api_key
        self.namespace = namespace
        self.setup_timeout = setup_timeout
        self._container = None

    def setup(self) -> None:
        from rox.server.flags.rox_flag import RoxFlag
        from rox.server.rox_server import Rox

        class FlagContainer:
            def __init__(self) -> None:
                self.advancedFilters = RoxFlag(DEFAULT_ADVANCED_FILTERS)

        container = FlagContainer()
        Rox.register(self.namespace, container)
        Rox.setup(self.api_key).result(timeout=self.setup_timeout)
        self._container = container

    def fetch(self) -> bool:
        from rox.server.rox_server import Rox

        if self._container is None:
            return DEFAULT_ADVANCED_FILTERS
        # fetch() runs on the SDK thread pool; wait so is_enabled() sees the new value
        Rox.fetch().result(timeout=self.setup_timeout)
        return bool(self._container.advancedFilters.is_enabled())

    def shutdown(self) -> None:
        from rox.server.rox_server import Rox

        Rox.shutdown()
        self._container = None


class FeatureGate:
    def __init__(
        self,
        provider: Optional[FlagProvider] = None,
        refresh_interval: float = 60.0,
        default: bool = DEFAULT_ADVANCED_FILTERS,
    ) -> None:
        self._provider = provider
        self._refresh_interval = refresh_interval
        self._default = default
        self._value = default
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._started = False

    # -- the cell -----------------------------------------------------------

    def is_advanced_filtering_enabled(self) -> bool:
        with self._lock:
            return self._value

    def _set(self, value: bool) -> None:
        with self._lock:
            changed = self._value != value
            self._value = value
        if changed:
            log.bind(flag=ADVANCED_FILTERS_FLAG, value=value).info("Feature flag changed")

    # -- lifecycle ----------------------------------------------------------

    @property
    def remote(self) -> bool:
        return self._provider is not None

    def start(self) -> None:
        """Run provider setup synchronously, then refresh in the background."""
        if self._started:
            return
        self._started = True

        if self._provider is None:
            log.warning("Feature management API key not provided, using default flag values")
            return

        try:
            self._provider.setup()
        except Exception as exc:
            log.bind(error=str(exc)).warning("Feature flag provider setup failed, using default flag values")
            try:
                self._provider.shutdown()
            except Exception as shutdown_exc:
                log.bind(error=str(shutdown_exc)).warning("Feature flag provider shutdown failed")
            self._provider = None
            return

        log.info("Feature management initialized")
        self._thread = threading.Thread(target=self._run, name="feature-flag-refresh", daemon=True)
        self._thread.start()

    def refresh(self) -> None:
        """Fetch the current value from the provider and store it in the cell."""
        provider = self._provider
        if provider is None:
            return
        try:
            value = bool(provider.fetch())
        except Exception as exc:
            log.bind(error=str(exc)).warning("Feature flag refresh failed, falling back to default")
            value = self._default
        self._set(value)

    def _run(self) -> None:
        self.refresh()
        while not self._stop.wait(self._refresh_interval):
            self.refresh()

    def shutdown(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if self._provider is not None:
            try:
                self._provider.shutdown()
            except Exception as exc:
                log.bind(error=str(exc)).warning("Feature flag provider shutdown failed")
            self._provider = None
        log.info("Feature management shutdown complete")

    def snapshot(self) -> dict:
        return {
            ADVANCED_FILTERS_FLAG: self.is_advanced_filtering_enabled(),
            "remote": self.remote,
        }


def build_feature_gate(cfg: AppSettings) -> FeatureGate:
    """Gate wired to CloudBees when a real API key is configured, static otherwise."""
    provider: Optional[FlagProvider] = None
    if cfg.remote_flags_enabled:
        provider = RoxFlagProvider(
            api_key=(cfg.rox_api_key or "").strip(),
            namespace=cfg.flag_namespace,
            setup_timeout=cfg.flag_setup_timeout,
        )
    return FeatureGate(provider=provider, refresh_interval=cfg.flag_refresh_interval)
