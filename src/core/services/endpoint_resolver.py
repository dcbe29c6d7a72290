"""Backend base-URL resolution.

Rules:
- An explicit `api_url` wins over everything.
- Otherwise pick a per-platform default (browser, Android emulator, iOS).
- Resolution never raises: any failure falls back to `SAFE_DEFAULT_URL` so the
  client stays usable (if misconfigured) instead of crashing at startup.
- The result is cached for the lifetime of the resolver; `override_base_url`
  replaces it at any time.
"""

from __future__ import annotations

from typing import Callable

from core.config import AppSettings
from core.domain.models import EndpointConfig
from core.domain.runtime import Platform
from core.log import get_logger

SAFE_DEFAULT_URL = "http://localhost:5000/api"
ANDROID_EMULATOR_HOST = "10.0.2.2"

_log = get_logger("endpoint")


class EndpointResolver:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        detect_platform: Callable[[], Platform] | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._detect_platform = detect_platform or Platform.detect
        self._config: EndpointConfig | None = None

    @property
    def endpoint_config(self) -> EndpointConfig:
        if self._config is None:
            self._config = EndpointConfig(base_url=self._resolve())
        return self._config

    def resolve_base_url(self) -> str:
        return self.endpoint_config.base_url

    def override_base_url(self, url: str) -> None:
        """Replace the cached base URL. An empty URL is a caller bug: `ValueError`."""

        cleaned = (url or "").strip()
        if not cleaned:
            raise ValueError("API base URL must not be empty")
        self._config = EndpointConfig(base_url=cleaned.rstrip("/") or cleaned)

    def _resolve(self) -> str:
        try:
            explicit = (self._settings.api_url or "").strip()
            if explicit:
                return explicit.rstrip("/")

            platform = self._settings.platform or self._detect_platform()
            if platform is Platform.WEB:
                return self._web_url()
            host = (self._settings.api_host or "").strip()
            if platform is Platform.ANDROID:
                return self._host_url(host or ANDROID_EMULATOR_HOST)
            return self._host_url(host or "localhost")
        except Exception as exc:
            _log.warning("Could not resolve API URL (%s), using %s", exc, SAFE_DEFAULT_URL)
            return SAFE_DEFAULT_URL

    def _web_url(self) -> str:
        origin = (self._settings.web_origin or "").strip().rstrip("/")
        if origin and "localhost" not in origin:
            return f"{origin}{self._prefix()}"
        return self._host_url("localhost")

    def _host_url(self, host: str) -> str:
        return f"http://{host}:{self._settings.api_port}{self._prefix()}"

    def _prefix(self) -> str:
        prefix = self._settings.api_path_prefix.strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = "/" + prefix
        return prefix
