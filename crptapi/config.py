"""Configuration model and loaders for the CRPT client.

Responsibilities:
- Define client configuration as a typed dataclass.
- Provide loader entry points for file- and environment-based configuration.
- Apply explicit CLI overrides on top of loaded values.

Key types:
- `CrptApiConfig`: normalized throttling and endpoint settings.
- `ConfigLoader`: static construction helpers for `CrptApiConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import InvalidConfigurationError
from .parsing import normalize_optional_string, parse_positive_float, parse_positive_int
from .throttle.units import TimeUnit

DEFAULT_TIME_UNIT = "seconds"
DEFAULT_REQUEST_LIMIT = 5
DEFAULT_BASE_URL = "https://ismp.crpt.ru"
DEFAULT_CREATE_PATH = "/api/v3/lk/documents/create"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class CrptApiConfig:
    """Runtime configuration for one CRPT client.

    Attributes:
        time_unit: Window unit name; one unit is one admission window.
        request_limit: Maximum requests admitted per window.
        base_url: Scheme and host of the CRPT API.
        create_path: Path of the create-document endpoint.
        timeout_seconds: HTTP request timeout.
    """

    time_unit: str = DEFAULT_TIME_UNIT
    request_limit: int = DEFAULT_REQUEST_LIMIT
    base_url: str = DEFAULT_BASE_URL
    create_path: str = DEFAULT_CREATE_PATH
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def window_seconds(self) -> float:
        """Return the admission window length in seconds."""

        return TimeUnit.parse(self.time_unit).seconds

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.create_path.lstrip('/')}"

    def validate(self) -> None:
        """Validate configuration values before a client is built.

        Raises:
            InvalidConfigurationError: If any value is unusable.
        """

        try:
            TimeUnit.parse(self.time_unit)
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from exc
        if (
            isinstance(self.request_limit, bool)
            or not isinstance(self.request_limit, int)
            or self.request_limit <= 0
        ):
            raise InvalidConfigurationError("`request_limit` must be a positive integer.")
        if not isinstance(self.base_url, str) or not self.base_url.startswith(
            ("http://", "https://")
        ):
            raise InvalidConfigurationError("`base_url` must be an http(s) URL.")
        if not isinstance(self.create_path, str) or not self.create_path.strip():
            raise InvalidConfigurationError("`create_path` must be a non-empty string.")
        if (
            not isinstance(self.timeout_seconds, (int, float))
            or not math.isfinite(self.timeout_seconds)
            or self.timeout_seconds <= 0
        ):
            raise InvalidConfigurationError("`timeout_seconds` must be a positive number.")

    def with_overrides(self, **overrides: Any) -> CrptApiConfig:
        """Return a validated copy with every non-`None` override applied."""

        values = {
            "time_unit": self.time_unit,
            "request_limit": self.request_limit,
            "base_url": self.base_url,
            "create_path": self.create_path,
            "timeout_seconds": self.timeout_seconds,
        }
        for key, value in overrides.items():
            if key not in values:
                raise InvalidConfigurationError(f"Unsupported config override `{key}`.")
            if value is not None:
                values[key] = value
        config = CrptApiConfig(**values)
        config.validate()
        return config

    def as_display_rows(self) -> list[tuple[str, str]]:
        """Return ordered key/value rows for CLI display."""

        return [
            ("time_unit", TimeUnit.parse(self.time_unit).name.lower()),
            ("request_limit", str(self.request_limit)),
            ("window_seconds", f"{self.window_seconds:g}"),
            ("endpoint", self.endpoint),
            ("timeout_seconds", f"{self.timeout_seconds:g}"),
        ]


class ConfigLoader:
    """Factory methods for creating `CrptApiConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {"time_unit", "request_limit", "base_url", "create_path", "timeout_seconds"}
    )

    @staticmethod
    def from_yaml(path: Path) -> CrptApiConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> CrptApiConfig:
        """Create a validated config from `CRPT_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        request_limit_text = normalize_optional_string(env_map.get("CRPT_REQUEST_LIMIT"))
        timeout_text = normalize_optional_string(env_map.get("CRPT_TIMEOUT_SECONDS"))
        try:
            request_limit = (
                parse_positive_int(request_limit_text, "CRPT_REQUEST_LIMIT")
                if request_limit_text is not None
                else DEFAULT_REQUEST_LIMIT
            )
            timeout_seconds = (
                parse_positive_float(timeout_text, "CRPT_TIMEOUT_SECONDS")
                if timeout_text is not None
                else DEFAULT_TIMEOUT_SECONDS
            )
        except ValueError as exc:
            raise InvalidConfigurationError(str(exc)) from exc

        config = CrptApiConfig(
            time_unit=normalize_optional_string(env_map.get("CRPT_TIME_UNIT"))
            or DEFAULT_TIME_UNIT,
            request_limit=request_limit,
            base_url=normalize_optional_string(env_map.get("CRPT_BASE_URL")) or DEFAULT_BASE_URL,
            create_path=normalize_optional_string(env_map.get("CRPT_CREATE_PATH"))
            or DEFAULT_CREATE_PATH,
            timeout_seconds=timeout_seconds,
        )
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise InvalidConfigurationError(f"YAML config `{path}` is malformed: {exc}") from exc
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise InvalidConfigurationError(
                f"YAML config `{path}` must contain a top-level mapping/object."
            )
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> CrptApiConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload.keys()) - ConfigLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise InvalidConfigurationError(
                f"{source_label} has unsupported key(s): {', '.join(map(str, unknown))}"
            )

        try:
            request_limit = (
                parse_positive_int(payload["request_limit"], "request_limit")
                if payload.get("request_limit") is not None
                else DEFAULT_REQUEST_LIMIT
            )
            timeout_seconds = (
                parse_positive_float(payload["timeout_seconds"], "timeout_seconds")
                if payload.get("timeout_seconds") is not None
                else DEFAULT_TIMEOUT_SECONDS
            )
        except ValueError as exc:
            raise InvalidConfigurationError(f"{source_label}: {exc}") from exc

        config = CrptApiConfig(
            time_unit=normalize_optional_string(payload.get("time_unit")) or DEFAULT_TIME_UNIT,
            request_limit=request_limit,
            base_url=normalize_optional_string(payload.get("base_url")) or DEFAULT_BASE_URL,
            create_path=normalize_optional_string(payload.get("create_path"))
            or DEFAULT_CREATE_PATH,
            timeout_seconds=timeout_seconds,
        )
        config.validate()
        return config
