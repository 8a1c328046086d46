"""Configuration model and loaders for pastebin-agent.

Responsibilities:
- Define agent configuration as a typed dataclass.
- Resolve credentials with deterministic source precedence.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `AgentConfig`: normalized settings for constructing a `PastebinAgent`.
- `RuntimeConfigSources`: optional value sources for precedence resolution.
- `ConfigLoader`: static construction helpers for `AgentConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Callable, Mapping

import requests
import yaml

from .agent.http_agent import API_URL, LOGIN_URL, PastebinAgent
from .agent.rate_limiter import RateLimitMode
from .agent.request_builder import DEFAULT_USER_AGENT
from .parsing import normalize_optional_string, parse_optional_positive_float
from .telemetry.logger import RequestLogger


_ENV_API_KEY = "PASTEBIN_API_KEY"
_ENV_USER_KEY = "PASTEBIN_USER_KEY"
_ENV_RATE_LIMIT_MODE = "PASTEBIN_RATE_LIMIT_MODE"
_ENV_API_URL = "PASTEBIN_API_URL"
_ENV_LOGIN_URL = "PASTEBIN_LOGIN_URL"
_ENV_USER_AGENT = "PASTEBIN_USER_AGENT"
_ENV_TIMEOUT_SECONDS = "PASTEBIN_TIMEOUT_SECONDS"


@dataclass(frozen=True, slots=True)
class RuntimeConfigSources:
    """Source mappings used for deterministic credential precedence.

    Attributes:
        cli: Values explicitly provided by CLI arguments.
        secure: Values loaded from secure local credential storage.
        env: Values loaded from environment variables.
    """

    cli: Mapping[str, str] = field(default_factory=dict)
    secure: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class AgentConfig:
    """Settings for one `PastebinAgent`.

    Attributes:
        api_key: Optional developer key; may also come from runtime sources.
        rate_limit_mode: Rate-limit discipline, `burst` by default.
        api_url: Endpoint for `api_option` calls.
        login_url: Endpoint for user login.
        user_agent: Fixed outbound `User-Agent` value.
        timeout_seconds: Optional per-request transport timeout.
        runtime_sources: Optional runtime source overrides injected by the CLI.
    """

    api_key: str | None = None
    rate_limit_mode: RateLimitMode = RateLimitMode.BURST
    api_url: str = API_URL
    login_url: str = LOGIN_URL
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float | None = None
    runtime_sources: RuntimeConfigSources = field(default_factory=RuntimeConfigSources)

    def validate(self) -> None:
        """Validate configuration values before any network activity."""

        self.rate_limit_mode = RateLimitMode.parse(self.rate_limit_mode)
        self._require_non_empty(self.api_url, "api_url")
        self._require_non_empty(self.login_url, "login_url")
        self._require_non_empty(self.user_agent, "user_agent")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0.0:
            raise ValueError("`timeout_seconds` must be a positive number.")

    def resolved_api_key(self, sources: RuntimeConfigSources | None = None) -> str:
        """Resolve the developer key.

        Precedence is `cli` > `secure` > `env` > config field.

        Raises:
            ValueError: When no source provides a non-blank key.
        """

        resolved_sources = sources if sources is not None else self.runtime_sources
        api_key = self._resolve_optional_runtime_value(
            key="api_key",
            env_key=_ENV_API_KEY,
            default_value=self.api_key,
            sources=resolved_sources,
        )
        if api_key is None:
            raise ValueError(
                "`api_key` could not be resolved from CLI, secure storage, env, or config."
            )
        return api_key

    def resolved_user_key(self, sources: RuntimeConfigSources | None = None) -> str | None:
        """Resolve an optional stored session user key with the same precedence."""

        resolved_sources = sources if sources is not None else self.runtime_sources
        return self._resolve_optional_runtime_value(
            key="user_key",
            env_key=_ENV_USER_KEY,
            default_value=None,
            sources=resolved_sources,
        )

    def create_agent(
        self,
        *,
        request_logger: RequestLogger | None = None,
        session: requests.Session | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> PastebinAgent:
        """Build a validated agent from this configuration."""

        self.validate()
        return PastebinAgent(
            self.resolved_api_key(),
            self.rate_limit_mode,
            api_url=self.api_url,
            login_url=self.login_url,
            user_agent=self.user_agent,
            timeout_seconds=self.timeout_seconds,
            user_key=self.resolved_user_key(),
            session=session,
            clock=clock,
            sleeper=sleeper,
            request_logger=request_logger,
        )

    def _resolve_optional_runtime_value(
        self,
        key: str,
        env_key: str,
        default_value: str | None,
        sources: RuntimeConfigSources,
    ) -> str | None:
        """Resolve an optional runtime value from sources in deterministic order."""

        cli_value = self._normalized_lookup(sources.cli, key)
        if cli_value is not None:
            return cli_value

        secure_value = self._normalized_lookup(sources.secure, key)
        if secure_value is not None:
            return secure_value

        env_value = self._normalized_lookup(sources.env, env_key)
        if env_value is not None:
            return env_value

        return normalize_optional_string(default_value)

    @staticmethod
    def _normalized_lookup(mapping: Mapping[str, str], key: str) -> str | None:
        """Return a stripped mapping value for a key or `None` when missing/blank."""

        if key not in mapping:
            return None
        return normalize_optional_string(mapping.get(key))

    @staticmethod
    def _require_non_empty(value: str, field_name: str) -> None:
        """Validate that string fields are not empty."""

        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"`{field_name}` must be a non-empty string.")


class ConfigLoader:
    """Factory methods for creating `AgentConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {
            "api_key",
            "rate_limit_mode",
            "api_url",
            "login_url",
            "user_agent",
            "timeout_seconds",
        }
    )
    _RUNTIME_ENV_KEYS = frozenset({_ENV_API_KEY, _ENV_USER_KEY})

    @staticmethod
    def from_yaml(path: Path) -> AgentConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)

        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> AgentConfig:
        """Create a validated config from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        mode_value = ConfigLoader._optional_env_string(env_map, _ENV_RATE_LIMIT_MODE)
        timeout_value = ConfigLoader._optional_env_string(env_map, _ENV_TIMEOUT_SECONDS)
        runtime_env = {
            key: value
            for key, value in env_map.items()
            if key in ConfigLoader._RUNTIME_ENV_KEYS
            and normalize_optional_string(value) is not None
        }

        config = AgentConfig(
            api_key=ConfigLoader._optional_env_string(env_map, _ENV_API_KEY),
            rate_limit_mode=(
                RateLimitMode.parse(mode_value)
                if mode_value is not None
                else RateLimitMode.BURST
            ),
            api_url=ConfigLoader._optional_env_string(env_map, _ENV_API_URL) or API_URL,
            login_url=ConfigLoader._optional_env_string(env_map, _ENV_LOGIN_URL) or LOGIN_URL,
            user_agent=(
                ConfigLoader._optional_env_string(env_map, _ENV_USER_AGENT)
                or DEFAULT_USER_AGENT
            ),
            timeout_seconds=parse_optional_positive_float(
                timeout_value, _ENV_TIMEOUT_SECONDS
            ),
            runtime_sources=RuntimeConfigSources(env=runtime_env),
        )
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(payload: Mapping[str, Any], source_label: str) -> AgentConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        mode_value = normalize_optional_string(payload.get("rate_limit_mode"))
        config = AgentConfig(
            api_key=normalize_optional_string(payload.get("api_key")),
            rate_limit_mode=(
                RateLimitMode.parse(mode_value)
                if mode_value is not None
                else RateLimitMode.BURST
            ),
            api_url=normalize_optional_string(payload.get("api_url")) or API_URL,
            login_url=normalize_optional_string(payload.get("login_url")) or LOGIN_URL,
            user_agent=normalize_optional_string(payload.get("user_agent")) or DEFAULT_USER_AGENT,
            timeout_seconds=parse_optional_positive_float(
                payload.get("timeout_seconds"), "timeout_seconds"
            ),
        )
        config.validate()
        return config

    @staticmethod
    def _optional_env_string(env: Mapping[str, str], key: str) -> str | None:
        """Read and normalize optional string environment variable values."""

        if key not in env:
            return None
        return normalize_optional_string(env.get(key))
