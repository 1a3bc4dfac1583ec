"""
CargoTrack configuration.

Settings are read once at process start, either from a YAML file or from
environment variables, and passed by reference to the registry and tracker.

Example YAML:
    tracking:
      timeout: 15
      order: [mock, maersk, gocomet, searates, trackship, 17track]
      batch_concurrency: 5
    providers:
      mock:
        enabled: true
      maersk:
        api_key: ${MAERSK_API_KEY}
      searates:
        api_key: ${SEARATES_API_KEY}
    notifications:
      webhook_url: https://hooks.example.com/tracking
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_BATCH_CONCURRENCY = 5

PROVIDER_MOCK = "mock"
PROVIDER_MAERSK = "maersk"
PROVIDER_GOCOMET = "gocomet"
PROVIDER_SEARATES = "searates"
PROVIDER_TRACKSHIP = "trackship"
PROVIDER_TRACK17 = "17track"

DEFAULT_PROVIDER_ORDER: Tuple[str, ...] = (
    PROVIDER_MOCK,
    PROVIDER_MAERSK,
    PROVIDER_GOCOMET,
    PROVIDER_SEARATES,
    PROVIDER_TRACKSHIP,
    PROVIDER_TRACK17,
)

# provider -> {settings field: environment variable}
_PROVIDER_ENV_MAP: Dict[str, Dict[str, str]] = {
    PROVIDER_MOCK: {"enabled": "CARGOTRACK_MOCK_ENABLED"},
    PROVIDER_MAERSK: {"api_key": "MAERSK_API_KEY", "base_url": "MAERSK_API_URL"},
    PROVIDER_GOCOMET: {
        "token": "GOCOMET_TOKEN",
        "email": "GOCOMET_EMAIL",
        "password": "GOCOMET_PASSWORD",
    },
    PROVIDER_SEARATES: {"api_key": "SEARATES_API_KEY"},
    PROVIDER_TRACKSHIP: {"api_key": "TRACKSHIP_API_KEY", "base_url": "TRACKSHIP_API_URL"},
    PROVIDER_TRACK17: {"api_key": "TRACK17_API_KEY"},
}


_ENV_REF = re.compile(r"\$\{(\w+)\}")


def load_config(path: str) -> dict:
    """
    Read a YAML config file, expanding ${VAR} references from the environment.

    Raises:
        FileNotFoundError: path does not exist
        ValueError: a referenced variable is not set
    """
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    missing = sorted({name for name in _ENV_REF.findall(text) if name not in os.environ})
    if missing:
        raise ValueError(f"Config file '{path}' references unset environment variable(s): {', '.join(missing)}")

    expanded = _ENV_REF.sub(lambda m: os.environ[m.group(1)], text)
    return yaml.safe_load(expanded) or {}


def _as_bool(value: Any, default: bool = True) -> bool:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_order(value: Any) -> Tuple[str, ...]:
    if not value:
        return DEFAULT_PROVIDER_ORDER
    if isinstance(value, str):
        value = value.split(",")
    order = [str(name).strip().lower() for name in value if str(name).strip()]
    return tuple(dict.fromkeys(order))


@dataclass(frozen=True)
class ProviderSettings:
    """Credentials and overrides for a single provider."""
    enabled: bool = True
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: Optional[float] = None
    token: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ProviderSettings":
        data = data or {}
        timeout = data.get("timeout")
        return cls(
            enabled=_as_bool(data.get("enabled"), default=True),
            api_key=data.get("api_key") or None,
            base_url=data.get("base_url") or None,
            timeout=float(timeout) if timeout not in (None, "") else None,
            token=data.get("token") or None,
            email=data.get("email") or None,
            password=data.get("password") or None,
        )


@dataclass(frozen=True)
class NotificationSettings:
    webhook_url: Optional[str] = None
    webhook_token: Optional[str] = None
    only_success: bool = False


@dataclass(frozen=True)
class TrackingSettings:
    """
    Process-wide tracking configuration.

    Args:
        timeout: Default per-provider network timeout in seconds.
        order: Provider priority order used by the fallback chain.
        batch_concurrency: Max concurrent chains in a batch refresh.
        providers: Per-provider settings keyed by provider name.
        notifications: Result listener settings.
    """
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    order: Tuple[str, ...] = DEFAULT_PROVIDER_ORDER
    batch_concurrency: int = DEFAULT_BATCH_CONCURRENCY
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)
    notifications: NotificationSettings = field(default_factory=NotificationSettings)

    def provider(self, name: str) -> ProviderSettings:
        return self.providers.get(name) or ProviderSettings()

    def timeout_for(self, name: str) -> float:
        override = self.provider(name).timeout
        return override if override is not None else self.timeout

    @classmethod
    def from_dict(cls, cfg: Optional[Dict[str, Any]]) -> "TrackingSettings":
        cfg = cfg or {}
        tracking_cfg = cfg.get("tracking") or {}
        providers_cfg = cfg.get("providers") or {}
        notify_cfg = cfg.get("notifications") or {}

        providers = {
            str(name).lower(): ProviderSettings.from_dict(values)
            for name, values in providers_cfg.items()
        }

        return cls(
            timeout=float(tracking_cfg.get("timeout") or DEFAULT_TIMEOUT_SECONDS),
            order=_parse_order(tracking_cfg.get("order")),
            batch_concurrency=int(tracking_cfg.get("batch_concurrency") or DEFAULT_BATCH_CONCURRENCY),
            providers=providers,
            notifications=NotificationSettings(
                webhook_url=notify_cfg.get("webhook_url") or None,
                webhook_token=notify_cfg.get("webhook_token") or None,
                only_success=_as_bool(notify_cfg.get("only_success"), default=False),
            ),
        )

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "TrackingSettings":
        """Build settings from environment variables only."""
        env = os.environ if environ is None else environ

        providers_cfg: Dict[str, Dict[str, Any]] = {}
        for provider, mapping in _PROVIDER_ENV_MAP.items():
            providers_cfg[provider] = {
                key: env.get(var_name) for key, var_name in mapping.items()
            }

        cfg = {
            "tracking": {
                "timeout": env.get("CARGOTRACK_TRACKING_TIMEOUT"),
                "order": env.get("CARGOTRACK_PROVIDER_ORDER"),
                "batch_concurrency": env.get("CARGOTRACK_BATCH_CONCURRENCY"),
            },
            "providers": providers_cfg,
            "notifications": {
                "webhook_url": env.get("CARGOTRACK_WEBHOOK_URL"),
                "webhook_token": env.get("CARGOTRACK_WEBHOOK_TOKEN"),
            },
        }
        return cls.from_dict(cfg)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "TrackingSettings":
        """Load from a YAML file if it exists, otherwise from the environment."""
        if path and os.path.exists(path):
            logger.info(f"Loading tracking settings from {path}")
            return cls.from_dict(load_config(path))
        if path:
            logger.warning(f"Config not found: {path}. Using environment variables.")
        return cls.from_env()
