"""API key and timezone resolution.

Resolution order for the token: ``CALCOM_API_KEY`` environment > config file.
Resolution order for the timezone: explicit flag > config file > default.
Both resolvers take injected snapshots so they never read process state
behind the caller's back.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .config import get_config_path, read_config, write_config
from .constants import DEFAULT_TIMEZONE, ENV_API_KEY
from .errors import NoAuthError
from .models import StoredConfig
from .validators import parse_api_key, parse_timezone

NO_AUTH_MESSAGE = "No API key configured."
NO_AUTH_HINT = f"Run `calcom auth set --api-key <key>` or set {ENV_API_KEY} in your environment."


@dataclass(frozen=True)
class ResolvedToken:
    token: str
    source: str  # env | config


def _env_token(environ: Optional[Mapping[str, str]]) -> str:
    env = os.environ if environ is None else environ
    return (env.get(ENV_API_KEY) or "").strip()


def mask_secret(secret: str) -> str:
    """Preview a secret as first 3 + *** + last 3 characters."""
    if len(secret) <= 6:
        return "***"
    return f"{secret[:3]}***{secret[-3:]}"


def resolve_token(config: StoredConfig, environ: Optional[Mapping[str, str]] = None) -> ResolvedToken:
    env_token = _env_token(environ)
    if env_token:
        return ResolvedToken(env_token, "env")
    stored = (config.api_key or "").strip()
    if stored:
        return ResolvedToken(stored, "config")
    raise NoAuthError(NO_AUTH_MESSAGE, hint=NO_AUTH_HINT)


def auth_source(config: StoredConfig, environ: Optional[Mapping[str, str]] = None) -> str:
    try:
        return resolve_token(config, environ).source
    except NoAuthError:
        return "none"


def resolve_timezone(config: StoredConfig, override: Optional[str] = None) -> str:
    """Pick the active timezone; the stored value is re-validated on every read."""
    if override:
        return parse_timezone(override)
    if not config.timezone:
        return DEFAULT_TIMEZONE
    return parse_timezone(config.timezone)


def set_auth(api_key: str, timezone: Optional[str] = None, path: Optional[Path] = None) -> Path:
    """Validate and persist the API key (and timezone, when given)."""
    key = parse_api_key(api_key)
    next_timezone = parse_timezone(timezone) if timezone else None
    current = read_config(path)
    current.api_key = key
    if next_timezone:
        current.timezone = next_timezone
    return write_config(current, path)


def auth_status(
    config: StoredConfig,
    timezone: str,
    environ: Optional[Mapping[str, str]] = None,
    path: Optional[Path] = None,
) -> Dict[str, Any]:
    """Describe where the token comes from without revealing it."""
    try:
        resolved: Optional[ResolvedToken] = resolve_token(config, environ)
    except NoAuthError:
        resolved = None
    return {
        "authenticated": resolved is not None,
        "source": resolved.source if resolved else "none",
        "tokenPreview": mask_secret(resolved.token) if resolved else None,
        "configPath": str(path or get_config_path(environ)),
        "timezone": timezone,
    }
