"""Local credential/timezone file.

A single JSON object ``{"apiKey": ..., "timezone": ...}`` stored under the
user's config directory, readable only by the owner. A missing or unreadable
file is an empty config, never an error.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from .constants import (
    CONFIG_DIR_MODE,
    CONFIG_DIR_NAME,
    CONFIG_FILE_MODE,
    CONFIG_FILE_NAME,
    ENV_CONFIG_PATH,
)
from .models import StoredConfig

LOG = logging.getLogger(__name__)


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Resolve the config file location.

    Resolution order: ``CALCOM_CONFIG`` > ``$XDG_CONFIG_HOME/calcom-cli`` >
    ``~/.config/calcom-cli``.
    """
    env = os.environ if environ is None else environ
    explicit = env.get(ENV_CONFIG_PATH)
    if explicit:
        return Path(os.path.expanduser(explicit))
    base = env.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return Path(os.path.expanduser(base)) / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def read_config(path: Optional[Path] = None) -> StoredConfig:
    target = Path(path) if path else get_config_path()
    try:
        raw = target.read_text(encoding="utf-8")
    except OSError:
        return StoredConfig()
    try:
        data = json.loads(raw)
    except ValueError:
        LOG.warning("Ignoring unreadable config file %s", target)
        return StoredConfig()
    return StoredConfig.from_dict(data)


def write_config(config: StoredConfig, path: Optional[Path] = None) -> Path:
    """Write ``config`` with owner-only permissions and return the path."""
    target = Path(path) if path else get_config_path()
    target.parent.mkdir(parents=True, exist_ok=True, mode=CONFIG_DIR_MODE)
    text = json.dumps(config.to_dict(), indent=2) + "\n"
    fd = os.open(str(target), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CONFIG_FILE_MODE)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(text)
    # O_CREAT mode is ignored for files that already exist
    os.chmod(target, CONFIG_FILE_MODE)
    LOG.debug("Wrote config %s", target)
    return target
