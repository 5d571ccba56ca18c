"""Configuration loading: defaults, then config.yaml, then environment."""

from __future__ import annotations

import copy
import os

import yaml

CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config.yaml"
)

DEFAULTS = {
    "database": {"url": "sqlite:///data/gestion_eau.db"},
    "cache": {"redis_url": None, "ttl": 3600},
    "tarification": {
        "prix_transport_defaut": 0,
        "taux_tva_transport_defaut": 0.19,
    },
    "logging": {"level": "INFO"},
}


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path: str | None = None) -> dict:
    """Return the merged configuration.

    ``DATABASE_URL``, ``REDIS_URL`` and ``LOG_LEVEL`` override the file.
    A missing file is not an error; a malformed one is.
    """
    config = copy.deepcopy(DEFAULTS)
    path = path or os.environ.get("GESTION_EAU_CONFIG", CONFIG_PATH)
    if os.path.exists(path):
        with open(path, encoding="utf-8") as f:
            _merge(config, yaml.safe_load(f) or {})

    if os.environ.get("DATABASE_URL"):
        config["database"]["url"] = os.environ["DATABASE_URL"]
    if os.environ.get("REDIS_URL"):
        config["cache"]["redis_url"] = os.environ["REDIS_URL"]
    if os.environ.get("LOG_LEVEL"):
        config["logging"]["level"] = os.environ["LOG_LEVEL"]
    return config
