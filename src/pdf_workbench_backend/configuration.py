from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

load_dotenv()

_HERE = Path(__file__).resolve()
_CANDIDATE_CONFIG_PATHS = [parent / "config/config.yaml" for parent in _HERE.parents[:5]]

DEFAULTS: Dict[str, Any] = {
    "server": {
        "cors_origins": ["http://localhost:5173"],
        "static_dir": "public",
        "upload_dir": "uploads",
        "max_upload_mb": 25,
        "max_documents": 64,
    },
    "auth": {"password": ""},
    "page": {"width": 612, "height": 792},
    "title": {"default_text": "Title", "font_size": 24, "top_offset": 50},
    "export": {"filename": "document.pdf"},
    "logging": {"level": "INFO"},
}

# environment variable -> dotted config key
ENV_OVERRIDES = {
    "AUTH_PASSWORD": "auth.password",
    "CORS_ORIGINS": "server.cors_origins",
    "UPLOAD_DIR": "server.upload_dir",
    "STATIC_DIR": "server.static_dir",
    "MAX_UPLOAD_MB": "server.max_upload_mb",
    "MAX_DOCUMENTS": "server.max_documents",
    "LOG_LEVEL": "logging.level",
}


def find_config_path() -> Optional[Path]:
    explicit = os.environ.get("PDF_WORKBENCH_CONFIG")
    if explicit:
        path = Path(explicit)
        if not path.exists():
            raise FileNotFoundError(f"PDF_WORKBENCH_CONFIG points to a missing file: {path}")
        return path
    return next((path for path in _CANDIDATE_CONFIG_PATHS if path.exists()), None)


def _environment_overrides() -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for variable, dotted_key in ENV_OVERRIDES.items():
        raw = os.environ.get(variable)
        if raw is None:
            continue
        value: Any = raw
        if variable == "CORS_ORIGINS":
            value = [origin.strip() for origin in raw.split(",") if origin.strip()]
        elif variable in ("MAX_UPLOAD_MB", "MAX_DOCUMENTS"):
            value = int(raw)

        section, key = dotted_key.split(".")
        overrides.setdefault(section, {})[key] = value
    return overrides


def make_runtime_config(overrides: Optional[Dict[str, Any]] = None, config_path: Optional[Path] = None) -> DictConfig:
    """
    Build the effective settings tree.

    Precedence, lowest first: built-in defaults, the YAML file, environment
    variables, then explicit ``overrides``. The base is in struct mode so a
    misspelled key fails loudly instead of being ignored.

    Args:
        overrides: Extra values to merge last (mostly used by tests)
        config_path: YAML file to use instead of the discovered one

    Returns:
        Merged, read-only DictConfig
    """
    base = OmegaConf.create(DEFAULTS)
    OmegaConf.set_struct(base, True)

    layers = []
    path = config_path or find_config_path()
    if path is not None:
        layers.append(OmegaConf.load(path))
    layers.append(OmegaConf.create(_environment_overrides()))
    if overrides:
        layers.append(OmegaConf.create(overrides))

    merged = DictConfig(OmegaConf.merge(base, *layers))
    OmegaConf.set_readonly(merged, True)
    return merged


@lru_cache(maxsize=1)
def get_settings() -> DictConfig:
    return make_runtime_config()
