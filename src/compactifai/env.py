"""Environment helpers: .env loading and COMPACTIFAI_* variable lookup."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

ENV_API_KEY = "COMPACTIFAI_API_KEY"
ENV_BASE_URL = "COMPACTIFAI_BASE_URL"
ENV_DEFAULT_MODEL = "COMPACTIFAI_DEFAULT_MODEL"
ENV_TIMEOUT_SECONDS = "COMPACTIFAI_TIMEOUT_SECONDS"

# Environment variable name -> configuration section key.
ENV_SECTION_KEYS = {
    ENV_API_KEY: "ApiKey",
    ENV_BASE_URL: "BaseUrl",
    ENV_DEFAULT_MODEL: "DefaultModel",
    ENV_TIMEOUT_SECONDS: "TimeoutSeconds",
}


def read_env_section(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect non-empty COMPACTIFAI_* variables keyed by section key."""
    source = os.environ if environ is None else environ
    section: dict[str, str] = {}
    for env_name, key in ENV_SECTION_KEYS.items():
        value = source.get(env_name)
        if value is not None and value.strip():
            section[key] = value.strip()
    return section


def load_dotenv(path: str = ".env") -> bool:
    env_path = Path(path)
    if not env_path.exists():
        return False
    try:
        text = env_path.read_text(encoding="utf-8")
    except OSError:
        return False

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].lstrip()
        if "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        if value == "":
            continue
        # Existing environment always wins over the file.
        if key not in os.environ:
            os.environ[key] = value
    return True
