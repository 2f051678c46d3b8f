import os
from pathlib import Path

import yaml

# will return the root directory of the project (the folder that holds doc_analyzer/)


def _project_root() -> Path:
    # resolve() gives the absolute path, parents[2] climbs utils -> doc_analyzer -> project
    return Path(__file__).resolve().parents[2]


def _default_config_path() -> Path:
    return Path(__file__).resolve().parents[1] / "config" / "config.yaml"


def load_config(config_path: str | None = None) -> dict:
    env_path = os.getenv("CONFIG_PATH", None)

    if config_path is None:
        config_path = env_path or str(_default_config_path())

    path = Path(config_path)

    if not path.is_absolute():
        path = _project_root() / path
    if not path.exists():
        raise FileNotFoundError(f"Config file not found at {path}")
    with open(path, "r", encoding="utf-8") as file:
        return yaml.safe_load(file) or {}
