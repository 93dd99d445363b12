"""
Configuration for ecsctl, read from an optional YAML file and the environment.
"""
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from ..CLIENTS.session import resolve_region
from ..MODELS.update_plan import TimeoutPolicy

DEFAULT_CONFIG_FILE = "ecsctl.yml"


class Settings(BaseModel):
    """
    Defaults for a rolling update, overridable per invocation.
    """
    cluster: str = "default"
    region: Optional[str] = None
    profile: Optional[str] = None

    # Seconds
    timeout: float = Field(default=60.0, ge=0)
    update_period: float = Field(default=30.0, ge=0)

    timeout_policy: TimeoutPolicy = TimeoutPolicy.PROCEED
    log_level: str = "INFO"

    def merge(self, overrides: Dict[str, Any]) -> "Settings":
        """
        Returns a copy with every non-None override applied.
        """
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return Settings(**values)


def load_settings(path: Optional[str] = None, env_file: Optional[str] = None) -> Settings:
    """
    Loads settings from a YAML file.

    Variables from a ``.env`` file are exported first so that the region can
    come from ``AWS_DEFAULT_REGION`` there; variables already set in the
    environment win.

    :param path: Config file. ``ecsctl.yml`` in the working directory is used
        when omitted and present.
    :param env_file: Optional ``.env`` path, searched for when omitted.
    :return: The resolved settings.
    :raises FileNotFoundError: If an explicit ``path`` does not exist.
    :raises ValueError: If the file is not a YAML mapping.
    """
    load_dotenv(env_file or find_dotenv(usecwd=True))

    data: Dict[str, Any] = {}
    if path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        path = DEFAULT_CONFIG_FILE
    if path is not None:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config file {path}: expected a mapping")
        data = {key.replace('-', '_'): value for key, value in data.items()}

    settings = Settings(**data)
    if not settings.region:
        settings = settings.merge({"region": resolve_region()})
    return settings
