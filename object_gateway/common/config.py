# object_gateway/common/config.py
import os
from typing import Any, Dict, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Worker inventory
    DOCKER_HOST: str = "unix:///var/run/docker.sock"
    DOCKER_API_VERSION: Optional[str] = None
    DOCKER_TIMEOUT: float = 10.0
    WORKER_NAME_PATTERN: str = "amazin-object-storage-node-"
    DOCKER_NETWORK: str = "homework-object-storage_amazin-object-storage"
    ACCESS_KEY_ENV: str = "MINIO_ACCESS_KEY"
    SECRET_KEY_ENV: str = "MINIO_SECRET_KEY"
    WORKER_PORT: int = 9000

    # Routing
    BUCKET_NAME: str = "objects"
    RING_REPLICATION_FACTOR: int = Field(default=20, ge=1)
    RING_LOAD: float = Field(default=1.25, ge=1.0)
    STORAGE_TIMEOUT: float = Field(default=10.0, gt=0)

    # HTTP front door
    GATEWAY_HOST: str = "0.0.0.0"
    GATEWAY_PORT: int = 3000
    REQUEST_TIMEOUT: float = 30.0
    SETUP_ON_STARTUP: bool = False
    DEBUG: bool = os.getenv("DEBUG", "0") == "1"


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    with open(config_path, "r") as f:
        return yaml.safe_load(f) or {}


def get_settings() -> Settings:
    """Build settings from the environment, overlaid with GATEWAY_CONFIG_FILE if set"""
    config_file = os.getenv("GATEWAY_CONFIG_FILE")
    if config_file:
        return Settings(**load_yaml_config(config_file))
    return Settings()


settings = get_settings()
