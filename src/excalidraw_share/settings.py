"""Server configuration loaded from overrides, environment or a JSON config file."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

ENV_VARS = {
    "listen_addr": "LISTEN_ADDR",
    "data_dir": "DATA_DIR",
    "api_key": "API_KEY",
    "base_url": "BASE_URL",
    "max_upload_mb": "MAX_UPLOAD_MB",
    "frontend_dir": "FRONTEND_DIR",
}


class Settings(BaseModel):
    """App-level configuration."""

    listen_addr: str = Field("127.0.0.1:8184", description="Address to listen on")
    data_dir: Path = Field(Path("./data/drawings"), description="Directory for drawing JSON files")
    api_key: str = Field(..., description="API key for upload/delete/list operations")
    base_url: str = Field("http://localhost:8184", description="Public base URL for share links")
    max_upload_mb: int = Field(50, ge=1, description="Maximum upload size in megabytes")
    frontend_dir: Path = Field(Path("./frontend/dist"), description="Static frontend build")

    @field_validator("api_key")
    @classmethod
    def require_api_key(cls, value: str) -> str:
        if not value:
            raise ValueError("api_key must not be empty")
        return value

    @field_validator("listen_addr")
    @classmethod
    def validate_listen_addr(cls, value: str) -> str:
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError("listen_addr must look like HOST:PORT")
        return value

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @property
    def listen_host(self) -> str:
        return self.listen_addr.rpartition(":")[0]

    @property
    def listen_port(self) -> int:
        return int(self.listen_addr.rpartition(":")[2])

    def share_url(self, drawing_id: str) -> str:
        return f"{self.base_url.rstrip('/')}/d/{drawing_id}"


def load_settings(config_path: str | Path | None = None, **overrides: Any) -> Settings:
    """Merge defaults < config file < environment < explicit overrides."""
    config_payload: Dict[str, Any] = {}
    if config_path:
        try:
            config_payload = json.loads(Path(config_path).read_text())
        except FileNotFoundError:
            config_payload = {}

    values: Dict[str, Any] = {}
    for field_name, env_name in ENV_VARS.items():
        if field_name in config_payload:
            values[field_name] = config_payload[field_name]
        env_value = os.getenv(env_name)
        if env_value:
            values[field_name] = env_value
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**values)
