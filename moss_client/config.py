"""
Configuration for Moss submissions.

Process-wide settings come from the environment (a .env file is honoured
through python-dotenv). Per-lab options live in the course YAML under
``labs.<lab>.moss``:

    labs:
      "2":
        short-name: ЛР2
        moss:
          language: cc
          max-matches: 10
          show: 250
          comment: "lab 2"
          directory: false
          experimental: false
"""
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .fetch import DEFAULT_HTTP_TIMEOUT
from .models import DEFAULT_HOST, DEFAULT_PORT, Address, SubmissionConfig
from .submission import DEFAULT_TIMEOUT


class MossSettings(BaseModel):
    """Settings shared by every submission of a process."""
    user_id: int | None = Field(default=None, ge=0, le=2**32 - 1)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    language: str = "c"
    timeout: float = DEFAULT_TIMEOUT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "MossSettings":
        """
        Read MOSS_* variables.

        Raises:
            ValueError: a numeric variable is not a number
        """
        if dotenv:
            load_dotenv()
        user_id = os.getenv("MOSS_USER_ID")
        return cls(
            user_id=int(user_id) if user_id else None,
            host=os.getenv("MOSS_HOST", DEFAULT_HOST),
            port=int(os.getenv("MOSS_PORT", DEFAULT_PORT)),
            language=os.getenv("MOSS_LANGUAGE", "c"),
            timeout=float(os.getenv("MOSS_TIMEOUT", DEFAULT_TIMEOUT)),
            http_timeout=float(os.getenv("MOSS_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)),
        )

    @property
    def endpoint(self) -> Address:
        return Address(host=self.host, port=self.port)


def load_course_config(path: str | Path) -> dict[str, Any]:
    """Load a course YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Course config {path} is not a mapping")
    return data


def resolve_lab(course_config: dict[str, Any], lab_id: str) -> dict[str, Any]:
    """Find a lab by its key or its short-name."""
    labs = course_config.get("labs") or course_config.get("course", {}).get("labs") or {}
    for key, value in labs.items():
        if str(key) == lab_id or (value or {}).get("short-name") == lab_id:
            return value or {}
    raise KeyError(f"Could not resolve lab_id: '{lab_id}'")


def submission_config_from_course(
    course_config: dict[str, Any],
    lab_id: str,
    settings: MossSettings,
) -> SubmissionConfig:
    """
    Build the SubmissionConfig of a lab.

    Raises:
        KeyError: the lab is not in the course
        ValueError: no Moss user ID is configured
    """
    if settings.user_id is None:
        raise ValueError("Moss checker is disabled, MOSS_USER_ID not provided")
    moss = resolve_lab(course_config, lab_id).get("moss") or {}
    return SubmissionConfig(
        client_id=settings.user_id,
        language=moss.get("language", settings.language),
        max_matches=moss.get("max-matches", 10),
        show_count=moss.get("show", 250),
        directory_mode=bool(moss.get("directory", False)),
        experimental=bool(moss.get("experimental", False)),
        comment=moss.get("comment", ""),
        endpoint=settings.endpoint,
    )
