"""Global configuration management (~/.exgen_py.global)."""

import json
import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass


DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_JUDGE0_URL = "http://localhost:2358"


@dataclass
class GlobalConfig:
    """
    Global configuration storing endpoints and the platform session tokens.
    Stored at ~/.exgen_py.global
    EXGEN_API_URL and EXGEN_JUDGE0_URL override the stored endpoints.
    """

    api_url: str = DEFAULT_API_URL
    judge0_url: str = DEFAULT_JUDGE0_URL
    email: str = ""
    access_token: str = ""
    refresh_token: str = ""

    @staticmethod
    def default_path() -> Path:
        return Path.home() / ".exgen_py.global"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "GlobalConfig":
        """Load global config from file, then apply environment overrides."""
        if path is None:
            path = cls.default_path()

        config = cls()
        if path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                config = cls(
                    api_url=data.get("api_url") or DEFAULT_API_URL,
                    judge0_url=data.get("judge0_url") or DEFAULT_JUDGE0_URL,
                    email=data.get("email", ""),
                    access_token=data.get("access_token", ""),
                    refresh_token=data.get("refresh_token", ""),
                )
            except (json.JSONDecodeError, IOError, AttributeError):
                config = cls()

        config.api_url = os.environ.get("EXGEN_API_URL", config.api_url)
        config.judge0_url = os.environ.get("EXGEN_JUDGE0_URL", config.judge0_url)
        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save global config to file."""
        if path is None:
            path = self.default_path()

        data = {
            "api_url": self.api_url,
            "judge0_url": self.judge0_url,
            "email": self.email,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def has_token(self) -> bool:
        """Check if an access token is stored."""
        return bool(self.access_token)

    def clear_tokens(self) -> None:
        self.access_token = ""
        self.refresh_token = ""
