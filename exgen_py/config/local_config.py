"""Local workflow session management (.exgen_py.local)."""

import json
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field

from ..client.models import Draft, GenerationRequest


CONFIG_NAME = ".exgen_py.local"


@dataclass
class LocalConfig:
    """
    Saved generation session for the current project directory.
    Stored at .exgen_py.local so CLI commands can continue a preview.
    """

    step: int = 0
    active_index: int = 0
    request: GenerationRequest = field(default_factory=GenerationRequest)
    drafts: List[Draft] = field(default_factory=list)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> Optional["LocalConfig"]:
        """
        Load the session from file.
        If path is not specified, searches upward from current directory.
        """
        if path is None:
            path = cls.find_config()

        if path is None or not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(
                step=data.get("step", 0),
                active_index=data.get("active_index", 0),
                request=GenerationRequest.from_payload(data.get("request") or {}),
                drafts=[Draft.from_payload(d) for d in data.get("drafts") or []],
            )
        except (json.JSONDecodeError, IOError, TypeError, AttributeError):
            return None

    def save(self, path: Optional[Path] = None) -> Path:
        """Save the session to file and return the path written."""
        if path is None:
            path = self.find_config() or Path.cwd() / CONFIG_NAME

        data = {
            "step": self.step,
            "active_index": self.active_index,
            "request": self.request.to_payload(),
            "drafts": [d.to_payload() for d in self.drafts],
        }
        # The request payload omits a blank prompt; keep it round-trippable
        if self.request.prompt is not None:
            data["request"]["prompt"] = self.request.prompt

        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        return path

    @staticmethod
    def find_config() -> Optional[Path]:
        """
        Search for .exgen_py.local starting from current directory,
        walking up to root.
        """
        current = Path.cwd()

        while True:
            config_path = current / CONFIG_NAME
            if config_path.exists():
                return config_path

            # Check if we've reached the root
            if current == current.parent:
                return None

            current = current.parent
