"""Persist and load active/candidate scoring configurations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dynasty.config import default_app_config
from dynasty.errors import ValidationError
from dynasty.models import AppConfig


@dataclass
class ConfigBundle:
    active: AppConfig
    candidate: Optional[AppConfig] = None

    def __post_init__(self) -> None:
        if self.active.status != "active":
            raise ValidationError("active", f"expected status 'active', got {self.active.status!r}")
        if self.candidate is not None and self.candidate.status != "candidate":
            raise ValidationError("candidate", f"expected status 'candidate', got {self.candidate.status!r}")

    @classmethod
    def default(cls) -> "ConfigBundle":
        return cls(active=default_app_config())

    @classmethod
    def load(cls, path: Path) -> "ConfigBundle":
        data = json.loads(path.read_text(encoding="utf-8"))
        candidate = data.get("candidate")
        return cls(
            active=AppConfig.model_validate(data["active"]),
            candidate=AppConfig.model_validate(candidate) if candidate else None,
        )

    def save(self, path: Path) -> None:
        payload = {
            "active": self.active.model_dump(mode="json"),
            "candidate": self.candidate.model_dump(mode="json") if self.candidate else None,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
