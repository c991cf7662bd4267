"""Pydantic configuration model with YAML loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from contrastmate.models import ScanOptions

_DEFAULT_CONFIG_NAME = "contrastmate.yaml"


class ScanConfig(BaseModel):
    """Default scan options."""

    min_contrast_ratio: float = 4.5
    check_large_text: bool = True
    include_hidden_layers: bool = False
    timeout_ms: float = Field(default=30000, gt=0)

    def to_options(self) -> ScanOptions:
        return ScanOptions(
            min_contrast_ratio=self.min_contrast_ratio,
            check_large_text=self.check_large_text,
            include_hidden_layers=self.include_hidden_layers,
            timeout_ms=self.timeout_ms,
        )


class FontsConfig(BaseModel):
    """Fonts the local document provider can load.

    Entries are ``"Family"`` or ``"Family/Style"``.  Empty means all fonts.
    """

    available: list[str] = Field(default_factory=list)

    def available_or_none(self) -> list[str] | None:
        return self.available or None


class FigmaConfig(BaseModel):
    """Figma REST API settings."""

    api_base: str = "https://api.figma.com"
    token: str = ""
    timeout_seconds: float = 30.0

    def resolved_token(self) -> str:
        return self.token or os.environ.get("FIGMA_TOKEN", "")


class OutputConfig(BaseModel):
    """Report settings."""

    report_format: Literal["json", "markdown"] = "markdown"


class ContrastMateConfig(BaseModel):
    """Top-level configuration for ContrastMate."""

    scan: ScanConfig = Field(default_factory=ScanConfig)
    fonts: FontsConfig = Field(default_factory=FontsConfig)
    figma: FigmaConfig = Field(default_factory=FigmaConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def load(cls, path: Path | None = None) -> ContrastMateConfig:
        """Load config from a YAML file.

        Search order when *path* is None:
          1. ./contrastmate.yaml
          2. ~/.config/contrastmate/contrastmate.yaml

        Returns default config if no file is found.
        """
        if path is not None:
            return cls._from_yaml(path)

        candidates = [
            Path.cwd() / _DEFAULT_CONFIG_NAME,
            Path.home() / ".config" / "contrastmate" / _DEFAULT_CONFIG_NAME,
        ]
        for candidate in candidates:
            if candidate.is_file():
                return cls._from_yaml(candidate)

        return cls()

    @classmethod
    def _from_yaml(cls, path: Path) -> ContrastMateConfig:
        raw: dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.model_validate(raw)
