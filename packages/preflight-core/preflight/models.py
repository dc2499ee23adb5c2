"""Preflight data models and configuration."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProbeStatus = Literal["found", "not-found", "ignored"]

BANNER_PATTERN = re.compile(r"rustc (\d+)\.(\d+)")
VERSION_PATTERN = re.compile(r"^\s*(\d+)\.(\d+)\s*$")

DEFAULT_MIN_VERSION = "1.70"
VC_TOOLS_COMPONENT = "Microsoft.VisualStudio.Component.VC.Tools.x86.x64"
KNOWN_INSTALL_PATHS = [
    r"C:\Program Files (x86)\Microsoft Visual Studio\2022\BuildTools",
    r"C:\Program Files (x86)\Microsoft Visual Studio\2019\BuildTools",
    r"C:\Program Files (x86)\Microsoft Visual Studio\2017\BuildTools",
    r"C:\Program Files\Microsoft Visual Studio\2022\Community",
    r"C:\Program Files\Microsoft Visual Studio\2022\Enterprise",
    r"C:\Program Files\Microsoft Visual Studio\2022\Professional",
]


def _default_install_paths() -> list[Path]:
    return [Path(path) for path in KNOWN_INSTALL_PATHS]


class ToolchainVersion(BaseModel):
    """Major/minor pair reported by ``rustc --version``."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)

    @classmethod
    def parse(cls, banner: str) -> ToolchainVersion | None:
        """Extract the version from a banner like ``rustc 1.70.0 (90c541806 2023-05-31)``."""

        match = BANNER_PATTERN.search(banner)
        if match is None:
            return None
        return cls(major=int(match.group(1)), minor=int(match.group(2)))

    def meets(self, minimum: ToolchainVersion) -> bool:
        return (self.major, self.minor) >= (minimum.major, minimum.minor)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


class ToolchainCheck(BaseModel):
    """Outcome of a toolchain check that did not fail."""

    banner: str
    version: ToolchainVersion | None = None

    @property
    def gated(self) -> bool:
        return self.version is not None


class ProbeResult(BaseModel):
    strategy: str
    status: ProbeStatus
    location: str | None = None

    @property
    def found(self) -> bool:
        return self.status == "found"


class DetectionResult(BaseModel):
    """Build-tools detection outcome across all attempted strategies."""

    found: bool
    strategy: str | None = None
    location: str | None = None
    attempts: list[ProbeResult] = Field(default_factory=list)


class PreflightConfig(BaseModel):
    """Runtime configuration for a preflight run."""

    min_version: ToolchainVersion = Field(
        default_factory=lambda: ToolchainVersion(major=1, minor=70),
    )
    strict_build_tools: bool = False
    vc_component: str = VC_TOOLS_COMPONENT
    install_paths: list[Path] = Field(default_factory=_default_install_paths)

    @field_validator("min_version", mode="before")
    @classmethod
    def _parse_min_version(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        match = VERSION_PATTERN.match(value)
        if match is None:
            msg = f"min_version must look like MAJOR.MINOR, got {value!r}"
            raise ValueError(msg)
        return {"major": int(match.group(1)), "minor": int(match.group(2))}

    @field_validator("vc_component")
    @classmethod
    def _require_component(cls, value: str) -> str:
        if not value.strip():
            msg = "vc_component must not be empty"
            raise ValueError(msg)
        return value.strip()
