"""Core checks for the Preflight build environment verifier."""
from __future__ import annotations

from . import build_tools, toolchain
from .models import (
    DEFAULT_MIN_VERSION,
    DetectionResult,
    PreflightConfig,
    ProbeResult,
    ToolchainCheck,
    ToolchainVersion,
)

__all__ = [
    "__version__",
    "DEFAULT_MIN_VERSION",
    "DetectionResult",
    "PreflightConfig",
    "ProbeResult",
    "ToolchainCheck",
    "ToolchainVersion",
    "build_tools",
    "toolchain",
]

__version__ = "0.1.0"
