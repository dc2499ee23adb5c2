"""Rust compiler presence and minimum version check."""
from __future__ import annotations

import logging
import subprocess

from . import process
from .models import PreflightConfig, ToolchainCheck, ToolchainVersion

LOGGER = logging.getLogger(__name__)

RUSTC_VERSION_COMMAND = ("rustc", "--version")
RUSTUP_URL = "https://sh.rustup.rs"


class ToolchainError(RuntimeError):
    """Raised when the Rust toolchain is unusable."""


class ToolchainMissingError(ToolchainError):
    """Raised when ``rustc --version`` cannot be executed."""


class ToolchainTooOldError(ToolchainError):
    """Raised when the installed compiler is below the configured minimum."""

    def __init__(self, version: ToolchainVersion, minimum: ToolchainVersion) -> None:
        super().__init__(f"rustc {version} is older than the required {minimum}")
        self.version = version
        self.minimum = minimum


def query_version() -> str:
    """Return the stripped ``rustc --version`` banner."""

    try:
        return process.run_command(RUSTC_VERSION_COMMAND).strip()
    except (OSError, subprocess.CalledProcessError) as exc:
        msg = "rustc --version could not be executed"
        raise ToolchainMissingError(msg) from exc


def check_toolchain(config: PreflightConfig) -> ToolchainCheck:
    """Verify rustc is installed and at least ``config.min_version``.

    A banner that does not look like ``rustc X.Y`` skips the version gate
    instead of failing.
    """

    banner = query_version()
    version = ToolchainVersion.parse(banner)
    if version is None:
        LOGGER.info("rustc-version-unparsed", extra={"component": "toolchain", "banner": banner})
        return ToolchainCheck(banner=banner)
    if not version.meets(config.min_version):
        raise ToolchainTooOldError(version, config.min_version)
    LOGGER.debug("rustc-version-ok", extra={"component": "toolchain", "version": str(version)})
    return ToolchainCheck(banner=banner, version=version)
