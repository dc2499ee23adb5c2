"""Visual Studio C++ Build Tools detection (Windows only)."""
from __future__ import annotations

import logging
import os
import subprocess
import sys
from collections.abc import Callable, Mapping
from pathlib import Path

from . import process
from .models import DetectionResult, PreflightConfig, ProbeResult

LOGGER = logging.getLogger(__name__)

TARGET_PLATFORM = "win32"

STRATEGY_VSWHERE = "vswhere"
STRATEGY_INSTALL_PATH = "install-path"
STRATEGY_CL_ON_PATH = "cl-on-path"

PROGRAM_FILES_VARS = ("ProgramFiles(x86)", "ProgramFiles")
VSWHERE_SUBPATH = ("Microsoft Visual Studio", "Installer", "vswhere.exe")
CL_COMMAND = ("cl",)

Probe = Callable[[PreflightConfig, Mapping[str, str]], ProbeResult]


def current_platform() -> str:
    return sys.platform


def locate_vswhere(environ: Mapping[str, str]) -> Path | None:
    """Return the expected vswhere.exe path, or None without a Program Files dir."""

    for name in PROGRAM_FILES_VARS:
        base = environ.get(name)
        if base:
            return Path(base, *VSWHERE_SUBPATH)
    return None


def probe_vswhere(config: PreflightConfig, environ: Mapping[str, str]) -> ProbeResult:
    vswhere = locate_vswhere(environ)
    if vswhere is None or not vswhere.exists():
        return ProbeResult(strategy=STRATEGY_VSWHERE, status="not-found")

    command = [
        str(vswhere),
        "-latest",
        "-products",
        "*",
        "-requires",
        config.vc_component,
        "-property",
        "installationPath",
    ]
    try:
        output = process.run_command(command).strip()
    except (OSError, subprocess.CalledProcessError) as exc:
        LOGGER.debug("vswhere-failed", exc_info=exc, extra={"component": "build-tools"})
        return ProbeResult(strategy=STRATEGY_VSWHERE, status="ignored")
    if not output:
        return ProbeResult(strategy=STRATEGY_VSWHERE, status="not-found")
    return ProbeResult(strategy=STRATEGY_VSWHERE, status="found", location=output)


def probe_install_paths(config: PreflightConfig, environ: Mapping[str, str]) -> ProbeResult:
    for candidate in config.install_paths:
        if candidate.exists():
            return ProbeResult(
                strategy=STRATEGY_INSTALL_PATH,
                status="found",
                location=str(candidate),
            )
    return ProbeResult(strategy=STRATEGY_INSTALL_PATH, status="not-found")


def probe_cl_on_path(config: PreflightConfig, environ: Mapping[str, str]) -> ProbeResult:
    """Look for the MSVC driver on PATH.

    ``cl`` without arguments prints usage and exits non-zero, so only a
    missing executable counts as absence.
    """

    try:
        process.run_command(CL_COMMAND, capture=False)
    except FileNotFoundError:
        return ProbeResult(strategy=STRATEGY_CL_ON_PATH, status="not-found")
    except (OSError, subprocess.CalledProcessError) as exc:
        LOGGER.debug("cl-errored", exc_info=exc, extra={"component": "build-tools"})
    return ProbeResult(strategy=STRATEGY_CL_ON_PATH, status="found", location="PATH")


STRATEGIES: tuple[Probe, ...] = (
    probe_vswhere,
    probe_install_paths,
    probe_cl_on_path,
)


def detect_build_tools(
    config: PreflightConfig,
    *,
    environ: Mapping[str, str] | None = None,
    strategies: tuple[Probe, ...] = STRATEGIES,
) -> DetectionResult | None:
    """Try each strategy in order until one finds the build tools.

    Returns None without probing anything when not running on Windows.
    """

    platform = current_platform()
    if platform != TARGET_PLATFORM:
        LOGGER.info("build-tools-skipped", extra={"component": "build-tools", "platform": platform})
        return None

    env = os.environ if environ is None else environ
    attempts: list[ProbeResult] = []
    for probe in strategies:
        result = probe(config, env)
        attempts.append(result)
        LOGGER.debug(
            "probe-finished",
            extra={"component": "build-tools", "strategy": result.strategy, "status": result.status},
        )
        if result.found:
            return DetectionResult(
                found=True,
                strategy=result.strategy,
                location=result.location,
                attempts=attempts,
            )
    return DetectionResult(found=False, attempts=attempts)
