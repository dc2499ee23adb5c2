from __future__ import annotations

import logging
from pathlib import Path

import typer
from preflight import (
    DEFAULT_MIN_VERSION,
    DetectionResult,
    PreflightConfig,
    __version__ as core_version,
    build_tools,
)
from preflight.build_tools import detect_build_tools
from preflight.toolchain import (
    RUSTUP_URL,
    ToolchainMissingError,
    ToolchainTooOldError,
    check_toolchain,
)
from pydantic import ValidationError

app = typer.Typer(help="Preflight build environment checks")

BUILD_TOOLS_HINTS = (
    "Warning: Visual Studio C++ Build Tools could not be detected automatically.",
    'If the "Desktop development with C++" workload and the "MSVC v143" component '
    "are installed, you can ignore this warning.",
    'If "npm run tauri dev" fails later, reinstall the build tools or restart the machine.',
)


def _fail(message: str) -> None:
    typer.secho(message, fg=typer.colors.RED, err=True)


def _warn(message: str) -> None:
    typer.secho(message, fg=typer.colors.YELLOW, err=True)


def _report_build_tools(detection: DetectionResult, *, strict: bool) -> None:
    if detection.found:
        typer.echo(f"Found Visual Studio C++ Build Tools via {detection.strategy}: {detection.location}")
        typer.echo("Visual Studio C++ Build Tools check passed.")
        return
    for line in BUILD_TOOLS_HINTS:
        _warn(line)
    if strict:
        _fail("Visual Studio C++ Build Tools are required (--strict-build-tools).")
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log diagnostic details to stderr.",
    ),
) -> None:
    """Verify the toolchain needed to build the desktop app."""

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s %(message)s",
        )


@app.command()
def version() -> None:
    """Print currently installed component versions."""
    typer.echo(f"preflight: {core_version}")


@app.command()
def check(
    min_version: str = typer.Option(
        DEFAULT_MIN_VERSION,
        "--min-version",
        envvar="PREFLIGHT_MIN_RUST_VERSION",
        help="Minimum rustc MAJOR.MINOR version.",
    ),
    strict_build_tools: bool = typer.Option(
        False,
        "--strict-build-tools",
        envvar="PREFLIGHT_STRICT_BUILD_TOOLS",
        help="Fail when Visual Studio C++ Build Tools are not detected (Windows).",
    ),
    install_paths: list[Path] | None = typer.Option(
        None,
        "--install-path",
        help="Extra Visual Studio install directory to look for (repeatable).",
    ),
) -> None:
    """Run the Rust toolchain and build tools checks."""

    config_kwargs: dict[str, object] = {
        "min_version": min_version,
        "strict_build_tools": strict_build_tools,
    }
    if install_paths:
        config_kwargs["install_paths"] = PreflightConfig().install_paths + list(install_paths)
    try:
        config = PreflightConfig(**config_kwargs)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_hint="--min-version") from exc

    typer.echo("Checking build environment...")

    try:
        toolchain = check_toolchain(config)
    except ToolchainMissingError:
        _fail("Rust toolchain not found.")
        typer.echo(f"Install Rust with rustup: {RUSTUP_URL}")
        raise typer.Exit(code=1)
    except ToolchainTooOldError as exc:
        _fail(f"Rust {exc.version} is too old, please upgrade to {exc.minimum}+.")
        typer.echo("Run `rustup update` to upgrade.")
        raise typer.Exit(code=1)

    typer.echo(f"Detected Rust: {toolchain.banner}")
    if not toolchain.gated:
        typer.echo("Could not read the rustc version, skipping the minimum version check.")

    if build_tools.current_platform() == build_tools.TARGET_PLATFORM:
        typer.echo("Checking Visual Studio C++ Build Tools...")
    detection = detect_build_tools(config)
    if detection is not None:
        _report_build_tools(detection, strict=config.strict_build_tools)

    typer.secho("Environment check passed!", fg=typer.colors.GREEN)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
