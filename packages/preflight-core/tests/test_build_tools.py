from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from preflight import PreflightConfig, build_tools, process
from preflight.build_tools import detect_build_tools, locate_vswhere


def _install_commands(
    monkeypatch: pytest.MonkeyPatch,
    outcomes: dict[str, str | BaseException],
) -> list[list[str]]:
    """Fake subprocess.run keyed by executable name; unknown commands are missing."""

    calls: list[list[str]] = []

    def fake_run(args, **kwargs):
        calls.append(list(args))
        name = Path(args[0]).name
        outcome = outcomes.get(name, FileNotFoundError(2, "No such file or directory", name))
        if isinstance(outcome, BaseException):
            raise outcome
        return subprocess.CompletedProcess(args, 0, stdout=outcome, stderr="")

    monkeypatch.setattr(process.subprocess, "run", fake_run)
    return calls


@pytest.fixture
def on_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_tools, "current_platform", lambda: "win32")


def _make_vswhere(base: Path) -> Path:
    vswhere = base.joinpath("Microsoft Visual Studio", "Installer", "vswhere.exe")
    vswhere.parent.mkdir(parents=True)
    vswhere.write_bytes(b"")
    return vswhere


def _config(*paths: Path) -> PreflightConfig:
    return PreflightConfig(install_paths=list(paths))


def test_skipped_entirely_off_windows(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(build_tools, "current_platform", lambda: "linux")
    calls = _install_commands(monkeypatch, {})

    def explode(config, environ):
        raise AssertionError("probe must not run")

    result = detect_build_tools(PreflightConfig(), environ={}, strategies=(explode,))

    assert result is None
    assert calls == []


def test_locate_vswhere_prefers_x86_program_files() -> None:
    environ = {"ProgramFiles(x86)": "/pf86", "ProgramFiles": "/pf"}
    assert locate_vswhere(environ) == Path("/pf86", "Microsoft Visual Studio", "Installer", "vswhere.exe")


def test_locate_vswhere_falls_back_to_program_files() -> None:
    environ = {"ProgramFiles(x86)": "", "ProgramFiles": "/pf"}
    assert locate_vswhere(environ) == Path("/pf", "Microsoft Visual Studio", "Installer", "vswhere.exe")
    assert locate_vswhere({}) is None


def test_vswhere_success_short_circuits(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    vswhere = _make_vswhere(tmp_path)
    existing = tmp_path / "BuildTools"
    existing.mkdir()
    calls = _install_commands(monkeypatch, {"vswhere.exe": "C:\\VS\\2022\\BuildTools\r\n"})

    result = detect_build_tools(_config(existing), environ={"ProgramFiles(x86)": str(tmp_path)})

    assert result is not None
    assert result.found
    assert result.strategy == "vswhere"
    assert result.location == "C:\\VS\\2022\\BuildTools"
    assert len(result.attempts) == 1
    assert calls == [
        [
            str(vswhere),
            "-latest",
            "-products",
            "*",
            "-requires",
            "Microsoft.VisualStudio.Component.VC.Tools.x86.x64",
            "-property",
            "installationPath",
        ]
    ]


def test_vswhere_failure_is_ignored(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    _make_vswhere(tmp_path)
    existing = tmp_path / "Community"
    existing.mkdir()
    _install_commands(
        monkeypatch,
        {"vswhere.exe": subprocess.CalledProcessError(87, ["vswhere.exe"])},
    )

    result = detect_build_tools(_config(existing), environ={"ProgramFiles": str(tmp_path)})

    assert result is not None
    assert [attempt.status for attempt in result.attempts] == ["ignored", "found"]
    assert result.strategy == "install-path"
    assert result.location == str(existing)


def test_vswhere_empty_output_is_not_found(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    _make_vswhere(tmp_path)
    _install_commands(monkeypatch, {"vswhere.exe": "\n"})

    result = detect_build_tools(_config(tmp_path / "missing"), environ={"ProgramFiles": str(tmp_path)})

    assert result is not None
    assert result.attempts[0].status == "not-found"


def test_first_existing_install_path_wins(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    second = tmp_path / "2019" / "BuildTools"
    third = tmp_path / "2022" / "Enterprise"
    second.mkdir(parents=True)
    third.mkdir(parents=True)
    calls = _install_commands(monkeypatch, {})

    result = detect_build_tools(_config(tmp_path / "2022" / "BuildTools", second, third), environ={})

    assert result is not None
    assert result.strategy == "install-path"
    assert result.location == str(second)
    assert calls == []


def test_cl_without_arguments_erroring_counts_as_found(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    calls = _install_commands(monkeypatch, {"cl": subprocess.CalledProcessError(2, ["cl"])})

    result = detect_build_tools(_config(tmp_path / "missing"), environ={})

    assert result is not None
    assert result.found
    assert result.strategy == "cl-on-path"
    assert calls == [["cl"]]


def test_cl_other_os_error_counts_as_found(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    _install_commands(monkeypatch, {"cl": PermissionError(13, "Access is denied", "cl")})

    result = detect_build_tools(_config(tmp_path / "missing"), environ={})

    assert result is not None
    assert result.strategy == "cl-on-path"


def test_nothing_found_reports_every_attempt(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    on_windows: None,
) -> None:
    _install_commands(monkeypatch, {})

    result = detect_build_tools(_config(tmp_path / "missing"), environ={"ProgramFiles(x86)": str(tmp_path)})

    assert result is not None
    assert not result.found
    assert result.strategy is None
    assert [attempt.strategy for attempt in result.attempts] == ["vswhere", "install-path", "cl-on-path"]
    assert all(attempt.status == "not-found" for attempt in result.attempts)
