from __future__ import annotations

import os
from pathlib import Path

import pytest

import relkit.build.dotnet as dotnet_mod
from relkit.build.dotnet import BuildToolError, DotnetBuildTool, find_package
from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError


class Recorder:
    def __init__(self, result: Result[None, ProcessError] | None = None) -> None:
        self.calls: list[list[str]] = []
        self._result: Result[None, ProcessError] = result if result is not None else Ok(None)

    def __call__(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        self.calls.append(cmd)
        return self._result


@pytest.fixture
def recorder(monkeypatch: pytest.MonkeyPatch) -> Recorder:
    rec = Recorder()
    monkeypatch.setattr(dotnet_mod, "run_streaming", rec)
    return rec


def test_restore_test_build_commands(tmp_path: Path, recorder: Recorder) -> None:
    tool = DotnetBuildTool(tmp_path)
    project = tmp_path / "Lib.csproj"
    tests = tmp_path / "Lib.Tests.csproj"

    assert tool.restore(project) == Ok(None)
    assert tool.test(tests) == Ok(None)
    assert tool.build(project, "Release") == Ok(None)

    assert recorder.calls == [
        ["dotnet", "restore", str(project)],
        ["dotnet", "test", str(tests)],
        ["dotnet", "build", str(project), "--configuration", "Release", "--no-restore"],
    ]


def test_pack_finds_versioned_package(tmp_path: Path, recorder: Recorder) -> None:
    out = tmp_path / "artifacts"
    out.mkdir()
    (out / "Lib.1.2.3.nupkg").write_bytes(b"old")
    (out / "Lib.1.2.4-dev.1.snupkg").write_bytes(b"symbols")
    expected = out / "Lib.1.2.4-dev.1.nupkg"
    expected.write_bytes(b"pkg")

    result = DotnetBuildTool(tmp_path).pack(tmp_path / "Lib.csproj", "Release", out, "1.2.4-dev.1")

    assert result == Ok(expected)
    assert recorder.calls[0][:2] == ["dotnet", "pack"]
    assert recorder.calls[0][-2:] == ["--output", str(out)]


def test_pack_without_artifact_is_ok_none(tmp_path: Path, recorder: Recorder) -> None:
    result = DotnetBuildTool(tmp_path).pack(
        tmp_path / "Lib.csproj", "Release", tmp_path / "artifacts", "1.0.0"
    )

    assert result == Ok(None)


def test_publish_passes_api_key_from_env(tmp_path: Path, recorder: Recorder) -> None:
    tool = DotnetBuildTool(tmp_path, api_key_env="FEED_KEY", env={"FEED_KEY": "s3cret"})
    artifact = tmp_path / "Lib.1.0.0.nupkg"

    assert tool.publish(artifact, "https://feed.test/v3/index.json") == Ok(None)
    assert recorder.calls == [
        [
            "dotnet",
            "nuget",
            "push",
            str(artifact),
            "--source",
            "https://feed.test/v3/index.json",
            "--api-key",
            "s3cret",
        ]
    ]


def test_publish_without_key(tmp_path: Path, recorder: Recorder) -> None:
    tool = DotnetBuildTool(tmp_path, api_key_env="FEED_KEY", env={})

    tool.publish(tmp_path / "Lib.1.0.0.nupkg", "https://feed.test")

    assert "--api-key" not in recorder.calls[0]


def test_failure_propagates_exit_code_without_leaking_key(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    failing = Recorder(
        Err(ProcessError(command=("dotnet", "nuget", "push"), returncode=4, stdout="", stderr=""))
    )
    monkeypatch.setattr(dotnet_mod, "run_streaming", failing)
    tool = DotnetBuildTool(tmp_path, api_key_env="FEED_KEY", env={"FEED_KEY": "s3cret"})

    result = tool.publish(tmp_path / "Lib.1.0.0.nupkg", "https://feed.test")

    assert result == Err(
        BuildToolError(step="publish", message="dotnet publish failed (exit 4)", returncode=4)
    )
    assert "s3cret" not in result.error.message


def test_missing_dotnet(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    failing = Recorder(
        Err(
            ProcessError(
                command=("dotnet",), returncode=-1, stdout="", stderr="No such file", launched=False
            )
        )
    )
    monkeypatch.setattr(dotnet_mod, "run_streaming", failing)

    result = DotnetBuildTool(tmp_path).restore(tmp_path / "Lib.csproj")

    assert isinstance(result, Err)
    assert result.error.returncode == -1
    assert "could not be started" in result.error.message


def test_find_package_prefers_newest(tmp_path: Path) -> None:
    older = tmp_path / "Lib.1.0.0.nupkg"
    newer = tmp_path / "Lib.Extras.1.0.0.nupkg"
    older.write_bytes(b"")
    newer.write_bytes(b"")
    os.utime(older, (1_000_000, 1_000_000))
    os.utime(newer, (2_000_000, 2_000_000))

    assert find_package(tmp_path, "1.0.0") == newer
    assert find_package(tmp_path, "1.0.1") is None
    assert find_package(tmp_path / "missing", "1.0.0") is None


def test_killed_build_is_not_reported_as_missing_dotnet(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    killed = Recorder(
        Err(ProcessError(command=("dotnet", "test"), returncode=-9, stdout="", stderr=""))
    )
    monkeypatch.setattr(dotnet_mod, "run_streaming", killed)

    result = DotnetBuildTool(tmp_path).test(tmp_path / "Lib.Tests.csproj")

    assert result == Err(
        BuildToolError(step="test", message="dotnet test was killed by signal 9", returncode=137)
    )
