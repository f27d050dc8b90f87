from __future__ import annotations

import subprocess
import threading
from pathlib import Path

import pytest

from runner.generator import (
    GenerationRequest,
    GeneratorOptions,
    GeneratorProcessError,
    build_command,
    load_existing_output,
    run_generator,
    run_pair,
)

OPTIONS = GeneratorOptions(command=("autorest",), language="typescript", args=("--v3",))


def _output_folder(command: list[str]) -> Path:
    prefix = "--typescript.output-folder="
    for arg in command:
        if arg.startswith(prefix):
            return Path(arg[len(prefix) :])
    raise AssertionError(command)


def _fake_run(files: dict[str, str], returncode: int = 0, stderr: str = ""):
    calls: list[list[str]] = []

    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append(command)
        if returncode == 0:
            out_dir = _output_folder(command)
            for name, content in files.items():
                path = out_dir / name
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
        return subprocess.CompletedProcess(command, returncode, "generated", stderr)

    return _run, calls


def test_build_command_places_generator_args_first(tmp_path: Path) -> None:
    command = build_command(tmp_path / "spec.json", tmp_path / "out", OPTIONS)

    assert command == [
        "autorest",
        "--v3",
        "--typescript",
        f"--typescript.output-folder={tmp_path / 'out'}",
        "--typescript.clear-output-folder",
        str(tmp_path / "spec.json"),
    ]


def test_run_generator_lists_output_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake, calls = _fake_run({"src/models.ts": "export class A {}\n", "index.ts": ""})
    monkeypatch.setattr("runner.generator.subprocess.run", fake)

    result = run_generator(tmp_path / "spec.json", tmp_path / "out", OPTIONS)

    assert len(calls) == 1
    assert result.output_path == tmp_path / "out"
    assert result.output_files == ("index.ts", "src/models.ts")
    assert result.process_output == "generated"


def test_non_zero_exit_raises_with_process_output(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake, _ = _fake_run({}, returncode=3, stderr="spec not found")
    monkeypatch.setattr("runner.generator.subprocess.run", fake)

    with pytest.raises(GeneratorProcessError, match="spec not found") as excinfo:
        run_generator(tmp_path / "spec.json", tmp_path / "out", OPTIONS)

    assert excinfo.value.exit_code == 3
    assert excinfo.value.command[0] == "autorest"


def test_successful_exit_without_output_folder_is_a_process_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _silent(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 0, "", "nothing to do")

    monkeypatch.setattr("runner.generator.subprocess.run", _silent)

    with pytest.raises(GeneratorProcessError, match="no output folder") as excinfo:
        run_generator(tmp_path / "spec.json", tmp_path / "out", OPTIONS)

    assert excinfo.value.exit_code == 0
    assert "nothing to do" in excinfo.value.output


def test_missing_generator_executable_is_a_process_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _missing(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(2, "No such file or directory", command[0])

    monkeypatch.setattr("runner.generator.subprocess.run", _missing)

    with pytest.raises(GeneratorProcessError, match="No such file"):
        run_generator(tmp_path / "spec.json", tmp_path / "out", OPTIONS)


def test_run_pair_waits_for_both_sides_before_failing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    new_finished = threading.Event()

    def _run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        out_dir = _output_folder(command)
        if out_dir.name == "old":
            return subprocess.CompletedProcess(command, 1, "", "old side failed")
        out_dir.mkdir(parents=True)
        (out_dir / "index.ts").write_text("", encoding="utf-8")
        new_finished.set()
        return subprocess.CompletedProcess(command, 0, "", "")

    monkeypatch.setattr("runner.generator.subprocess.run", _run)

    old = GenerationRequest(tmp_path / "spec.json", tmp_path / "old", OPTIONS)
    new = GenerationRequest(tmp_path / "spec.json", tmp_path / "new", OPTIONS)

    with pytest.raises(GeneratorProcessError, match="old side failed"):
        run_pair(old, new)

    assert new_finished.is_set()


def test_run_pair_returns_old_then_new(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    fake, calls = _fake_run({"index.ts": ""})
    monkeypatch.setattr("runner.generator.subprocess.run", fake)

    old_result, new_result = run_pair(
        GenerationRequest(tmp_path / "spec.json", tmp_path / "old", OPTIONS),
        GenerationRequest(tmp_path / "spec.json", tmp_path / "new", OPTIONS),
    )

    assert len(calls) == 2
    assert old_result.output_path == tmp_path / "old"
    assert new_result.output_path == tmp_path / "new"


def test_load_existing_output(tmp_path: Path) -> None:
    (tmp_path / "b.ts").write_text("", encoding="utf-8")
    (tmp_path / "a.ts").write_text("", encoding="utf-8")

    result = load_existing_output(tmp_path)

    assert result.output_files == ("a.ts", "b.ts")
    assert result.process_output == ""
