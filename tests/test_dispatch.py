from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from compare.dispatch import (
    OUTPUT_FILES_LABEL,
    ComparerRegistry,
    OutputFile,
    compare_file,
    compare_output_files,
    default_registry,
)
from extract.query import ExtractionError
from report.models import DiffNode
from runner.generator import GeneratorResult

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(scope="module")
def registry() -> ComparerRegistry:
    return default_registry()


def _child(node: DiffNode, label: str) -> DiffNode:
    assert node.children is not None
    matches = [child for child in node.children if child.label == label]
    assert len(matches) == 1, f"{label!r} not found under {node.label!r}"
    return matches[0]


def _kinds_and_labels(node: DiffNode) -> list[tuple[str, str]]:
    return [(child.kind, child.label) for child in node.children or ()]


def _result(path: Path, *files: str) -> GeneratorResult:
    return GeneratorResult(output_path=path, output_files=files)


def test_registry_covers_typescript_and_python(registry: ComparerRegistry) -> None:
    assert registry.extensions == ["py", "pyi", "ts", "tsx"]
    assert registry.lookup("json") is None


def test_typescript_fixture_diff(registry: ComparerRegistry) -> None:
    result = compare_file(
        OutputFile("index.ts", FIXTURES / "typescript" / "base"),
        OutputFile("index.ts", FIXTURES / "typescript" / "next"),
        registry,
    )

    assert result is not None
    assert result.kind == "changed"
    assert result.label == "index.ts"

    classes = _child(result, "Classes")
    assert _kinds_and_labels(classes) == [
        ("removed", "BaseClass"),
        ("changed", "SomeClass"),
        ("added", "DifferentBaseClass"),
        ("changed", "ExportedClass"),
    ]

    some_class = _child(classes, "SomeClass")
    methods = _child(some_class, "Methods")
    assert _kinds_and_labels(methods) == [
        ("removed", "removedMethod"),
        ("changed", "changedParamType"),
        ("changed", "changedReturnType"),
        ("changed", "reorderedParams"),
    ]
    order = _child(_child(_child(methods, "reorderedParams"), "Parameters"), "Order Changed")
    assert _kinds_and_labels(order) == [
        ("removed", "firstParam, secondParam"),
        ("added", "secondParam, firstParam"),
    ]
    return_type = _child(_child(methods, "changedReturnType"), "Return Type")
    assert _kinds_and_labels(return_type) == [("removed", "string"), ("added", "number")]

    fields = _child(some_class, "Fields")
    assert _kinds_and_labels(fields) == [
        ("removed", "removedField"),
        ("removed", "readOnlyChangedField"),
        ("changed", "visibilityChangedField"),
        ("added", "readOnlyRemovedField"),
    ]

    exported = _child(classes, "ExportedClass")
    assert _kinds_and_labels(_child(exported, "Base Class")) == [
        ("removed", "BaseClass"),
        ("added", "DifferentBaseClass"),
    ]
    assert _kinds_and_labels(_child(exported, "Interfaces")) == [
        ("removed", "AnotherInterface, SomeInterface"),
        ("added", "SomeInterface"),
    ]

    assert _kinds_and_labels(_child(result, "Interfaces")) == [
        ("removed", "AnotherInterface")
    ]
    assert _kinds_and_labels(_child(result, "Type Aliases")) == [("removed", "SomeUnion")]
    assert _kinds_and_labels(_child(result, "Variables")) == [("removed", "SomeConst")]


def test_python_fixture_diff(registry: ComparerRegistry) -> None:
    result = compare_file(
        OutputFile("models.py", FIXTURES / "python" / "old"),
        OutputFile("models.py", FIXTURES / "python" / "new"),
        registry,
    )

    assert result is not None
    assert [child.label for child in result.children or ()] == ["Classes", "Variables"]

    methods = _child(_child(_child(result, "Classes"), "Widget"), "Methods")
    assert _kinds_and_labels(methods) == [("changed", "__init__"), ("changed", "label")]
    parameters = _child(_child(methods, "__init__"), "Parameters")
    assert _kinds_and_labels(parameters) == [
        ("changed", "Order Changed"),
        ("changed", "name"),
    ]
    assert _kinds_and_labels(_child(_child(parameters, "name"), "Optional")) == [
        ("removed", "false"),
        ("added", "true"),
    ]
    assert _kinds_and_labels(_child(_child(methods, "label"), "Return Type")) == [
        ("removed", "unspecified"),
        ("added", "str"),
    ]

    timeout = _child(_child(_child(result, "Variables"), "DEFAULT_TIMEOUT"), "Value")
    assert _kinds_and_labels(timeout) == [("removed", "30"), ("added", "60")]


def test_whitespace_and_comment_changes_compare_equal(
    registry: ComparerRegistry, tmp_path: Path
) -> None:
    old_dir = tmp_path / "old"
    new_dir = tmp_path / "new"
    old_dir.mkdir()
    new_dir.mkdir()
    (old_dir / "api.ts").write_text(
        "export class Api {\n  get(id: string): Item { return load(id); }\n}\n",
        encoding="utf-8",
    )
    (new_dir / "api.ts").write_text(
        "// regenerated\nexport class Api {\n\n  get(id:string):Item {\n"
        "    // fetch\n    return load(id);\n  }\n}\n",
        encoding="utf-8",
    )

    assert compare_file(OutputFile("api.ts", old_dir), OutputFile("api.ts", new_dir), registry) is None


def test_unregistered_extensions_are_skipped(registry: ComparerRegistry, tmp_path: Path) -> None:
    (tmp_path / "old").mkdir()
    (tmp_path / "new").mkdir()
    (tmp_path / "old" / "package.json").write_text('{"a": 1}', encoding="utf-8")
    (tmp_path / "new" / "package.json").write_text('{"a": 2}', encoding="utf-8")

    result = compare_output_files(
        _result(tmp_path / "old", "package.json"),
        _result(tmp_path / "new", "package.json"),
        registry,
    )

    assert result is None


def test_output_file_set_changes(registry: ComparerRegistry, tmp_path: Path) -> None:
    old_dir = tmp_path / "old"
    new_dir = tmp_path / "new"
    shutil.copytree(FIXTURES / "typescript" / "base", old_dir)
    shutil.copytree(FIXTURES / "typescript" / "base", new_dir)
    (old_dir / "legacy.ts").write_text("export const a = 1;\n", encoding="utf-8")
    (new_dir / "models").mkdir()
    (new_dir / "models" / "item.ts").write_text("export interface Item {}\n", encoding="utf-8")

    result = compare_output_files(
        _result(old_dir, "index.ts", "legacy.ts"),
        _result(new_dir, "index.ts", "models/item.ts"),
        registry,
    )

    assert result == DiffNode(
        label=OUTPUT_FILES_LABEL,
        kind="outline",
        children=(
            DiffNode(label="legacy.ts", kind="removed"),
            DiffNode(label="models/item.ts", kind="added"),
        ),
    )


def test_extraction_failure_aborts_the_run(
    registry: ComparerRegistry, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    for side in ("old", "new"):
        (tmp_path / side).mkdir()
        for name in ("a.ts", "b.ts"):
            (tmp_path / side / name).write_text("class A {}\n", encoding="utf-8")

    extractor = registry.lookup("ts").extractor
    original = extractor.extract_root
    seen: list[int] = []

    def _fail_once(root):
        seen.append(1)
        if len(seen) == 1:
            raise ExtractionError("unexpected class shape")
        return original(root)

    monkeypatch.setattr(extractor, "extract_root", _fail_once)

    with pytest.raises(ExtractionError, match="unexpected class shape"):
        compare_output_files(
            _result(tmp_path / "old", "a.ts", "b.ts"),
            _result(tmp_path / "new", "a.ts", "b.ts"),
            registry,
        )
    assert len(seen) == 1
