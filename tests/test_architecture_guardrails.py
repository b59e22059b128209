from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]


def _line_count(path: Path) -> int:
    return len(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def _python_files(root: Path):
    for path in root.rglob("*.py"):
        if "dist" in path.parts or "build" in path.parts:
            continue
        yield path


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8", errors="ignore"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.module or ""


def test_no_python_module_exceeds_hard_line_limit():
    offenders = []
    for path in _python_files(ROOT):
        lines = _line_count(path)
        if lines > 1200:
            offenders.append((str(path.relative_to(ROOT)), lines))
    assert not offenders, f"Modules exceed hard 1200-line limit: {offenders}"


def test_core_layer_does_not_import_infra_layer():
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / "core"):
        for name in _imported_modules(path):
            if name == "infra" or name.startswith("infra."):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Core layer imports infra layer: {violations}"


def test_scheduling_algorithms_stay_storage_free():
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / "core" / "services" / "scheduling"):
        for name in _imported_modules(path):
            if name.startswith("sqlalchemy") or name.startswith("core.interfaces"):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Scheduling algorithms depend on storage: {violations}"


def test_schedule_service_is_composed_of_mixins():
    service_path = ROOT / "core" / "services" / "schedule" / "service.py"
    text = service_path.read_text(encoding="utf-8", errors="ignore")

    for mixin in (
        "ScheduleStructureMixin",
        "TaskLifecycleMixin",
        "DependencyMixin",
        "BulkScheduleMixin",
        "ScheduleQueryMixin",
        "SchedulePipelineMixin",
        "ScheduleValidationMixin",
    ):
        assert mixin in text
    assert "def add_dependency" not in text
    assert "def update_task" not in text
