import json
import sys
from pathlib import Path

import pytest

from opie.cli import main, parse_args, run_command
from opie.common.constants import EXIT_FAILURE, EXIT_HARD_FAIL, EXIT_SUCCESS

OPERATIONS_MODULE = '''from opie.operation.base import Operation


class Slugify(Operation):
    steps = ("strip", "lower")

    def strip(self, text):
        return text.strip()

    def lower(self, text):
        return text.lower()


class Publish(Operation):
    steps = ("validate", Slugify, "publish")

    def validate(self, payload, context):
        if payload.get("title") is None:
            self.fail("invalid", {"title": "is required"})
        if context["author"] in context.get("banned", []):
            self.fail("forbidden", context["author"])
        return payload["title"]

    def publish(self, slug, context):
        return {"slug": slug, "author": context["author"]}
'''


@pytest.fixture
def ops_module(tmp_path: Path, monkeypatch):
    (tmp_path / "smoke_ops.py").write_text(OPERATIONS_MODULE, encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "smoke_ops", raising=False)
    return tmp_path


def _write_run_file(path: Path, title: str | None = "  Hello World ") -> Path:
    title_line = f'  title: "{title}"\n' if title is not None else "  body: text\n"
    path.write_text(
        'operation: "smoke_ops:Publish"\n'
        "input:\n"
        f"{title_line}"
        "context:\n"
        "  author: ada\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    return path


@pytest.mark.integration
def test_cli_run_writes_success_summary(ops_module: Path):
    run_file = _write_run_file(ops_module / "run.yml")
    summary_path = ops_module / "out" / "summary.json"
    log_path = ops_module / "out" / "run.log.jsonl"
    args = parse_args(
        [
            "run",
            str(run_file),
            "--run-id",
            "run-test",
            "--summary-path",
            str(summary_path),
            "--log-path",
            str(log_path),
        ]
    )

    exit_code = run_command(args)

    assert exit_code == EXIT_SUCCESS
    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert summary == {
        "run_id": "run-test",
        "operation": "Publish",
        "status": "success",
        "output": {"slug": "hello world", "author": "ada"},
        "failure": None,
    }
    events = [json.loads(line)["event"] for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert events[0] == "RUN_START"
    assert events[-1] == "RUN_END"
    assert "STEP_START" in events


@pytest.mark.integration
def test_cli_run_reports_declared_failure(ops_module: Path):
    run_file = _write_run_file(ops_module / "run.yml", title=None)
    summary_path = ops_module / "summary.json"

    exit_code = main(["run", str(run_file), "--summary-path", str(summary_path)])

    assert exit_code == EXIT_FAILURE
    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert summary["status"] == "failure"
    assert summary["output"] is None
    assert summary["failure"] == {"type": "invalid", "data": {"title": "is required"}}


@pytest.mark.integration
def test_cli_overlay_and_input_json(ops_module: Path):
    run_file = _write_run_file(ops_module / "run.yml")
    overlay = ops_module / "banned.yml"
    overlay.write_text("context:\n  banned: [ada]\n", encoding="utf-8")
    summary_path = ops_module / "summary.json"

    exit_code = main(
        [
            "run",
            str(run_file),
            "--overlay",
            str(overlay),
            "--input-json",
            '{"title": "Other"}',
            "--summary-path",
            str(summary_path),
        ]
    )

    assert exit_code == EXIT_FAILURE
    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert summary["failure"] == {"type": "forbidden", "data": "ada"}


@pytest.mark.integration
def test_cli_hard_fails_on_unloadable_operation(tmp_path: Path):
    run_file = tmp_path / "run.yml"
    run_file.write_text('operation: "missing_module_abc:Nope"\n', encoding="utf-8")

    assert main(["run", str(run_file)]) == EXIT_HARD_FAIL


@pytest.mark.integration
def test_cli_hard_fails_on_bad_input_json(ops_module: Path):
    run_file = _write_run_file(ops_module / "run.yml")

    assert main(["run", str(run_file), "--input-json", "{not json"]) == EXIT_HARD_FAIL
