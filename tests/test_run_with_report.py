import json
import logging
import sys
from types import SimpleNamespace

import pytest

from docbuilder.config.settings import Settings
from docbuilder.main import runWithReport


def make_ctx(tmp_path, run_id: str = "run-x"):
    settings = Settings(log_dir=str(tmp_path / "logs"), report_dir=str(tmp_path / "reports"))
    return SimpleNamespace(obj={"runId": run_id, "settings": settings, "sources": []})


def read_report(tmp_path, run_id: str = "run-x") -> dict:
    return json.loads((tmp_path / "reports" / f"report_build_{run_id}.json").read_text(encoding="utf-8"))


def test_runner_exception_marks_report_failed_and_propagates(tmp_path):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text("id\n1\n", encoding="utf-8")

    def runner(logger, report):
        report.summary.rows_total = 1
        raise RuntimeError("sink exploded")

    with pytest.raises(RuntimeError, match="sink exploded"):
        runWithReport(make_ctx(tmp_path), "build", str(csv_path), runner)

    report = read_report(tmp_path)
    assert report["status"] == "FAILED"
    assert report["meta"]["finished_at"] is not None
    log_text = (tmp_path / "logs" / "build_run-x.log").read_text(encoding="utf-8")
    assert "Command failed" in log_text
    assert "sink exploded" in log_text


def test_stderr_is_copied_to_command_log(tmp_path, capsys):
    csv_path = tmp_path / "in.csv"
    csv_path.write_text("id\n1\n", encoding="utf-8")

    def runner(logger, report):
        sys.stderr.write("first line\nsecond ")
        sys.stderr.write("line")
        return None

    runWithReport(make_ctx(tmp_path), "build", str(csv_path), runner, outputPath="docs.jsonl")

    assert "first line\nsecond line" in capsys.readouterr().err
    log_text = (tmp_path / "logs" / "build_run-x.log").read_text(encoding="utf-8")
    assert "comp=stderr msg=first line" in log_text
    assert "comp=stderr msg=second line" in log_text
    report = read_report(tmp_path)
    assert report["status"] == "SUCCESS"
    assert report["meta"]["output_path"] == "docs.jsonl"
    assert logging.getLogger("docbuilder.build.run-x").handlers == []
