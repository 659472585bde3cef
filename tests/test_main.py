from __future__ import annotations

import io
import os
import subprocess
import sys
from pathlib import Path

import json5

from jiragantt import __version__
from jiragantt.log import CaptureLog, ConsoleLog
from jiragantt.main import JiraToGanttTool
from tests.utils import EXAMPLE_ROWS, issue_row, issues_csv, write_issues

ROOT = Path(__file__).resolve().parents[1]

EXPECTED_ITEMS = [
    {"title": "KEY-1", "startDate": "2023-01-01", "duration": 1, "resource": 0, "open": True},
    {"title": "KEY-3", "duration": 2, "resource": 0, "open": True},
    {"title": "KEY-2", "startDate": "2023-01-02", "resource": 1, "open": False},
]


def run_tool(args, stdin: bytes = b""):
    log = CaptureLog()
    stdout = io.StringIO()
    status = JiraToGanttTool(log, stdin=io.BytesIO(stdin), stdout=stdout).run(args)
    return status, log, stdout.getvalue()


def test_converts_file_to_file(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    output_path = tmp_path / "chart.json5"

    status, log, _ = run_tool([str(input_path), str(output_path)])

    assert status == 0
    assert log.errors == []
    data = json5.loads(output_path.read_text(encoding="utf-8"))
    assert data == {"title": "", "resources": ["Alice", "Bob"], "items": EXPECTED_ITEMS}


def test_reads_stdin_and_writes_stdout() -> None:
    status, log, out = run_tool([], stdin=issues_csv(EXAMPLE_ROWS).encode("utf-8"))

    assert status == 0
    assert json5.loads(out)["items"] == EXPECTED_ITEMS


def test_dash_means_standard_streams() -> None:
    status, _, out = run_tool(["-", "-"], stdin=issues_csv(EXAMPLE_ROWS).encode("utf-8"))

    assert status == 0
    assert json5.loads(out)["resources"] == ["Alice", "Bob"]


def test_invalid_utf8_is_replaced() -> None:
    text = issues_csv([issue_row("KEY-1", assignee="Zo\u00eb")]).encode("latin-1")

    status, _, out = run_tool([], stdin=text)

    assert status == 0
    assert json5.loads(out)["resources"] == ["Zo\ufffd"]


def test_colored_resources_and_html_legend(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS + [issue_row("KEY-4", assignee="")])
    output_path = tmp_path / "chart.json5"
    legend_path = tmp_path / "legend.html"

    status, log, _ = run_tool(
        [str(input_path), str(output_path), "--colored-resources", "-r", str(legend_path)]
    )

    assert status == 0, log.errors
    data = json5.loads(output_path.read_text(encoding="utf-8"))
    assert data["resources"] == [
        {"title": "Alice", "color": "#E57373"},
        {"title": "Bob", "color": "#81C784"},
        {"title": "unassigned", "color": "#64B5F6"},
    ]
    legend = legend_path.read_text(encoding="utf-8")
    assert "unassigned" in legend
    assert "#64B5F6" in legend


def test_plain_resources_with_svg_legend(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    legend_path = tmp_path / "legend.svg"

    status, _, out = run_tool([str(input_path), "--resource-file", str(legend_path)])

    assert status == 0
    assert json5.loads(out)["resources"] == ["Alice", "Bob"]
    assert 'fill="#E57373"' in legend_path.read_text(encoding="utf-8")


def test_profile_flags(tmp_path: Path) -> None:
    rows = [issue_row("KEY-1", status="Closed", assignee="", created="01/05/2023 17:30")]
    input_path = write_issues(tmp_path / "issues.csv", rows)

    status, _, out = run_tool([str(input_path), "--numeric-dates", "--keep-empty-assignee", "--no-open-flag"])

    assert status == 0
    data = json5.loads(out)
    assert data["resources"] == [""]
    assert data["items"] == [{"title": "KEY-1", "startDate": "2023-01-05", "resource": 0}]


def test_missing_input_file(tmp_path: Path) -> None:
    missing = tmp_path / "nope.csv"

    status, log, out = run_tool([str(missing)])

    assert status == 1
    assert out == ""
    assert str(missing) in log.errors[0]


def test_bad_row_writes_no_output(tmp_path: Path) -> None:
    rows = EXAMPLE_ROWS + [issue_row("KEY-9", created="yesterday")]
    input_path = write_issues(tmp_path / "issues.csv", rows)
    output_path = tmp_path / "chart.json5"
    legend_path = tmp_path / "legend.html"

    status, log, _ = run_tool([str(input_path), str(output_path), "-r", str(legend_path)])

    assert status == 1
    assert "yesterday" in log.errors[0]
    assert not output_path.exists()
    assert not legend_path.exists()


def test_unwritable_output(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    output_path = tmp_path / "missing" / "chart.json5"

    status, log, _ = run_tool([str(input_path), str(output_path)])

    assert status == 1
    assert str(output_path) in log.errors[0]


def test_bad_arguments_are_a_failure() -> None:
    status, log, out = run_tool(["a.csv", "b.json5", "extra"])

    assert status == 2
    assert out == ""
    assert log.errors[0].startswith("usage: jira-to-gantt")


def test_unknown_option_is_a_failure() -> None:
    status, log, _ = run_tool(["--frobnicate"])

    assert status == 2
    assert "--frobnicate" in log.errors[0]


def test_help_and_version() -> None:
    status, log, _ = run_tool(["--help"])
    assert status == 0
    assert "INPUT_FILE" in log.outputs[0]

    status, log, _ = run_tool(["-V"])
    assert status == 0
    assert log.outputs == [f"jira-to-gantt {__version__}"]


def test_console_log_streams() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()
    log = ConsoleLog(color=False, stdout=stdout, stderr=stderr)

    log.output("done [ok]")
    log.warning("odd status")
    log.error("bad row")

    assert stdout.getvalue() == "done [ok]\n"
    assert stderr.getvalue() == "warning: odd status\nerror: bad row\n"


def test_command_line_subprocess(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    env = dict(os.environ, PYTHONPATH=str(ROOT))

    result = subprocess.run(
        [sys.executable, "-m", "jiragantt", str(input_path)],
        capture_output=True,
        env=env,
        check=True,
    )

    assert json5.loads(result.stdout.decode("utf-8"))["items"] == EXPECTED_ITEMS


def test_command_line_failure_status(tmp_path: Path) -> None:
    env = dict(os.environ, PYTHONPATH=str(ROOT))

    result = subprocess.run(
        [sys.executable, "-m", "jiragantt", str(tmp_path / "nope.csv")],
        capture_output=True,
        env=env,
    )

    assert result.returncode == 1
    assert b"error: Unable to open file" in result.stderr
    assert result.stdout == b""


def test_long_summary_column(tmp_path: Path) -> None:
    rows = [issue_row("KEY-1", "Open", "Alice", 3600, summary="x" * 200000)] + EXAMPLE_ROWS[1:]
    input_path = write_issues(tmp_path / "issues.csv", rows)

    status, log, out = run_tool([str(input_path)])

    assert status == 0, log.errors
    assert json5.loads(out)["items"] == EXPECTED_ITEMS


def test_bad_legend_path_writes_no_document(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    output_path = tmp_path / "chart.json5"
    legend_path = tmp_path / "missing" / "legend.html"

    status, log, out = run_tool([str(input_path), str(output_path), "-r", str(legend_path)])

    assert status == 1
    assert str(legend_path) in log.errors[0]
    assert not output_path.exists()
    assert sorted(os.listdir(tmp_path)) == ["issues.csv"]


def test_bad_legend_path_writes_nothing_to_stdout(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    legend_path = tmp_path / "missing" / "legend.html"

    status, _, out = run_tool([str(input_path), "-r", str(legend_path)])

    assert status == 1
    assert out == ""


def test_option_between_file_arguments(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)
    output_path = tmp_path / "chart.json5"
    legend_path = tmp_path / "legend.html"

    status, log, out = run_tool([str(input_path), "-r", str(legend_path), str(output_path)])

    assert status == 0, log.errors
    assert out == ""
    assert json5.loads(output_path.read_text(encoding="utf-8"))["items"] == EXPECTED_ITEMS
    assert "Alice" in legend_path.read_text(encoding="utf-8")


def test_colored_resources_without_legend(tmp_path: Path) -> None:
    input_path = write_issues(tmp_path / "issues.csv", EXAMPLE_ROWS)

    status, _, out = run_tool([str(input_path), "--colored-resources"])

    assert status == 0
    assert json5.loads(out)["resources"] == [
        {"title": "Alice", "color": "#E57373"},
        {"title": "Bob", "color": "#81C784"},
    ]
