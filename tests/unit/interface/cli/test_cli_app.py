from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

Drives `main()` in-process with a recording rich Console so that output
and exit codes can be asserted without spawning a subprocess.
"""

import io
import json
from pathlib import Path
from typing import List, Tuple
from unittest.mock import patch

import pytest
from rich.console import Console

from dirsize.domain.config import load_config
from dirsize.infra.logging import shutdown_logging
from dirsize.interface.cli.app import main


@pytest.fixture(autouse=True)
def reset_logging():
    """Detach the handlers each run installs so streams do not leak across tests."""
    yield
    shutdown_logging()


def run_main(args: List[str]) -> Tuple[int, str]:
    """Run the controller with defaults and return (exit code, stdout text)."""
    buf = io.StringIO()
    console = Console(file=buf, width=200, color_system=None)
    code = main(args + ["--use-defaults"], console=console)
    return code, buf.getvalue()


# -----------------------------------------------------------------------------
# Default action and search
# -----------------------------------------------------------------------------

def test_default_action_prints_total_size(sample_dir: Path) -> None:
    code, out = run_main(["-t", str(sample_dir)])

    assert code == 0
    assert out.strip() == "30.00B"


def test_search_prints_every_match(nested_dir: Path) -> None:
    code, out = run_main(["-t", str(nested_dir), "-s", "main.py"])

    assert code == 0
    lines = out.strip().splitlines()
    assert len(lines) == 2
    assert any(line.endswith("has size 100.00B") for line in lines)
    assert any(line.endswith("has size 50.00B") for line in lines)


def test_search_respects_kind_filter(nested_dir: Path) -> None:
    code, out = run_main(["-t", str(nested_dir), "-s", "readme.md", "-k", "directory"])

    assert code == 0
    lines = out.strip().splitlines()
    assert len(lines) == 1
    assert "docs" in lines[0]
    assert lines[0].endswith("has size 0.00B")


def test_search_without_match_reports_it(sample_dir: Path) -> None:
    code, out = run_main(["-t", str(sample_dir), "-s", "missing.txt"])

    assert code == 0
    assert "No entry named 'missing.txt' found" in out


# -----------------------------------------------------------------------------
# Listing and snapshots
# -----------------------------------------------------------------------------

def test_top_lists_children_in_size_order(sample_dir: Path) -> None:
    code, out = run_main(["-t", str(sample_dir), "--top", "5", "--sort", "size"])

    assert code == 0
    assert "sub" in out and "a.txt" in out
    assert out.index("sub") < out.index("a.txt")
    assert "20.00B" in out and "10.00B" in out


def test_top_zero_lists_nothing(sample_dir: Path) -> None:
    code, out = run_main(["-t", str(sample_dir), "--top", "0"])

    assert code == 0
    assert "a.txt" not in out


def test_encode_then_load_reproduces_total(sample_dir: Path, tmp_path: Path) -> None:
    snapshot = tmp_path / "tree.dsz"

    code, out = run_main(["-t", str(sample_dir), "-e", str(snapshot)])
    assert code == 0
    assert snapshot.is_file()
    assert "Snapshot saved" in out

    code, out = run_main(["-l", str(snapshot)])
    assert code == 0
    assert out.strip() == "30.00B"


def test_loading_corrupt_snapshot_fails(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bad = tmp_path / "bad.dsz"
    bad.write_bytes(b"not a snapshot")

    code, _ = run_main(["-l", str(bad)])

    assert code == 1
    assert "ERROR" in capsys.readouterr().err


# -----------------------------------------------------------------------------
# Failure paths and diagnostics
# -----------------------------------------------------------------------------

def test_missing_target_is_a_critical_failure(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code, _ = run_main(["-t", str(tmp_path / "nope")])

    assert code == 1
    assert "ERROR" in capsys.readouterr().err


def test_no_source_returns_invalid_input(capsys: pytest.CaptureFixture[str]) -> None:
    code, _ = run_main([])

    assert code == 2
    assert "required" in capsys.readouterr().err


def test_dump_config_prints_effective_settings(sample_dir: Path) -> None:
    code, out = run_main(["-t", str(sample_dir), "--sort", "size", "--dump-config"])

    assert code == 0
    data = json.loads(out)
    assert data["target_path"] == str(sample_dir)
    assert data["sort_key"] == "size"
    assert data["page_size"] == 20


def test_save_config_persists_effective_settings(tmp_path: Path) -> None:
    config_file = tmp_path / "config.json"

    with patch("dirsize.domain.config.CONFIG_FILE", str(config_file)):
        code, out = run_main(["--sort", "size", "--kind", "file", "--save-config"])
        stored = load_config()

    assert code == 0
    assert "Configuration saved." in out
    assert config_file.is_file()
    assert stored["sort_key"] == "size"
    assert stored["search_kind"] == "file"


def test_save_config_still_runs_requested_action(sample_dir: Path, tmp_path: Path) -> None:
    with patch("dirsize.domain.config.CONFIG_FILE", str(tmp_path / "config.json")):
        code, out = run_main(["-t", str(sample_dir), "--save-config"])

    assert code == 0
    assert out.strip().splitlines()[-1] == "30.00B"
