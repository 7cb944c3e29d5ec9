"""End-to-end tests for the buildscope click commands in degraded mode."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx
import pytest
import structlog
from click.testing import CliRunner

from buildscope.analysis import SpeedEstimator
from buildscope.analysis.fallbacks import fallback_compilation_analysis, fallback_recipe_steps
from buildscope.cli.main import cli


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture()
def files(tmp_path: Path) -> tuple[Path, Path]:
    dockerfile = tmp_path / "Dockerfile"
    dockerfile.write_text("FROM python:3.12-slim\nRUN pip install numpy\n", encoding="utf-8")
    requirements = tmp_path / "requirements.txt"
    requirements.write_text("numpy==1.26.4\n", encoding="utf-8")
    return dockerfile, requirements


def _invoke(*args: str):
    return CliRunner().invoke(cli, ["--log-level", "ERROR", *args])


def test_recipe_prints_fallback_steps(files: tuple[Path, Path]) -> None:
    result = _invoke("recipe", str(files[0]))
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["status"] == "unavailable"
    assert payload["steps"] == fallback_recipe_steps()


def test_manifest_prints_total_size(files: tuple[Path, Path]) -> None:
    result = _invoke("manifest", str(files[1]))
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["totalSize"] == "51.0 MB"
    assert len(payload["items"]) == 5


def test_compile_requires_a_file() -> None:
    result = _invoke("compile", "--cpu", "high")
    assert result.exit_code != 0
    assert "at least one of --recipe or --manifest" in result.output


def test_compile_rejects_unknown_tier(files: tuple[Path, Path]) -> None:
    result = _invoke("compile", "--recipe", str(files[0]), "--cpu", "quantum")
    assert result.exit_code == 2


def test_compile_prints_fallback_analysis(files: tuple[Path, Path]) -> None:
    result = _invoke(
        "compile",
        "--recipe",
        str(files[0]),
        "--manifest",
        str(files[1]),
        "--architecture",
        "multi",
    )
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["analysis"] == fallback_compilation_analysis()


def test_recipe_rejects_binary_file(tmp_path: Path) -> None:
    blob = tmp_path / "Dockerfile"
    blob.write_bytes(b"\xff\xfe\x00FROM")
    result = _invoke("recipe", str(blob))
    assert result.exit_code == 1
    assert "not valid UTF-8" in result.output


def test_speed_test_reports_estimate(monkeypatch: pytest.MonkeyPatch) -> None:
    ticks = iter([10.0, 11.0])
    estimator = SpeedEstimator(
        "https://speed.test/bytes/1048576",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"x")),
        clock=lambda: next(ticks),
    )
    monkeypatch.setattr("buildscope.cli.main.get_speed_estimator", lambda: estimator)
    result = _invoke("speed-test", "--total-size", "51.0 MB")
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "throughputMbps": 8.0,
        "simulated": False,
        "elapsedSeconds": 1.0,
        "estimatedDownloadTime": "51 seconds",
    }
