"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from playable.errors import MissingAssetFile, ToolchainFailure
from playable.orchestrator import BuildOutcome
from playable.service import create_app


class _StubOrchestrator:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[dict[str, object]] = []

    def run_build(
        self,
        path: str,
        *,
        skip_toolchain: bool = False,
        build_game: bool | None = None,
        minify_js: bool | None = None,
    ) -> BuildOutcome:
        self.calls.append(
            {
                "path": path,
                "skip_toolchain": skip_toolchain,
                "build_game": build_game,
                "minify_js": minify_js,
            }
        )
        if self.error is not None:
            raise self.error
        return BuildOutcome(
            title="Demo",
            artifact=Path(path) / "Demo.html",
            size=2048,
            archive=Path(path) / "Demo_archive.js",
        )


def _client(orchestrator: _StubOrchestrator) -> TestClient:
    return TestClient(create_app(lambda: orchestrator))  # type: ignore[arg-type,return-value]


def test_health_endpoint() -> None:
    response = _client(_StubOrchestrator()).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_build_endpoint(tmp_path: Path) -> None:
    orchestrator = _StubOrchestrator()

    response = _client(orchestrator).post(
        "/build", json={"path": str(tmp_path), "skip_toolchain": True}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Demo"
    assert data["size"] == 2048
    assert data["artifact"].endswith("Demo.html")
    assert data["archive"].endswith("Demo_archive.js")
    assert orchestrator.calls == [
        {"path": str(tmp_path), "skip_toolchain": True, "build_game": None, "minify_js": None}
    ]


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (MissingAssetFile("index.html"), 404),
        (ToolchainFailure("java", "Java is not installed"), 400),
    ],
)
def test_build_errors_are_mapped(tmp_path: Path, error: Exception, status: int) -> None:
    response = _client(_StubOrchestrator(error)).post("/build", json={"path": str(tmp_path)})

    assert response.status_code == status
    assert str(error) in response.json()["detail"]
