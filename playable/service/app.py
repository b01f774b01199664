"""FastAPI application entrypoint for playable service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import BundleError, MissingAssetFile
from ..orchestrator import BuildOutcome, Orchestrator


class BuildRequest(BaseModel):
    path: str
    skip_toolchain: bool = False
    build_game: Optional[bool] = None
    minify_js: Optional[bool] = None


class BuildResponse(BaseModel):
    title: str
    artifact: str
    size: int
    archive: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing playable builds."""

    app = FastAPI(title="Playable Bundler Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/build", response_model=BuildResponse)
    async def build(
        payload: BuildRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BuildResponse:
        def _run_build() -> BuildOutcome:
            return orchestrator.run_build(
                payload.path,
                skip_toolchain=payload.skip_toolchain,
                build_game=payload.build_game,
                minify_js=payload.minify_js,
            )

        # The build drives its own event loop, so keep it off the server's loop.
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run_build)
        return BuildResponse(
            title=outcome.title,
            artifact=str(outcome.artifact),
            size=outcome.size,
            archive=str(outcome.archive) if outcome.archive is not None else None,
        )

    @app.exception_handler(MissingAssetFile)
    async def missing_asset_handler(_: Any, exc: MissingAssetFile) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(BundleError)
    async def bundle_error_handler(_: Any, exc: BundleError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
