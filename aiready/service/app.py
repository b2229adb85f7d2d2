"""FastAPI application entrypoint for aiready service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..config import AiReadyConfig, ConfigError, load_config
from ..engine import AnalysisEngine, exit_code
from ..logging import get_logger
from ..repo_scanner import find_project_root

logger = get_logger("service")

EngineFactory = Callable[[AiReadyConfig], AnalysisEngine]


class ScanRequest(BaseModel):
    path: str
    policy: Optional[str] = None
    top: Optional[int] = Field(default=None, ge=0)


class HealthResponse(BaseModel):
    status: str


def create_app(engine_factory: EngineFactory = AnalysisEngine.from_config) -> FastAPI:
    """Create the FastAPI application exposing aiready scans."""

    app = FastAPI(title="aiready Service", version=__version__)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/scan")
    async def scan(payload: ScanRequest) -> Dict[str, Any]:
        def _run_scan() -> Dict[str, Any]:
            target = Path(payload.path).expanduser()
            if not target.exists():
                raise FileNotFoundError(f"path not found: {payload.path}")
            config = load_config(find_project_root(target))
            policy = payload.policy or config.policy
            top = payload.top if payload.top is not None else config.report.top
            # A fresh engine per request keeps the graph cache run-scoped.
            engine = engine_factory(config)
            result = engine.run(target, policy=policy)
            data = result.limited(top).to_dict()
            data["exit_code"] = exit_code(result, min_score=config.gate.min_score)
            return data

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run_scan)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    logger.info("Starting aiready service on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["HealthResponse", "ScanRequest", "create_app", "run_service"]
