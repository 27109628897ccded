"""FastAPI application entrypoint for shaderaudit service mode."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Callable, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..auditor import Auditor
from ..config import AuditConfig, ConfigError, load_config
from ..models import AuditError
from ..report import render


class AuditRequest(BaseModel):
    path: str
    shader_dir: Optional[str] = None
    source_root: Optional[str] = None
    registry: Optional[str] = None
    only_unused: bool = False


class HealthResponse(BaseModel):
    status: str


def _default_auditor(config: AuditConfig) -> Auditor:
    return Auditor(config)


def create_app(
    auditor_factory: Callable[[AuditConfig], Auditor] = _default_auditor,
) -> FastAPI:
    """Create the FastAPI application exposing audit runs."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install shader-audit[service]`."
        )

    app = FastAPI(title="Shader Audit Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/audit")
    async def audit(payload: AuditRequest) -> JSONResponse:
        def _run_audit() -> str:
            root = Path(payload.path).expanduser()
            if not root.exists():
                raise FileNotFoundError(f"Project path not found: {payload.path}")
            config = load_config(root)
            if payload.shader_dir:
                config.shader_dir = root / payload.shader_dir
            if payload.source_root:
                config.source_root = root / payload.source_root
            if payload.registry:
                config.registry = payload.registry
            # A fresh auditor per request keeps runs stateless.
            run = auditor_factory(config).run()
            return render(run, "json", only_unused=payload.only_unused)

        loop = asyncio.get_running_loop()
        body = await loop.run_in_executor(None, _run_audit)
        return JSONResponse(content=json.loads(body))

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AuditError)
    async def audit_error_handler(_: Any, exc: AuditError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install shader-audit[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install shader-audit[service]`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
