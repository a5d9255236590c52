"""FastAPI application entrypoint for enhansome service mode."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import Depends, FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Depends = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..orchestrator import Orchestrator


class EnhanceRequest(BaseModel):
    content: str
    token: Optional[str] = None
    find_and_replace: Optional[str] = None
    regex_find_and_replace: Optional[str] = None
    disable_branding: Optional[bool] = None
    sort_by: Optional[str] = None
    min_links: Optional[int] = None
    relative_link_prefix: Optional[str] = None
    source_repository: Optional[str] = None


class EnhanceResponse(BaseModel):
    final_content: str
    is_changed: bool
    json_data: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing the enhance operation."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install fastapi uvicorn`."
        )

    app = FastAPI(title="Enhansome Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request so runs never share state.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/enhance", response_model=EnhanceResponse)
    async def enhance_content(
        payload: EnhanceRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> EnhanceResponse:
        overrides = payload.model_dump(exclude={"content"}, exclude_none=True)
        result = await orchestrator.enhance_content(payload.content, **overrides)
        return EnhanceResponse(
            final_content=result.final_content,
            is_changed=result.is_changed,
            json_data=result.json_data.to_dict(),
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install fastapi uvicorn`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
