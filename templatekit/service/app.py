"""FastAPI application entrypoint for templatekit service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Sequence

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..errors import TemplateKitError
from ..logging import get_logger
from ..session import EditingSession

SessionFactory = Callable[[str, Optional[Sequence[Dict[str, Any]]]], EditingSession]

logger = get_logger("service")


class ModulePayload(BaseModel):
    id: str
    name: Optional[str] = None
    type: str = "other"
    editable: bool = True
    description: str = ""
    tag: Optional[str] = None
    selector: Optional[str] = None


class TemplateRequest(BaseModel):
    html: str
    modules: Optional[List[ModulePayload]] = None


class SegmentResponse(BaseModel):
    html: str
    modules: List[ModulePayload]
    snippets: Dict[str, str]
    mapped: List[str]


class WrapRequest(TemplateRequest):
    module_id: str


class WrapResponse(BaseModel):
    html: str
    wrapped: bool


class PatchRequest(TemplateRequest):
    module_id: str
    new_markup: str


class PatchResponse(BaseModel):
    html: str
    applied: bool
    changed: bool
    strategy: Optional[str] = None
    warnings: List[Dict[str, Any]] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str


def _default_session(
    html: str, modules: Optional[Sequence[Dict[str, Any]]] = None
) -> EditingSession:
    return EditingSession(html, modules)


def create_app(session_factory: SessionFactory = _default_session) -> FastAPI:
    """Create the FastAPI application exposing segment, wrap and patch."""

    app = FastAPI(title="templatekit service", version="0.1.0")

    async def get_factory() -> SessionFactory:
        return session_factory

    async def _run(func: Callable[[], Any]) -> Any:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # pragma: no cover - fallback path when not in async context
            return func()
        return await loop.run_in_executor(None, func)

    def _open(factory: SessionFactory, payload: TemplateRequest) -> EditingSession:
        modules = None
        if payload.modules is not None:
            modules = [module.model_dump(exclude_none=True) for module in payload.modules]
        return factory(payload.html, modules)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/segment", response_model=SegmentResponse)
    async def segment(
        payload: TemplateRequest,
        factory: SessionFactory = Depends(get_factory),
    ) -> SegmentResponse:
        session = await _run(lambda: _open(factory, payload))
        return SegmentResponse(
            html=session.html,
            modules=[ModulePayload(**module.to_dict()) for module in session.modules],
            snippets=session.snippets,
            mapped=session.mapped,
        )

    @app.post("/wrap", response_model=WrapResponse)
    async def wrap(
        payload: WrapRequest,
        factory: SessionFactory = Depends(get_factory),
    ) -> WrapResponse:
        def _wrap() -> WrapResponse:
            session = _open(factory, payload)
            before = session.html
            after = session.begin_external_edit(payload.module_id)
            return WrapResponse(html=after, wrapped=after != before)

        return await _run(_wrap)

    @app.post("/patch", response_model=PatchResponse)
    async def patch(
        payload: PatchRequest,
        factory: SessionFactory = Depends(get_factory),
    ) -> PatchResponse:
        def _patch() -> PatchResponse:
            session = _open(factory, payload)
            result = session.patch(payload.module_id, payload.new_markup)
            if not result.applied and result.error is not None:
                raise result.error
            return PatchResponse(
                html=session.html,
                applied=result.applied,
                changed=result.changed,
                strategy=result.strategy,
                warnings=[warning.to_dict() for warning in result.warnings],
            )

        return await _run(_patch)

    @app.exception_handler(TemplateKitError)
    async def templatekit_error_handler(_: Any, exc: TemplateKitError) -> JSONResponse:
        logger.warning("Request failed: %s", exc)
        return JSONResponse(status_code=400, content={"detail": exc.to_dict()})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": {"code": "INVALID_REQUEST", "message": str(exc)}})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
