"""FastAPI application entrypoint for coderules service mode."""

from __future__ import annotations

from typing import Any, Callable, Dict

import uvicorn
from fastapi import Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..pipeline import CodeRulesPipeline, load_pipeline
from ..tool import TOOL_DESCRIPTION, TOOL_INPUT_SCHEMA, TOOL_NAME


class HealthResponse(BaseModel):
    status: str
    cache_entries: int


class ToolInfoResponse(BaseModel):
    name: str
    description: str
    input_schema: Dict[str, Any]


def create_app(
    pipeline_factory: Callable[[], CodeRulesPipeline] = load_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing the coderules tool over HTTP.

    The pipeline is built once so its filter cache lives as long as the app.
    """
    app = FastAPI(title="Code Rules Service", version="0.0.1")
    app.state.pipeline = pipeline_factory()

    async def get_pipeline(request: Request) -> CodeRulesPipeline:
        return request.app.state.pipeline

    @app.get("/health", response_model=HealthResponse)
    async def health(pipeline: CodeRulesPipeline = Depends(get_pipeline)) -> HealthResponse:
        return HealthResponse(status="ok", cache_entries=len(pipeline.cache))

    @app.get("/tool", response_model=ToolInfoResponse)
    async def tool_info() -> ToolInfoResponse:
        return ToolInfoResponse(
            name=TOOL_NAME, description=TOOL_DESCRIPTION, input_schema=TOOL_INPUT_SCHEMA
        )

    @app.post("/coderules")
    async def coderules(
        payload: Dict[str, Any] = Body(default_factory=dict),
        pipeline: CodeRulesPipeline = Depends(get_pipeline),
    ) -> JSONResponse:
        response = await pipeline.process_request(payload)
        status_code = 400 if response.get("isError") else 200
        return JSONResponse(status_code=status_code, content=response)

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
