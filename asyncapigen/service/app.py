"""FastAPI application entrypoint for asyncapigen service mode."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import EmitterConfig, InfoConfig, SecurityOptions
from ..constants import DEFAULT_TITLE, DEFAULT_VERSION
from ..errors import EmitterError, ErrorCategory
from ..loader import build_program
from ..orchestrator import Orchestrator
from ..plugins import create_default_registry
from ..serialization import dump_document
from ..validators import ValidationResult, ValidationService

_CLIENT_ERRORS = {
    ErrorCategory.VALIDATION,
    ErrorCategory.TYPE,
    ErrorCategory.COMPILATION,
    ErrorCategory.CONFIGURATION,
}


class InfoPayload(BaseModel):
    title: str = DEFAULT_TITLE
    version: str = DEFAULT_VERSION
    description: Optional[str] = None


class EmitRequest(BaseModel):
    description: Dict[str, Any]
    info: Optional[InfoPayload] = None
    protocol_bindings: List[str] = Field(default_factory=list)
    key_strategy: str = "name"
    skip_validation: bool = False
    file_type: Optional[str] = None


class ValidationPayload(BaseModel):
    valid: bool
    summary: str
    errors: List[Dict[str, Any]] = Field(default_factory=list)
    warnings: List[Dict[str, Any]] = Field(default_factory=list)
    metrics: Dict[str, Any] = Field(default_factory=dict)


class EmitResponse(BaseModel):
    document: Dict[str, Any]
    valid: bool
    validation: Optional[ValidationPayload] = None
    warnings: List[str] = Field(default_factory=list)
    content: Optional[str] = None


class ValidateRequest(BaseModel):
    document: Optional[Dict[str, Any]] = None
    content: Optional[str] = None
    file_type: str = "yaml"


class PluginInfo(BaseModel):
    name: str
    version: str
    bindingVersion: str
    aliases: List[str]
    capabilities: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _validation_payload(result: ValidationResult) -> ValidationPayload:
    data = result.to_dict()
    return ValidationPayload(
        valid=data["valid"],
        summary=data["summary"],
        errors=data["errors"],
        warnings=data["warnings"],
        metrics=data["metrics"],
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing asyncapigen operations."""

    app = FastAPI(title="AsyncAPI Emitter Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # one orchestrator (and plugin registry) per request
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/plugins", response_model=List[PluginInfo])
    async def plugins() -> List[PluginInfo]:
        return [PluginInfo(**entry) for entry in create_default_registry().describe()]

    @app.post("/emit", response_model=EmitResponse)
    async def emit(
        payload: EmitRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> EmitResponse:
        config = EmitterConfig(
            protocol_bindings=list(payload.protocol_bindings),
            security=SecurityOptions(key_strategy=payload.key_strategy),
        )
        if payload.info is not None:
            config.info = InfoConfig(**payload.info.model_dump())
        config.validation.enabled = not payload.skip_validation

        program = build_program(payload.description)
        outcome = await orchestrator.emit(program, config)
        return EmitResponse(
            document=outcome.document,
            valid=outcome.valid,
            validation=_validation_payload(outcome.validation) if outcome.validation else None,
            warnings=outcome.warnings,
            content=dump_document(outcome.document, payload.file_type) if payload.file_type else None,
        )

    @app.post("/validate", response_model=ValidationPayload)
    async def validate(
        payload: ValidateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ValidationPayload:
        service: ValidationService = orchestrator.validation
        if payload.document is not None:
            result = service.validate(payload.document)
        elif payload.content is not None:
            result = service.validate_content(payload.content, payload.file_type)
        else:
            raise EmitterError(
                ErrorCategory.VALIDATION,
                "EMPTY_REQUEST",
                "Provide either 'document' or 'content' to validate",
            )
        return _validation_payload(result)

    @app.exception_handler(EmitterError)
    async def emitter_error_handler(_: Any, exc: EmitterError) -> JSONResponse:
        status = 400 if exc.category in _CLIENT_ERRORS else 500
        return JSONResponse(status_code=status, content={"detail": exc.message, "error": exc.to_dict()})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
