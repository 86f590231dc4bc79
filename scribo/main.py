from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from scribo import __version__
from scribo.analyzer import RuleAnalyzer
from scribo.aws import AWSClient
from scribo.config import Settings, get_settings
from scribo.errors import AnalyzerConfigurationError, ScriboError
from scribo.logging import configure_logging
from scribo.rules.models import AnalysisResult, ChecklistAnalysisResult
from scribo.schemas import AnalyzeChecklistRequest, AnalyzeGuidelinesRequest, ErrorResponse, HealthResponse

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Scribo Analyzer",
    version=__version__,
    description="Reviews blog posts against guidelines and a checklist",
    docs_url="/docs" if os.getenv("SCRIBO_ENABLE_DOCS", "true").lower() == "true" else None,
    redoc_url="/redoc" if os.getenv("SCRIBO_ENABLE_DOCS", "true").lower() == "true" else None,
)

if os.getenv("SCRIBO_ENABLE_CORS", "false").lower() == "true":
    from fastapi.middleware.cors import CORSMiddleware

    allowed_origins = os.getenv("SCRIBO_ALLOWED_ORIGINS", "").split(",")
    allowed_origins = [origin.strip() for origin in allowed_origins if origin.strip()]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(RequestValidationError)
async def invalid_request_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request data", "issues": issues},
    )


@app.exception_handler(ScriboError)
async def scribo_error_handler(request: Request, exc: ScriboError) -> JSONResponse:
    logger.error(f"{request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_rule_analyzer(settings: SettingsDep) -> RuleAnalyzer:
    if not settings.aws.use_bedrock:
        raise AnalyzerConfigurationError("Bedrock is disabled")
    return RuleAnalyzer(AWSClient(settings.aws), settings.analyzer)


RuleAnalyzerDep = Annotated[RuleAnalyzer, Depends(get_rule_analyzer)]

ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, timestamp=datetime.now(UTC))


@app.post("/api/analyze/guidelines", responses=ERROR_RESPONSES)
def analyze_guidelines(payload: AnalyzeGuidelinesRequest, analyzer: RuleAnalyzerDep) -> JSONResponse:
    logger.info(f"Analyzing {len(payload.text)} chars against {len(payload.guidelines)} guidelines")
    result: AnalysisResult = analyzer.analyze_guidelines(payload.text, payload.guidelines)
    return JSONResponse(content=result.to_json_dict())


@app.post("/api/analyze/checklist", responses=ERROR_RESPONSES)
def analyze_checklist(payload: AnalyzeChecklistRequest, analyzer: RuleAnalyzerDep) -> JSONResponse:
    logger.info(f"Analyzing {len(payload.text)} chars against {len(payload.checklist_items)} checklist items")
    result: ChecklistAnalysisResult = analyzer.analyze_checklist(payload.text, payload.checklist_items)
    return JSONResponse(content=result.to_json_dict())
