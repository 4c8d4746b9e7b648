"""
Lint Routes
===========

FastAPI routes for linting HTML and Markdown sources.
"""

import time

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from html_linter.api.auth import validate_api_key
from html_linter.config.logging import get_logger
from html_linter.config.settings import get_settings
from html_linter.core.engine.linter import lint_html
from html_linter.core.errors import SourceTooLargeError
from html_linter.core.reporting import FormatterFactory
from html_linter.models.schemas import FileResult, LintReport, LintRequest, LintResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Lint"], dependencies=[Depends(validate_api_key)])


async def run_lint_request(request: LintRequest) -> FileResult:
    """
    Lint the request content.

    Raises:
        SourceTooLargeError: If the content exceeds max_source_bytes
        LintConfigError: If the request config is invalid
    """
    limit = get_settings().max_source_bytes
    size = len(request.content.encode("utf-8"))
    if size > limit:
        raise SourceTooLargeError(size, limit)

    return await lint_html(
        request.content,
        config=request.config,
        filename=request.filename,
        source_type=request.source_type,
        fragment=request.fragment,
    )


@router.post("/lint", response_model=LintResponse)
async def lint(request: LintRequest) -> LintResponse:
    """Lint source text and return diagnostics as JSON."""
    start_time = time.time()
    logger.info("Lint requested", filename=request.filename, content_length=len(request.content))

    result = await run_lint_request(request)
    processing_time = time.time() - start_time

    logger.info(
        "Lint completed",
        filename=request.filename,
        errors=result.error_count,
        warnings=result.warning_count,
        processing_time=processing_time,
    )
    return LintResponse(success=result.error_count == 0, result=result, processing_time=processing_time)


@router.post("/lint/report")
async def lint_report(
    request: LintRequest,
    format: str = Query("text", description="Report format: text, json, html or github"),
) -> Response:
    """Lint source text and return a formatted report."""
    try:
        formatter = FormatterFactory.create_formatter(format)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await run_lint_request(request)
    report = LintReport(results=[result], processing_time=result.processing_time)
    return Response(content=formatter.format(report), media_type=formatter.media_type)
