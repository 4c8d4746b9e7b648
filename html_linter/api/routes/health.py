"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from html_linter.config.logging import get_logger
from html_linter.config.settings import get_settings
from html_linter.core.engine.config import PRESETS, resolve_rules
from html_linter.core.errors import LintConfigError
from html_linter.core.rules import registry
from html_linter.models.schemas import HealthStatus

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


async def check_engine_health() -> Dict[str, Any]:
    """
    Check that rules are registered and the default preset resolves.
    """
    settings = get_settings()
    try:
        active = resolve_rules()
    except LintConfigError as e:
        logger.error("Default preset failed to resolve", preset=settings.default_preset, error=str(e))
        return {"healthy": False, "rules_loaded": len(registry), "error": str(e)}
    return {
        "healthy": len(registry) > 0,
        "rules_loaded": len(registry),
        "default_preset": settings.default_preset,
        "default_rules": len(active),
    }


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Get application health status."""
    try:
        engine = await check_engine_health()
    except Exception as e:
        logger.error("Health check failed", error=str(e))
        raise HTTPException(status_code=503, detail="Health check failed")

    status = "healthy" if engine["healthy"] else "unhealthy"
    logger.debug("Health check completed", status=status, rules_loaded=engine["rules_loaded"])
    return HealthStatus(
        status=status,
        version=get_settings().app_version,
        rules_loaded=engine["rules_loaded"],
        presets=list(PRESETS),
    )
