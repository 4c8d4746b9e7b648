"""
Rule Routes
===========

FastAPI routes describing the registered rules.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from html_linter.api.auth import validate_api_key
from html_linter.core.errors import UnknownRuleError
from html_linter.core.rules import registry
from html_linter.models.schemas import RuleCategory, RuleInfo, RuleListResponse

router = APIRouter(prefix="/api/v1", tags=["Rules"], dependencies=[Depends(validate_api_key)])


@router.get("/rules", response_model=RuleListResponse)
async def list_rules(category: Optional[RuleCategory] = None) -> RuleListResponse:
    """List registered rules, optionally filtered by category."""
    rules = registry.info(category)
    return RuleListResponse(rules=rules, total=len(rules))


@router.get("/rules/{rule_id}", response_model=RuleInfo)
async def get_rule(rule_id: str) -> RuleInfo:
    try:
        return registry.get(rule_id).info()
    except UnknownRuleError as e:
        raise HTTPException(status_code=404, detail=str(e))
