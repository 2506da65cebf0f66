"""
Rules API - FastAPI router for inspecting and recompiling pricing rules.

Rules are authored in rules.csv; this router only reads them and
triggers a recompile. It never writes rule data itself.
"""
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..engine.models import ServiceType
from ..rules.compile_rules import compile_rules
from .state import build_repository, engine, settings

router = APIRouter(prefix="/api/rules", tags=["rules"])


class RuleResponse(BaseModel):
    """Response model for a rule."""
    id: str
    name: str
    serviceType: str
    condition: dict[str, Any]
    adjustment: dict[str, Any]
    priority: int
    isActive: bool
    validFrom: Optional[str]
    validTo: Optional[str]


class CompileResponse(BaseModel):
    success: bool
    rules_count: int
    errors: list[str]


@router.get("", response_model=list[RuleResponse])
async def list_rules(
    service_type: Optional[ServiceType] = None,
    as_of: Optional[date] = None,
    include_inactive: bool = True
):
    """List pricing rules, optionally only those active for a service type on a date."""
    repository = engine.repository
    if service_type is not None and as_of is not None:
        rules = repository.get_active_rules(service_type, as_of)
    else:
        rules = repository.all_rules()
        if service_type is not None:
            rules = [r for r in rules if r.applies_to(service_type)]
        if not include_inactive:
            rules = [r for r in rules if r.is_active]

    rules = sorted(rules, key=lambda r: r.priority)
    return [RuleResponse(**rule.to_dict()) for rule in rules]


@router.get("/{rule_id}", response_model=RuleResponse)
async def get_rule(rule_id: str):
    """Get a single rule by ID."""
    for rule in engine.repository.all_rules():
        if rule.id == rule_id:
            return RuleResponse(**rule.to_dict())
    raise HTTPException(status_code=404, detail=f"Rule '{rule_id}' not found")


@router.post("/compile", response_model=CompileResponse)
async def recompile_rules():
    """Recompile rules.csv and swap the engine onto the new rule set."""
    success, rules, errors = compile_rules(settings.rules_csv, settings.compiled_rules)
    if success:
        engine.repository = build_repository(settings)
    return CompileResponse(success=success, rules_count=len(rules), errors=errors)
