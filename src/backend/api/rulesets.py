from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from common.ruleset_engine.errors import (
    ExecutionError,
    ParseError,
    RuleFormatError,
    RulesetExistsError,
    RulesetNotFoundError,
)
from common.ruleset_engine.models import ExecutionStats, Rule
from services.ruleset_service import RulesetService


router = APIRouter(prefix="/api/rulesets", tags=["rulesets"])


class RuleRequest(BaseModel):
    rule: str
    output_variable: str = Field(min_length=1)


class CreateRulesetRequest(BaseModel):
    name: str = Field(min_length=1)
    rules: List[RuleRequest] = Field(default_factory=list)


class ExecuteRulesetRequest(BaseModel):
    ruleset_name: str
    input_data: Dict[str, Any] = Field(default_factory=dict)
    null_safe: Optional[bool] = None


class ExecuteRulesetResponse(BaseModel):
    output_variables: Dict[str, Any]
    stats: ExecutionStats


@lru_cache(maxsize=1)
def get_ruleset_service() -> RulesetService:
    return RulesetService()


def _bad_request(exc: Exception) -> HTTPException:
    if isinstance(exc, ParseError):
        return HTTPException(
            status_code=400,
            detail={"error": "parse_error", "reason": exc.reason, "position": exc.position, "expression": exc.text},
        )
    return HTTPException(status_code=400, detail={"error": "invalid_rule", "reason": str(exc)})


@router.post("", status_code=201, response_model=List[Rule])
def create_ruleset(request: CreateRulesetRequest, service: RulesetService = Depends(get_ruleset_service)):
    try:
        return service.create_ruleset(request.name, [(r.rule, r.output_variable) for r in request.rules])
    except RulesetExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    except (RuleFormatError, ParseError, ValueError) as exc:
        raise _bad_request(exc)


@router.post("/execute", response_model=ExecuteRulesetResponse)
def execute_ruleset(request: ExecuteRulesetRequest, service: RulesetService = Depends(get_ruleset_service)):
    try:
        report = service.execute(request.ruleset_name, request.input_data, null_safe=request.null_safe)
    except RulesetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except ExecutionError as exc:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "execution_error",
                "ruleset": exc.ruleset,
                "rule_id": exc.rule_id,
                "condition": exc.condition,
                "transformation": exc.transformation,
                "cause": str(exc.cause),
            },
        )
    return ExecuteRulesetResponse(output_variables=report.output_variables, stats=report.stats)


@router.post("/{name}/rules", response_model=Rule)
def add_rule(name: str, request: RuleRequest, service: RulesetService = Depends(get_ruleset_service)):
    try:
        return service.add_rule(name, request.rule, request.output_variable)
    except (RuleFormatError, ParseError) as exc:
        raise _bad_request(exc)


@router.get("", response_model=List[str])
def list_rulesets(service: RulesetService = Depends(get_ruleset_service)):
    return service.list_ruleset_names()


@router.get("/{name}", response_model=List[Rule])
def get_ruleset(name: str, service: RulesetService = Depends(get_ruleset_service)):
    try:
        return service.get_rules(name)
    except RulesetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
