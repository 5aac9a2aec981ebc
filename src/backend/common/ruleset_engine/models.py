from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ExecutionStatus(str, Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Rule(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    ruleset: str = ""
    condition: str = Field(min_length=1)
    transformation: str = Field(min_length=1)
    output_variable: str = Field(min_length=1)


class Ruleset(BaseModel):
    name: str = Field(min_length=1)
    rules: List[Rule] = Field(default_factory=list)

    def output_variables(self) -> List[str]:
        return [rule.output_variable for rule in self.rules]


class ExecutionStats(BaseModel):
    total_rules: int = 0
    # Rules whose condition evaluated to true.
    executed_rules: int = 0


class ExecutionReport(BaseModel):
    run_id: str
    ruleset: str = ""
    generated_at: datetime
    status: ExecutionStatus
    output_variables: Dict[str, Any] = Field(default_factory=dict)
    stats: ExecutionStats = Field(default_factory=ExecutionStats)
