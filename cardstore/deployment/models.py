"""
Models for deployment domain.
"""
from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from enum import Enum

from ..core.exceptions import DeployerError


class StepStatus(Enum):
    """Status of a deployment step"""
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepResult:
    """Result of one orchestrator step, returned instead of raised"""
    step: str
    status: StepStatus
    value: Any = None
    error: Optional[str] = None
    error_kind: Optional[str] = None
    payload: Any = None

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCESS

    @classmethod
    def success(cls, step: str, value: Any = None) -> 'StepResult':
        return cls(step=step, status=StepStatus.SUCCESS, value=value)

    @classmethod
    def failure(cls, step: str, error: Exception) -> 'StepResult':
        return cls(
            step=step,
            status=StepStatus.FAILED,
            error=str(error),
            error_kind=type(error).__name__,
            payload=getattr(error, "payload", None),
        )

    @classmethod
    def skipped(cls, step: str, reason: str) -> 'StepResult':
        return cls(step=step, status=StepStatus.SKIPPED, error=reason)

    def unwrap(self) -> Any:
        """Return the value or raise a DeployerError describing the failure"""
        if not self.ok:
            raise DeployerError(f"Step '{self.step}' {self.status.value}: {self.error}")
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        value = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
        return {
            "step": self.step,
            "status": self.status.value,
            "value": value,
            "error": self.error,
            "error_kind": self.error_kind,
            "payload": self.payload,
        }


@dataclass
class PipelineResult:
    """Ordered results of a deployment pipeline run"""
    steps: List[StepResult] = field(default_factory=list)
    # Step names whose failure does not fail the pipeline
    tolerated: List[str] = field(default_factory=list)

    @property
    def status(self) -> StepStatus:
        for result in self.steps:
            if result.status == StepStatus.FAILED and result.step not in self.tolerated:
                return StepStatus.FAILED
        return StepStatus.SUCCESS

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCESS

    def add(self, result: StepResult, tolerated: bool = False) -> StepResult:
        self.steps.append(result)
        if tolerated:
            self.tolerated.append(result.step)
        return result

    def get(self, step: str) -> Optional[StepResult]:
        for result in self.steps:
            if result.step == step:
                return result
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "steps": [r.to_dict() for r in self.steps],
        }
