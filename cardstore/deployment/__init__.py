"""
Deployment of contract artifacts: single operations and the ordered
pipeline that composes them.
"""

from .models import StepResult, StepStatus, PipelineResult
from .orchestrator import DeploymentOrchestrator
from .pipeline import DeploymentPipeline, PipelineStep

__all__ = [
    'StepResult',
    'StepStatus',
    'PipelineResult',
    'DeploymentOrchestrator',
    'DeploymentPipeline',
    'PipelineStep',
]
