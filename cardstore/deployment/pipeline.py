import logging
from dataclasses import dataclass
from typing import List, Optional

from ..config.settings_loader import DeploymentStepConfig
from ..core.exceptions import DeployerError
from ..core.models import sub_account_id
from .models import PipelineResult, StepResult
from .orchestrator import DeploymentOrchestrator


@dataclass
class PipelineStep:
    """One contract to deploy, optionally onto a fresh sub-account"""
    name: str
    artifact: str
    sub_account: Optional[str] = None
    initial_balance: float = 10
    initialize: bool = False

    @classmethod
    def from_config(cls, step: DeploymentStepConfig) -> 'PipelineStep':
        return cls(
            name=step.name,
            artifact=step.artifact,
            sub_account=step.sub_account,
            initial_balance=step.initial_balance,
            initialize=step.initialize,
        )

    def stages(self) -> List[str]:
        """Report entry names this step produces, in order"""
        stages = []
        if self.sub_account:
            stages.append(f"create_sub_account:{self.name}")
        stages.append(f"deploy:{self.name}")
        if self.initialize:
            stages.append(f"initialize:{self.name}")
        return stages


class DeploymentPipeline:
    """
    Runs deployment steps in order.

    Sub-account creation may fail (name taken on a re-run, low balance)
    without stopping the run; a failed deploy or initialize stops it and the
    remaining steps are reported as skipped.
    """

    def __init__(self, orchestrator: DeploymentOrchestrator, steps: Optional[List[PipelineStep]] = None):
        self.orchestrator = orchestrator
        if steps is None:
            steps = [PipelineStep.from_config(s) for s in orchestrator.config.deployment.steps]
        self.steps = steps
        self.logger = logging.getLogger(f"{__name__}.DeploymentPipeline")

    async def run(self, master_account_id: Optional[str] = None) -> PipelineResult:
        master = master_account_id or self.orchestrator.config.require_account_id()
        result = PipelineResult()
        self.logger.info(f"Running deployment pipeline with {len(self.steps)} step(s) for {master}")

        for index, step in enumerate(self.steps):
            if not await self._run_step(step, master, result):
                for remaining in self.steps[index + 1:]:
                    for stage in remaining.stages():
                        result.add(StepResult.skipped(stage, "previous step failed"))
                break

        self.logger.info(f"Deployment pipeline finished: {result.status.value}")
        return result

    async def _run_step(self, step: PipelineStep, master: str, result: PipelineResult) -> bool:
        target = master
        if step.sub_account:
            target = sub_account_id(step.sub_account, master)
            created = await self.orchestrator.try_create_sub_account(
                master,
                step.sub_account,
                step.initial_balance,
                step=f"create_sub_account:{step.name}",
            )
            result.add(created, tolerated=True)

        try:
            deployed = await self.orchestrator.deploy(step.artifact, target)
        except DeployerError as e:
            self.logger.error(f"Step {step.name}: deploy to {target} failed: {e}")
            result.add(StepResult.failure(f"deploy:{step.name}", e))
            if step.initialize:
                result.add(StepResult.skipped(f"initialize:{step.name}", "deploy failed"))
            return False
        result.add(StepResult.success(f"deploy:{step.name}", deployed))

        if step.initialize:
            try:
                initialized = await self.orchestrator.initialize(target)
            except DeployerError as e:
                self.logger.error(f"Step {step.name}: initialize on {target} failed: {e}")
                result.add(StepResult.failure(f"initialize:{step.name}", e))
                return False
            result.add(StepResult.success(f"initialize:{step.name}", initialized))

        return True
