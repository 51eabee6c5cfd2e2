"""
API endpoints for contract deployment and initialization.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..errors import to_http_exception
from ..models.api_models import TransactionResponse
from ...core.exceptions import DeployerError
from ...deployment.orchestrator import DeploymentOrchestrator
from ...deployment.pipeline import DeploymentPipeline

router = APIRouter(tags=["contracts"])
logger = logging.getLogger(__name__)


def get_orchestrator() -> DeploymentOrchestrator:
    """Dependency to get orchestrator instance"""
    from ..state import app_state
    orchestrator = app_state.get("orchestrator")
    if not orchestrator:
        raise HTTPException(status_code=500, detail="Orchestrator not initialized")
    return orchestrator


@router.get("/deploy")
async def deploy(
    artifact: Optional[str] = Query(None, description="Artifact to deploy instead of the configured pipeline"),
    account_id: Optional[str] = Query(None, description="Target account, defaults to the configured one"),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)
):
    """
    Run the configured deployment pipeline, or deploy a single artifact.

    Returns:
        Pipeline result, or the transaction result of the single deploy
    """
    if artifact is None:
        if not orchestrator.config.deployment.steps:
            raise HTTPException(status_code=400, detail="No artifact given and no deployment steps configured")
        try:
            result = await DeploymentPipeline(orchestrator).run(account_id)
        except DeployerError as e:
            raise to_http_exception(e)
        if not result.ok:
            raise HTTPException(status_code=400, detail=result.to_dict())
        return result.to_dict()

    try:
        result = await orchestrator.deploy(artifact, account_id)
    except DeployerError as e:
        logger.error(f"Deploy of {artifact} failed: {e}")
        raise to_http_exception(e)
    return result.to_dict()


@router.get("/initialize", response_model=TransactionResponse)
async def initialize(
    account_id: Optional[str] = Query(None, description="Contract account, defaults to the configured one"),
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)
):
    """Call the contract's one-time init entry point with the configured arguments"""
    try:
        result = await orchestrator.initialize(account_id)
    except DeployerError as e:
        logger.error(f"Initialize failed: {e}")
        raise to_http_exception(e)
    return result.to_dict()
