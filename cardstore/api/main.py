import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from contextlib import asynccontextmanager

from ..config.settings_loader import DeployerConfig, load_deployer_config
from ..deployment.orchestrator import DeploymentOrchestrator
from .state import app_state


def configure_app_state(config: DeployerConfig, orchestrator: Optional[DeploymentOrchestrator] = None):
    """Install the config (and orchestrator) the routes will use"""
    app_state["deployer_config"] = config
    app_state["orchestrator"] = orchestrator or DeploymentOrchestrator(config)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logging.info("Starting CardStore deployer API")

    if "orchestrator" not in app_state:
        configure_app_state(app_state.get("deployer_config") or load_deployer_config())
    config = app_state["deployer_config"]

    logging.info(f"Network: {config.network_id} ({config.rpc_url})")
    logging.info(f"Account: {config.account_id}")
    logging.info(f"Credentials: {config.credentials_path}")

    yield

    # Shutdown
    logging.info("Shutting down CardStore deployer API")


# Create FastAPI app
app = FastAPI(
    title="CardStore Deployer API",
    description="Deploy and administer the CardStore contracts",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers (imported here to avoid circular import)
from .routers import contracts, accounts
app.include_router(contracts.router)
app.include_router(accounts.router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Hello World!"


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    config = app_state.get("deployer_config")
    return {
        "status": "healthy",
        "service": "cardstore-deployer-api",
        "version": "1.0.0",
        "network": config.network_id if config else None,
    }


def main():
    """Main function to run the API server"""
    import argparse

    parser = argparse.ArgumentParser(description="CardStore Deployer API Server")
    parser.add_argument("--host", default=None, help="Host to bind to")
    parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    parser.add_argument("--config", default=None, help="Path to deployer config YAML")
    parser.add_argument("--log-level", default="INFO", help="Log level")

    args = parser.parse_args()
    serve(args.config, args.host, args.port, args.log_level)


def serve(config_path: Optional[str] = None, host: Optional[str] = None,
          port: Optional[int] = None, log_level: str = "INFO"):
    """Load the config and run uvicorn"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Create config before starting the app
    config = load_deployer_config(config_path)
    configure_app_state(config)

    host = host or config.api.host
    port = port or config.api.port
    logging.info(f"CardStore app listening at http://{host}:{port}")

    # App object, not import string, so the configured state is kept
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=log_level.lower()
    )


if __name__ == "__main__":
    main()
