#!/usr/bin/env python3
"""
Main entry point for the CardStore deployer: runs the deployment pipeline
described by a configuration file.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional

from .config.settings_loader import load_deployer_config
from .deployment.models import StepResult
from .deployment.orchestrator import DeploymentOrchestrator
from .deployment.pipeline import DeploymentPipeline


def setup_logging(level: int = logging.INFO):
    """Set up logging configuration."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def report_step(result: StepResult):
    """Print one pipeline step outcome."""
    print(f"{result.step}: {result.status.value}")
    if result.error:
        print(f"  {result.error_kind}: {result.error}")


async def run_pipeline(config_path: Optional[str], account_id: Optional[str] = None) -> bool:
    """Run the deployment pipeline from a configuration file."""
    try:
        config = load_deployer_config(config_path)

        issues = config.validate()
        if account_id:
            issues = [i for i in issues if not i.startswith("account_id")]
        if issues:
            print("Configuration validation issues:")
            for issue in issues:
                print(f"  - {issue}")
            return False

        orchestrator = DeploymentOrchestrator(config)
        result = await DeploymentPipeline(orchestrator).run(account_id)

        for step in result.steps:
            report_step(step)

        print(f"Deployment {result.status.value}")
        return result.ok

    except Exception as e:
        print(f"Deployment failed: {str(e)}")
        logging.exception("Deployment pipeline failed")
        return False


def main():
    """Main function to parse arguments and run the application."""
    parser = argparse.ArgumentParser(description="CardStore deployer - ship and initialize NEAR contracts")
    parser.add_argument("config", nargs="?", default=None, help="Path to the YAML configuration file")
    parser.add_argument("--account", help="Master account (defaults to the configured one)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    args = parser.parse_args()

    # Set up logging
    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_logging(log_level)

    success = asyncio.run(run_pipeline(args.config, args.account))

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
