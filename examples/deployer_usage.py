#!/usr/bin/env python3
"""
Example usage of the DeploymentOrchestrator: check the balance, deploy the
tokenized card contract, initialize it and create a marketplace sub account.

Requires a key for the configured account in ~/.near-credentials/<network>/.
"""

import asyncio
import logging

from cardstore.config.settings_loader import load_deployer_config
from cardstore.core.exceptions import RemoteError
from cardstore.core.models import yocto_to_near
from cardstore.deployment.orchestrator import DeploymentOrchestrator


async def main():
    config = load_deployer_config("./examples/configs/cardstore.yaml")
    orchestrator = DeploymentOrchestrator(config)
    account_id = config.require_account_id()

    balance = await orchestrator.get_balance(account_id)
    print(f"Balance of {account_id}: {yocto_to_near(balance.available)} NEAR available")

    result = await orchestrator.deploy("../out/tokenizedCard.wasm", account_id)
    print(f"Deployed: {result.transaction_hash}")

    try:
        result = await orchestrator.initialize(account_id)
        print(f"Initialized: {result.transaction_hash}")
    except RemoteError as e:
        # Re-running against an initialized contract ends up here
        print(f"Initialize rejected: {e}")

    step = await orchestrator.try_create_sub_account(account_id, "marketplace", 10)
    print(f"Sub account: {step.to_dict()}")


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(main())
