"""
CLI for deploying and administering the CardStore contracts.
Thin wrapper over DeploymentOrchestrator.
"""
import asyncio
import json
import click
import logging
from dataclasses import replace
from typing import Optional

from ..config.settings_loader import DeployerConfig, load_deployer_config
from ..core.exceptions import DeployerError
from ..core.models import yocto_to_near
from ..deployment.models import StepStatus
from ..deployment.orchestrator import DeploymentOrchestrator
from ..deployment.pipeline import DeploymentPipeline


def _setup(config_path: Optional[str], log_level: str) -> DeployerConfig:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    try:
        return load_deployer_config(config_path)
    except DeployerError as e:
        raise click.ClickException(str(e))


def _run(coro):
    """Run a coroutine, turning deployer errors into CLI errors"""
    logger = logging.getLogger(__name__)
    try:
        return asyncio.run(coro)
    except DeployerError as e:
        logger.debug("Command failed", exc_info=True)
        raise click.ClickException(f"{type(e).__name__}: {e}")
    except ValueError as e:
        raise click.ClickException(str(e))


@click.group()
def cli():
    """Deploy and administer CardStore contracts on NEAR"""
    pass


@cli.command()
@click.argument('artifact', type=click.Path())
@click.option('--account', 'account_id', default=None, help='Target account (defaults to configured account)')
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def deploy(artifact: str, account_id: Optional[str], config_path: Optional[str], log_level: str):
    """Deploy a compiled contract artifact"""
    config = _setup(config_path, log_level)
    orchestrator = DeploymentOrchestrator(config)

    result = _run(orchestrator.deploy(artifact, account_id))
    click.echo(f"✅ Deployed {artifact}")
    click.echo(f"Transaction: {result.transaction_hash}")


@cli.command()
@click.option('--account', 'account_id', default=None, help='Contract account (defaults to configured account)')
@click.option('--owner', 'owner_id', default=None, help='Owner id passed to the init method')
@click.option('--total-supply', type=int, default=None, help='Override configured total supply')
@click.option('--cost-per-token', type=int, default=None, help='Override configured cost per token')
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def initialize(account_id: Optional[str], owner_id: Optional[str], total_supply: Optional[int],
               cost_per_token: Optional[int], config_path: Optional[str], log_level: str):
    """Call the contract's one-time init entry point"""
    config = _setup(config_path, log_level)
    orchestrator = DeploymentOrchestrator(config)

    overrides = {"owner_id": owner_id, "total_supply": total_supply, "cost_per_token": cost_per_token}
    init_args = replace(config.contract.init_args, **{k: v for k, v in overrides.items() if v is not None})

    result = _run(orchestrator.initialize(account_id, init_args))
    click.echo(f"✅ Initialized {account_id or config.account_id}")
    click.echo(f"Transaction: {result.transaction_hash}")


@cli.command('new-wallet')
@click.argument('uid')
@click.option('--initial-balance', type=float, default=10, show_default=True, help='Initial balance in NEAR')
@click.option('--parent', 'parent_id', default=None, help='Parent account (defaults to configured account)')
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def new_wallet(uid: str, initial_balance: float, parent_id: Optional[str],
               config_path: Optional[str], log_level: str):
    """Create a sub account UID.<parent>"""
    config = _setup(config_path, log_level)
    orchestrator = DeploymentOrchestrator(config)

    parent = parent_id or config.account_id
    if not parent:
        raise click.ClickException("No parent account configured")

    account_id = _run(orchestrator.create_sub_account(parent, uid, initial_balance))
    click.echo(f"New sub account \"{account_id}\" is created successfully")


@cli.command()
@click.argument('account_id', required=False)
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='WARNING', help='Log level')
def balance(account_id: Optional[str], config_path: Optional[str], log_level: str):
    """Show the balance of an account"""
    config = _setup(config_path, log_level)
    orchestrator = DeploymentOrchestrator(config)

    result = _run(orchestrator.get_balance(account_id))
    click.echo(f"Account:      {account_id or config.account_id}")
    click.echo(f"Total:        {yocto_to_near(result.total)} NEAR")
    click.echo(f"Available:    {yocto_to_near(result.available)} NEAR")
    click.echo(f"Staked:       {yocto_to_near(result.staked)} NEAR")
    click.echo(f"State staked: {yocto_to_near(result.state_staked)} NEAR")


@cli.command()
@click.argument('method')
@click.option('--args', 'args_json', default='{}', help='JSON encoded arguments')
@click.option('--contract', 'contract_id', default=None, help='Contract id (defaults to configured contract)')
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='WARNING', help='Log level')
def view(method: str, args_json: str, contract_id: Optional[str], config_path: Optional[str], log_level: str):
    """Call a read-only contract method"""
    config = _setup(config_path, log_level)
    orchestrator = DeploymentOrchestrator(config)

    try:
        args = json.loads(args_json)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"--args is not valid JSON: {e}")

    result = _run(orchestrator.view(method, args, contract_id=contract_id))
    click.echo(json.dumps(result, indent=2, default=str))


@cli.command()
@click.option('--account', 'account_id', default=None, help='Master account (defaults to configured account)')
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def pipeline(account_id: Optional[str], config_path: Optional[str], log_level: str):
    """Run the configured deployment pipeline"""
    config = _setup(config_path, log_level)
    config = replace(config, account_id=account_id or config.account_id)

    issues = config.validate()
    if issues:
        click.echo("Configuration validation issues:")
        for issue in issues:
            click.echo(f"  - {issue}")
        raise click.ClickException("Invalid configuration")
    if not config.deployment.steps:
        raise click.ClickException("No deployment steps configured")

    orchestrator = DeploymentOrchestrator(config)
    result = _run(DeploymentPipeline(orchestrator).run(account_id))

    click.echo(f"\n{'='*80}")
    for step in result.steps:
        marker = {StepStatus.SUCCESS: "✅", StepStatus.FAILED: "❌", StepStatus.SKIPPED: "⏭"}[step.status]
        line = f"{marker} {step.step}: {step.status.value}"
        if step.error:
            line += f" ({step.error})"
        click.echo(line)
    click.echo(f"{'='*80}\n")

    if not result.ok:
        raise click.ClickException("Deployment pipeline failed")


@cli.command()
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
def validate(config_path: Optional[str]):
    """Validate the deployer configuration"""
    config = _setup(config_path, 'WARNING')
    issues = config.validate()
    if issues:
        for issue in issues:
            click.echo(f"  - {issue}")
        raise click.ClickException(f"{len(issues)} configuration issue(s)")
    click.echo(f"Configuration OK: {config.account_id} on {config.network_id} ({config.rpc_url})")


@cli.command()
@click.option('--host', default=None, help='Host to bind to')
@click.option('--port', type=int, default=None, help='Port to bind to')
@click.option('--config', 'config_path', default=None, help='Path to deployer config YAML')
@click.option('--log-level', default='INFO', help='Log level')
def serve(host: Optional[str], port: Optional[int], config_path: Optional[str], log_level: str):
    """Run the HTTP API"""
    from ..api.main import serve as serve_api
    serve_api(config_path, host, port, log_level)


if __name__ == '__main__':
    cli()
