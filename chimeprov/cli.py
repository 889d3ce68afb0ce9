"""
chimeprov CLI - run lifecycle events locally.

    chimeprov invoke event.json              # against AWS (default credentials)
    chimeprov invoke event.json --dry-run    # against in-memory providers
    chimeprov config                         # show effective configuration

This creates the 'chimeprov' command via entry point in pyproject.toml.
"""

import asyncio
import json
from pathlib import Path

import click

from chimeprov.core.config import ProvisionerConfig
from chimeprov.handler import handle_event
from chimeprov.monitoring.logging import setup_logging
from chimeprov.providers import (
    ChimeTelephonyProvider,
    CloudFormationStackProvider,
    InMemoryStackProvider,
    InMemoryTelephonyProvider,
)

DRY_RUN_NUMBER = "+15555550100"


def _load_config(config_file: str | None) -> ProvisionerConfig:
    if config_file:
        return ProvisionerConfig.from_file(config_file)
    return ProvisionerConfig.from_env()


async def _invoke(event: dict, config: ProvisionerConfig, dry_run: bool, region: str | None):
    if dry_run:
        telephony = InMemoryTelephonyProvider(available_numbers=[DRY_RUN_NUMBER])
        stacks = InMemoryStackProvider(
            {event.get("StackId", ""): {"smaID": "sma-0001", "sipRuleID": "rule-0001"}}
        )
        return await handle_event(event, telephony, stacks, config, sleep=_no_sleep)

    region = region or (event.get("ResourceProperties") or {}).get("region")
    async with ChimeTelephonyProvider(
        region_name=region, service_name=config.chime_service_name
    ) as telephony, CloudFormationStackProvider(region_name=region) as stacks:
        return await handle_event(event, telephony, stacks, config)


async def _no_sleep(_seconds: float) -> None:
    return None


@click.group()
@click.version_option(version="0.1.0", prog_name="chimeprov")
def cli():
    """
    chimeprov - Chime SIP media application provisioner.

    \b
    Commands:
        invoke    Run a Create/Update/Delete event and print the response
        config    Print the effective configuration
    """


@cli.command()
@click.argument("event_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Use in-memory providers instead of AWS")
@click.option("--region", default=None, help="Override the region from the event")
@click.option("--config", "config_file", default=None, help="YAML configuration file")
@click.option("--log-level", default=None, help="DEBUG, INFO, WARNING, ERROR")
def invoke(event_file, dry_run, region, config_file, log_level):
    """
    Run a lifecycle event through the provisioner.

    \b
    Example:
        chimeprov invoke events/create.json --dry-run
    """
    config = _load_config(config_file)
    setup_logging(log_level or config.log_level, json_format=config.json_logs)

    event = json.loads(Path(event_file).read_text())
    response = asyncio.run(_invoke(event, config, dry_run, region))
    click.echo(json.dumps(response, indent=2))

    if response.get("Status") != "SUCCESS":
        raise SystemExit(1)


@cli.command(name="config")
@click.option("--config", "config_file", default=None, help="YAML configuration file")
def show_config(config_file):
    """Print the effective configuration as JSON."""
    config = _load_config(config_file)
    click.echo(json.dumps(config.to_dict(), indent=2))


def main():  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
