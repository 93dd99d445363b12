"""
Command Line Interface for ecsctl.
"""
import signal

import click
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from .. import __version__
from ..CLIENTS.cluster_client import ClusterClient, EcsClusterClient
from ..CLIENTS.session import create_ecs_client
from ..CONFIG.settings import Settings, load_settings
from ..MANAGERS.rolling_update import RollingUpdateOrchestrator
from ..MODELS.update_plan import TimeoutPolicy, UpdatePlan
from ..STRATEGIES.slot_naming import STRATEGIES, get_strategy
from ..UTILS.logging_setup import configure_logging
from ..exceptions import RolloutCancelledError, RolloutError

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']
CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_client(settings: Settings) -> ClusterClient:
    """
    Creates the ECS-backed cluster client for the configured region.
    """
    ecs = create_ecs_client(settings.region, profile=settings.profile)
    return EcsClusterClient(ecs, cluster=settings.cluster)


@click.group()
@click.option('--cluster', default=None, help='ECS cluster [default: default]')
@click.option('--region', envvar='AWS_DEFAULT_REGION', default=None, help='AWS region')
@click.option('--profile', default=None, help='AWS credentials profile')
@click.option('--config', 'config_path', default=None, type=click.Path(dir_okay=False),
              help='YAML config file [default: ./ecsctl.yml if present]')
@click.option('--log-level', default=None, type=click.Choice(LOG_LEVELS, case_sensitive=False))
@click.version_option(__version__, prog_name='ecsctl')
@click.pass_context
def cli(ctx, cluster, region, profile, config_path, log_level):
    """
    ecsctl - rolling updates for ECS services.

    Moves capacity from a running service to a new one task by task,
    then deletes the old service.
    """
    ctx.ensure_object(dict)
    try:
        settings = load_settings(config_path)
        settings = settings.merge({
            'cluster': cluster,
            'region': region,
            'profile': profile,
            'log_level': log_level,
        })
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    configure_logging(settings.log_level)
    ctx.obj['settings'] = settings


@cli.command('rolling-update')
@click.argument('service', required=False)
@click.argument('next_service', required=False)
@click.option('--strategy', type=click.Choice(sorted(STRATEGIES)), default='colour', show_default=True,
              help='colour: alternate <service>-blue/-green; explicit: roll SERVICE into NEXT_SERVICE')
@click.option('--image', default=None, help='Replace the container image')
@click.option('--timeout', type=int, default=None, help='Seconds to wait for each scale step [default: 60]')
@click.option('--update-period', type=int, default=None, help='Seconds between scale steps [default: 30]')
@click.option('--instance-count', type=int, default=None,
              help='Final task count [default: running count of SERVICE]')
@click.option('--on-timeout', type=click.Choice([p.value for p in TimeoutPolicy]), default=None,
              help='What to do when a step does not converge in time [default: proceed]')
@click.pass_context
def rolling_update(ctx, service, next_service, strategy, image, timeout, update_period, instance_count, on_timeout):
    """Roll SERVICE over to a new service, one task at a time."""
    try:
        settings = ctx.obj['settings'].merge({
            'timeout': timeout,
            'update_period': update_period,
            'timeout_policy': on_timeout,
        })
    except ValidationError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    if not service:
        click.echo("invalid service name")
        ctx.exit(1)
    if not settings.region:
        click.echo("invalid aws region")
        ctx.exit(1)
    if next_service and next_service == service:
        click.echo("previous and next service names must differ")
        ctx.exit(1)
    if strategy == 'explicit' and not next_service:
        click.echo("the explicit strategy needs a next service name")
        ctx.exit(1)
    if strategy == 'colour' and next_service:
        click.echo("the colour strategy derives the next service name; use --strategy explicit")
        ctx.exit(1)

    try:
        plan = UpdatePlan(
            previous_slot_name=service,
            next_slot_name=next_service,
            image_override=image,
            desired_final_count=instance_count,
            convergence_timeout=settings.timeout,
            step_interval=settings.update_period,
            timeout_policy=settings.timeout_policy,
        )
    except ValidationError as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)

    orchestrator = RollingUpdateOrchestrator(build_client(settings), get_strategy(strategy))
    previous_handlers = {
        signum: signal.signal(signum, lambda signum, frame: orchestrator.cancel())
        for signum in CANCEL_SIGNALS
    }
    try:
        result = orchestrator.run(plan)
    except RolloutCancelledError as e:
        click.echo(f"Cancelled: {e}. Services may be left partially rolled over.")
        ctx.exit(130)
    except (RolloutError, ValueError, ClientError, BotoCoreError) as e:
        click.echo(f"Error: {e}")
        ctx.exit(1)
    finally:
        for signum, handler in previous_handlers.items():
            signal.signal(signum, handler)

    click.echo(
        f"Rolled {result.previous_slot} -> {result.next_slot}: "
        f"{result.target_count} tasks on {result.task_definition_ref}"
    )


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
