"""CLI commands"""
import logging

import click
from tabulate import tabulate

from .. import db
from ..config import load_settings
from ..errors import LedgerError, RelayError
from ..handlers import JOB_CREATED
from ..ledger import fullnode_client
from ..poller import module_filter


def configure_logging(settings):
    logging.basicConfig(
        level=settings.LOGGING.level,
        format=settings.LOGGING.format,
    )


def _fmt(value):
    return value.strftime('%Y-%m-%d %H:%M:%S') if value else '-'


@click.group()
@click.option('--config', 'config_path', envvar='RELAY_ENGINE_CONFIG', help='YAML config file')
@click.pass_context
def cli(ctx, config_path):
    """Ledger job relay: event ingestion and training pipeline"""
    settings = load_settings(config_path)
    configure_logging(settings)
    db.init_db(**settings.DATABASE.bind_kwargs())
    ctx.obj = settings


@cli.command()
@click.pass_obj
def run(settings):
    """Start the polling loops and the health endpoint"""
    from ..service import run as run_service
    run_service(settings)


@cli.command()
@click.option('--status', type=click.Choice(db.JOB_STATUSES), help='Only jobs with this status')
def jobs(status):
    """List local jobs"""
    rows = [
        [job.id, job.creator, job.pool_id, int(job.price), job.status, _fmt(job.created_at)]
        for job in db.list_jobs(status)
    ]
    if rows:
        click.echo(tabulate(rows, headers=['ID', 'Creator', 'Pool', 'Price', 'Status', 'Created'],
                            tablefmt='grid'))
    else:
        click.echo("No jobs found")


@cli.command()
@click.argument('job_id', type=int)
def status(job_id):
    """Show the details of one job"""
    job = db.get_job(job_id)
    if job is None:
        raise click.ClickException(f"Job {job_id} not found")

    click.echo(f"Job: {job.id}")
    click.echo(f"Creator: {job.creator}")
    click.echo(f"Pool: {job.pool_id}")
    click.echo(f"Price: {int(job.price)}")
    click.echo(f"Epochs: {job.epochs}")
    click.echo(f"Learning rate: {job.learning_rate}")
    click.echo(f"Status: {job.status}")
    click.echo(f"Model config blob: {job.model_config_blob_id or '-'}")
    click.echo(f"Created: {_fmt(job.created_at)}")
    click.echo(f"Started: {_fmt(job.started_at)}")
    click.echo(f"Completed: {_fmt(job.completed_at)}")
    if job.tx_digest:
        click.echo(f"Transaction: {job.tx_digest}")
    if job.error_message:
        click.echo(f"Error: {job.error_message}")


@cli.command()
def cursors():
    """List saved event cursors"""
    rows = [
        [c['event_type'], c['tx_digest'], c['event_seq'], c['updated_at']]
        for c in db.list_cursors()
    ]
    if rows:
        click.echo(tabulate(rows, headers=['Event type', 'Tx digest', 'Seq', 'Updated'],
                            tablefmt='grid'))
    else:
        click.echo("No cursors saved, polling starts from genesis")


@cli.command('reset-cursors')
@click.confirmation_option(prompt='Delete all cursors and replay every event from genesis?')
def reset_cursors():
    """Delete all event cursors (replay history)"""
    count = db.reset_cursors()
    click.echo(f"Deleted {count} cursors")
    click.echo("The relay engine will start from the beginning on its next poll")


@cli.command()
@click.option('--limit', default=10, show_default=True, help='Number of events')
@click.pass_obj
def events(settings, limit):
    """Show the most recent events of the tracked module"""
    ledger = settings.LEDGER
    click.echo(f"Network: {ledger.network}  Package: {ledger.package_id}  Module: {ledger.module}")

    with fullnode_client(ledger) as client:
        try:
            page = client.query_events(
                module_filter(ledger.package_id, ledger.module), limit=limit, descending=True,
            )
        except LedgerError as e:
            raise click.ClickException(f"Event query failed: {e}")

    if not page.data:
        click.echo("No events found; check the package id, module name and network")
        return

    rows = [
        [event.name, event.id.tx_digest, event.id.event_seq, event.timestamp_ms or '-']
        for event in page.data
    ]
    click.echo(tabulate(rows, headers=['Event', 'Tx digest', 'Seq', 'Timestamp (ms)'],
                        tablefmt='grid'))
    if not any(event.name == JOB_CREATED for event in page.data):
        click.echo(f"No {JOB_CREATED} events among the latest {len(page.data)}")


@cli.command()
@click.argument('job_id', type=int)
@click.pass_obj
def resume(settings, job_id):
    """Run the pipeline for a job left in PENDING"""
    job = db.get_job(job_id)
    if job is None:
        raise click.ClickException(f"Job {job_id} not found")
    if job.status != db.PENDING:
        raise click.ClickException(f"Job {job_id} is {job.status}, only PENDING jobs can be resumed")

    from ..service import RelayService
    service = RelayService(settings)
    try:
        receipt = service.pipeline.run(job_id)
    except RelayError as e:
        raise click.ClickException(f"Job {job_id} failed: {e}")
    finally:
        service.stop()
    click.echo(f"Job {job_id} completed: {receipt.digest}")
