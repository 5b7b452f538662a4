"""Main CLI entrypoint for sandboxbot."""

import json
import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional

import click

from ..cf.client import CloudFoundryClient
from ..cleanup.age import parse_timestamp
from ..config import Settings, load_settings
from ..errors import ConfigError, SandboxBotError
from ..sweep import SandboxSweeper, SweepReport


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """Sandboxbot - notify and purge aging sandbox spaces."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


def _parse_now(ctx, param, value: Optional[str]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _build_sweeper(settings: Settings) -> SandboxSweeper:
    client = CloudFoundryClient(settings.cf_api_url, settings.cf_token, timeout=settings.cf_timeout)
    return SandboxSweeper(client, settings)


def _load_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        _fail(str(e), exit_code=2)


def _fail(error_msg: str, exit_code: int = 1) -> None:
    if click.get_current_context().obj.get('json', False):
        _json_output({'error': error_msg})
    else:
        click.echo(f"❌ {error_msg}", err=True)
    sys.exit(exit_code)


@main.command()
@click.option('--now', callback=_parse_now, help='Reference time (RFC 3339), defaults to now')
@click.pass_context
def report(ctx, now):
    """Show which spaces would be notified or purged."""
    settings = _load_or_exit()
    sweeper = _build_sweeper(settings)

    try:
        result = sweeper.run(now=now, dry_run=True)
    except SandboxBotError as e:
        _fail(f"Report failed: {e}")

    _print_report(result)
    sys.exit(1 if result.failed else 0)


@main.command()
@click.option('--now', callback=_parse_now, help='Reference time (RFC 3339), defaults to now')
@click.option('--dry-run', is_flag=True, help='Classify only; send no mail and delete nothing')
@click.pass_context
def run(ctx, now, dry_run):
    """Notify owners of aging spaces and purge expired ones."""
    settings = _load_or_exit()
    sweeper = _build_sweeper(settings)

    try:
        result = sweeper.run(now=now, dry_run=dry_run)
    except SandboxBotError as e:
        _fail(f"Sweep failed: {e}")

    _print_report(result)
    sys.exit(1 if result.failed else 0)


def _print_report(result: SweepReport) -> None:
    """Print a sweep report as JSON or human-readable text."""
    if click.get_current_context().obj.get('json', False):
        _json_output(result.to_dict())
        return

    mode = " (dry run)" if result.dry_run else ""
    _human_output(f"📊 Sweep at {result.now.isoformat()}{mode}")

    for org_report in result.orgs:
        _human_output(f"\nOrg: {click.style(org_report.org.name, bold=True)}")
        for details in org_report.to_notify:
            _human_output(f"  {click.style('notify', fg='yellow')} {details.space.name} (since {details.timestamp.date()})")
        for details in org_report.to_purge:
            _human_output(f"  {click.style('purge', fg='red')}  {details.space.name} (since {details.timestamp.date()})")
        if not result.dry_run:
            _human_output(
                f"  notified={len(org_report.notified)} purged={len(org_report.purged)} "
                f"recreated={len(org_report.recreated)}"
            )
        for error in org_report.errors:
            _human_output(f"  {click.style('error', fg='red')}  {error}")

    if result.failed:
        _human_output("\n❌ Sweep finished with errors")
    else:
        _human_output("\n✅ Sweep finished")


if __name__ == '__main__':
    main()
