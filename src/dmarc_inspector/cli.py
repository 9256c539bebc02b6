"""dmarc-inspector CLI: look up, parse and generate DMARC / SPF / DKIM records."""

import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler

from .config import Settings
from .dns_fetcher import RecordLookup, create_fetcher
from .exceptions import DmarcInspectorError
from .inspector import inspect_record
from .models import DmarcConfig, DmarcPolicy
from .record_generator import RecordGenerator
from .report_json import JsonReporter
from .report_text import TextReporter

RECORD_TYPES = click.Choice(["dmarc", "spf", "dkim"], case_sensitive=False)
FORMATS = click.Choice(["text", "json"])
POLICIES = click.Choice([p.value for p in DmarcPolicy])


@click.group()
@click.version_option(version="0.1.0", prog_name="dmarc-inspector")
@click.option("-v", "--verbose", is_flag=True, help="Log DNS activity to stderr.")
def cli(verbose: bool):
    """DMARC Inspector: DNS record interpreter for DMARC, SPF and DKIM.

    Parses a TXT record into annotated tags, validates it and suggests
    hardening steps.
    """
    level = logging.DEBUG if verbose else Settings.from_env().log_level
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@cli.command("lookup")
@click.argument("record_type", type=RECORD_TYPES)
@click.argument("domain")
@click.option("--selector", default=None, help="DKIM selector (required for dkim).")
@click.option("--format", "output_format", type=FORMATS, default="text", show_default=True)
@click.option("--strict", is_flag=True, help="Exit 1 when the record has error-severity issues.")
def lookup(record_type: str, domain: str, selector: Optional[str], output_format: str, strict: bool):
    """Fetch the RECORD_TYPE record for DOMAIN from DNS and inspect it."""
    try:
        result = RecordLookup(create_fetcher()).lookup(domain, record_type, selector)
    except DmarcInspectorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    report = inspect_record(result.record_type, result.record, result.domain)
    _dispatch_output(report, output_format, result)
    if strict and not (result.found and report.passed):
        sys.exit(1)


@cli.command("parse")
@click.argument("record_type", type=RECORD_TYPES)
@click.argument("record")
@click.option("--domain", default=None, help="Domain used in recommendation text.")
@click.option("--format", "output_format", type=FORMATS, default="text", show_default=True)
@click.option("--strict", is_flag=True, help="Exit 1 when the record has error-severity issues.")
def parse(record_type: str, record: str, domain: Optional[str], output_format: str, strict: bool):
    """Inspect a RECORD string without querying DNS."""
    report = inspect_record(record_type, record, domain)
    _dispatch_output(report, output_format)
    if strict and not report.passed:
        sys.exit(1)


@cli.command("generate")
@click.argument("domain")
@click.option("--policy", type=POLICIES, default="none", show_default=True)
@click.option("--subdomain-policy", type=POLICIES, default=None, help="Omit to inherit --policy.")
@click.option("--pct", type=int, default=100, show_default=True)
@click.option("--rua", multiple=True, help="Aggregate report address (repeatable).")
@click.option("--ruf", multiple=True, help="Failure report address (repeatable).")
@click.option("--adkim", type=click.Choice(["r", "s"]), default="r", show_default=True)
@click.option("--aspf", type=click.Choice(["r", "s"]), default="r", show_default=True)
@click.option("--ri", type=int, default=86400, show_default=True, help="Report interval in seconds.")
@click.option("--fo", default="0", show_default=True, help="Failure reporting options.")
@click.option("--format", "output_format", type=FORMATS, default="text", show_default=True)
def generate(domain, policy, subdomain_policy, pct, rua, ruf, adkim, aspf, ri, fo, output_format):
    """Build a DMARC record for DOMAIN."""
    config = DmarcConfig(
        domain=domain,
        policy=DmarcPolicy(policy),
        subdomain_policy=DmarcPolicy(subdomain_policy) if subdomain_policy else None,
        percentage=pct,
        rua_emails=list(rua),
        ruf_emails=list(ruf),
        dkim_alignment=adkim,
        spf_alignment=aspf,
        report_interval=ri,
        failure_options=fo,
    )
    generator = RecordGenerator()
    try:
        spec = generator.record_spec(config)
        issues = generator.warnings(config)
    except DmarcInspectorError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(JsonReporter().render_generated(spec, issues))
    else:
        TextReporter().render_generated(spec, issues)


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=8000, show_default=True, type=int, help="Listen port.")
@click.option(
    "--api-key",
    envvar="DMARC_INSPECTOR_API_KEY",
    required=True,
    help="Bearer token for API authentication. Also read from DMARC_INSPECTOR_API_KEY.",
)
@click.option("--workers", default=1, show_default=True, type=int, help="Uvicorn worker count.")
def serve(host: str, port: int, api_key: str, workers: int):
    """Start the REST API server.

    Requires the [api] optional dependencies:

        pip install 'dmarc-inspector[api]'
    """
    try:
        import uvicorn  # noqa: PLC0415
    except ImportError:
        click.echo("Error: uvicorn is not installed. Run: pip install 'dmarc-inspector[api]'", err=True)
        sys.exit(1)

    import os  # noqa: PLC0415

    os.environ["DMARC_INSPECTOR_API_KEY"] = api_key
    click.echo(f"Starting DMARC Inspector API on http://{host}:{port}", err=True)
    uvicorn.run("dmarc_inspector.api_server:app", host=host, port=port, workers=workers, log_level="info")


def _dispatch_output(report, output_format: str, lookup=None) -> None:
    if output_format == "json":
        click.echo(JsonReporter().render(report, lookup))
    else:
        TextReporter().render(report, lookup)


if __name__ == "__main__":
    cli()
