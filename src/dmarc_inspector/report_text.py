"""Rich terminal renderer for inspection reports and generated records."""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import DnsRecordSpec, LookupResult, RecordReport, Severity, TagStatus

STATUS_STYLE = {
    TagStatus.GOOD:    "green",
    TagStatus.WARNING: "yellow",
    TagStatus.ERROR:   "bold red",
    TagStatus.INFO:    "blue",
}

SEVERITY_STYLE = {
    Severity.ERROR:   "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO:    "blue",
}


class TextReporter:
    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    def render(self, report: RecordReport, lookup: Optional[LookupResult] = None) -> None:
        c = self._console
        title = report.record_type.value.upper()
        target = f": {lookup.lookup_domain}" if lookup else ""
        c.print()
        c.print(Panel(f"[bold]{title} RECORD{target}[/bold]", style="bold blue", expand=False))

        if report.raw_record is None:
            message = lookup.error if lookup and lookup.error else f"No {title} record found."
            c.print(f"\n[red]{escape(message)}[/red]")
            self._render_recommendations(report.recommendations)
            return

        c.print("\n[bold]Record:[/bold] ", end="")
        c.print(Text(report.raw_record, style="bold"))

        self._render_tags(report.tags)
        self._render_issues(report)
        self._render_recommendations(report.recommendations)

    def render_generated(self, spec: DnsRecordSpec, issues: list) -> None:
        c = self._console
        c.print()
        c.print(Panel("[bold]GENERATED DMARC RECORD[/bold]", style="bold blue", expand=False))
        c.print(f"Type: {spec.record_type}")
        c.print(f"Name: {escape(spec.name)}")
        c.print("Value: ", end="")
        c.print(Text(spec.value, no_wrap=True, style="bold green"))
        for issue in issues:
            style = SEVERITY_STYLE[issue.severity]
            c.print(f"  [{style}]{issue.severity.value.upper()}[/{style}] {escape(issue.message)}")

    # ── Sections ───────────────────────────────────────────────────────────────

    def _render_tags(self, tags: list) -> None:
        c = self._console
        c.print("\n[bold]## TAGS[/bold]")
        if not tags:
            c.print("[dim]No tags found.[/dim]")
            return

        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("Tag", width=10)
        table.add_column("Value")
        table.add_column("Meaning")
        table.add_column("Status", width=8)
        for tag in tags:
            style = STATUS_STYLE[tag.status]
            table.add_row(Text(tag.tag), Text(tag.value), Text(tag.description), f"[{style}]{tag.status.value}[/{style}]")
        c.print(table)

    def _render_issues(self, report: RecordReport) -> None:
        c = self._console
        c.print("\n[bold]## VALIDATION[/bold]")
        if report.passed:
            c.print("[green]Record is valid.[/green]")
        for issue in report.issues:
            style = SEVERITY_STYLE[issue.severity]
            field = f" ({escape(issue.field)})" if issue.field else ""
            c.print(f"  [{style}]{issue.severity.value.upper()}[/{style}]{field} {escape(issue.message)}")

    def _render_recommendations(self, recommendations: list) -> None:
        if not recommendations:
            return
        c = self._console
        c.print("\n[bold]## RECOMMENDATIONS[/bold]")
        for i, rec in enumerate(recommendations, 1):
            c.print(f"  {i}. {escape(rec)}")
