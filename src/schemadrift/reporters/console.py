"""Rich console reporter for validation reports."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..checks.models import CheckResult, CheckStatus
from ..report.models import Report
from ..schema.models import SchemaDefinition
from ..sources.base import DataSourceAdapter

STATUS_STYLES: dict[CheckStatus, tuple[str, str]] = {
    CheckStatus.PASS: ("✅", "green"),
    CheckStatus.FAIL: ("❌", "red"),
    CheckStatus.ERROR: ("💥", "red"),
    CheckStatus.SKIPPED: ("⏭️", "dim"),
}


class ConsoleReporter:
    """Format and display a validation report in the console.

    Uses Rich for colorful, formatted output with one table per field.
    """

    def __init__(
        self,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        self.console = console or Console()
        self.verbose = verbose

    def report_start(self, schema: SchemaDefinition, source: DataSourceAdapter) -> None:
        """Report the start of a run."""
        mode = "strict" if schema.strict_mode else "lenient"
        self.console.print()
        self.console.print(
            f"[bold cyan]🔎 Validating {source!r}[/bold cyan] "
            f"[dim]({len(schema.rules)} fields, {mode})[/dim]"
        )
        self.console.print("[dim]" + "━" * 50 + "[/dim]")

    def report_result(self, report: Report) -> None:
        """Report every field, then the summary."""
        for field_report in report.fields:
            icon, color = STATUS_STYLES[field_report.status]
            if field_report.status == CheckStatus.PASS and not self.verbose:
                self.console.print(f"  {icon} [bold]{field_report.field}[/bold]")
                continue

            self.console.print(
                f"  {icon} [bold {color}]{field_report.field}[/bold {color}]"
            )
            self.console.print("     ", self._checks_table(field_report.checks))

        if report.schema_extras:
            self.console.print(
                f"  ❌ [bold red]unexpected columns:[/bold red] {', '.join(report.schema_extras)}"
            )
        for result in report.schema_checks:
            if result.status == CheckStatus.ERROR:
                self.console.print(f"  💥 [red]{result.check.kind.value}: {result.message}[/red]")

        self._report_summary(report)

    def _checks_table(self, checks: list[CheckResult]) -> Table:
        table = Table(show_header=True, header_style="bold", padding=(0, 1))
        table.add_column("rule")
        table.add_column("status")
        table.add_column("violations", justify="right")
        table.add_column("details")

        for result in checks:
            _, color = STATUS_STYLES[result.status]
            details = result.message or ""
            if result.samples:
                details += f" e.g. {', '.join(str(s) for s in result.samples)}"
            table.add_row(
                result.check.kind.value,
                f"[{color}]{result.status.value}[/{color}]",
                str(result.violations),
                details,
            )
        return table

    def _report_summary(self, report: Report) -> None:
        summary = report.summary
        self.console.print("[dim]" + "━" * 50 + "[/dim]")

        parts = [f"[bold]{summary.total_checks}[/bold] checks"]
        if summary.passed:
            parts.append(f"[green]{summary.passed} passed ✅[/green]")
        if summary.failed:
            parts.append(f"[red]{summary.failed} failed ❌[/red]")
        if summary.errored:
            parts.append(f"[red]{summary.errored} errored 💥[/red]")
        if summary.skipped:
            parts.append(f"[dim]{summary.skipped} skipped ⏭️[/dim]")
        self.console.print(f"[bold]📊 Summary:[/bold] {' | '.join(parts)}")
        self.console.print()

        if report.passed:
            self.console.print("[bold green]No drift detected 🎉[/bold green]")
        elif report.status == CheckStatus.FAIL:
            self.console.print("[bold red]Schema drift detected[/bold red]")
        else:
            self.console.print("[bold red]Some checks could not be evaluated[/bold red]")
        self.console.print()

    def report_error(self, message: str) -> None:
        """Report a fatal error."""
        self.console.print(f"[bold red]Error:[/bold red] {message}")
