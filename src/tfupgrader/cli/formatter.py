# src/tfupgrader/cli/formatter.py
import difflib
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

# Initialize the Rich console for high-quality terminal output
console = Console()


class UpgradeFormatter:
    """
    UpgradeFormatter: the visual side of the CLI.
    Renders per-file change logs, advisories, diffs and the final summary.
    """

    def __init__(self, output: Console = None):
        self.console = output or console

    def show_discovery(self, files: List[Any]):
        self.console.print(f"Found {len(files)} Terraform files to process:")
        for file_path in files:
            self.console.print(f"  - {escape(str(file_path))}")
        self.console.print()

    def show_file_report(self, report: Dict[str, Any]):
        """
        Prints what happened to one file: each change, each warning, and a
        closing status line.
        """
        self.console.print(f"Processing: {escape(report['file_path'])}")

        if report.get("error"):
            self.console.print(f"  [bold red]Error transforming file:[/bold red] {escape(report['error'])}")
            return

        for change in report.get("changes", []):
            self.console.print(f"  [green]✓[/green] {escape(change)}")

        for advisory in report.get("advisories", []):
            self.console.print(
                f"  [bold yellow]⚠️  WARNING:[/bold yellow] {escape(advisory['location'])} - {escape(advisory['message'])}"
            )
            if advisory.get("description"):
                self.console.print(f"      Description: {escape(advisory['description'])}")

        if report.get("write_error"):
            self.console.print(f"  [bold red]Error writing file:[/bold red] {escape(report['write_error'])}")
        elif report.get("written"):
            self.console.print("  [green]✓ File updated successfully[/green]")
        elif report.get("upgraded"):
            self.console.print("  [cyan]• Dry run: file left unchanged[/cyan]")

        if report.get("warnings"):
            self.console.print(f"  ⚠️  {report['warnings']} item(s) flagged for manual review")

        if not report.get("upgraded") and not report.get("warnings"):
            self.console.print("  [dim]- No upgrades needed[/dim]")

    def display_diff(self, original_text: str, upgraded_text: str, file_name: str):
        """
        Calculates and renders a colorized unified diff between the original
        file and its upgraded version.
        """
        if not upgraded_text or not original_text:
            return

        diff_list = list(difflib.unified_diff(
            original_text.splitlines(),
            upgraded_text.splitlines(),
            fromfile=f"Original: {file_name}",
            tofile="Upgraded Version",
            lineterm=""
        ))

        if not diff_list:
            return

        syntax = Syntax("\n".join(diff_list), "diff", theme="monokai", line_numbers=True)
        self.console.print(Panel(
            syntax,
            title=f"Proposed Upgrade: {escape(file_name)}",
            border_style="green"
        ))

    def print_summary(self, reports: List[Dict[str, Any]], summary: Dict[str, Any]):
        """
        Builds the summary table shown at the very end of a run.
        """
        table = Table(title="Upgrade Report", show_header=True, header_style="bold magenta")
        table.add_column("File Path", style="dim")
        table.add_column("Status")
        table.add_column("Changes", justify="right")
        table.add_column("Warnings", justify="right")

        for r in reports:
            status = r.get("status", "FAILED")
            color = "green" if r.get("upgraded") else "red" if not r.get("success") else "white"
            table.add_row(
                escape(r.get("file_path", "")),
                f"[{color}]{status}[/{color}]",
                str(len(r.get("changes", []))),
                str(r.get("warnings", 0)),
            )

        self.console.print(table)
        self.console.print(
            f"\nSummary: {summary['upgraded']} out of {summary['total_files']} files were upgraded"
        )
        if summary["total_warnings"]:
            self.console.print(
                f"[bold yellow]⚠️  Total warnings: {summary['total_warnings']} item(s) "
                f"flagged for manual review across all files[/bold yellow]"
            )
            self.console.print(summary["hint"])
        if summary["errors"]:
            self.console.print(f"[bold red]{summary['errors']} file(s) could not be processed[/bold red]")
