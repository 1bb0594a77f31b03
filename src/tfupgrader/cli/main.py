#!/usr/bin/env python3
"""
TFUPGRADER CLI
--------------
Primary interface: discovers .tf files under a path, upgrades them in
place and prints every change and advisory, followed by a summary.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

import sys
import argparse
import logging
from typing import List, Optional

from rich.panel import Panel

from tfupgrader.cli.formatter import UpgradeFormatter, console
from tfupgrader.cli.report import ReportExporter
from tfupgrader.core.engine import UpgradeEngine, discover_terraform_files
from tfupgrader.core.models import DiscoveryError

VERSION = "1.0.0"


class TfUpgraderCLI:
    """
    CLI wrapper that translates user commands into engine actions.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="juju-tf-upgrader",
            description="Upgrade Terraform configurations from Juju provider 0.x to 1.x",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.formatter = UpgradeFormatter()
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-V", "--version", action="version", version=f"juju-tf-upgrader {VERSION}")
        self.parser.add_argument("path", help="Terraform file or directory to upgrade")
        self.parser.add_argument("--dry-run", action="store_true", help="Report changes without writing files")
        self.parser.add_argument("--diff", action="store_true", help="Show a unified diff for each upgraded file")
        self.parser.add_argument("--backup", action="store_true", help="Keep a copy of every file before rewriting it")
        self.parser.add_argument("--report", metavar="FILE", help="Write a YAML report of the run to FILE")
        self.parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    def run(self, argv: Optional[List[str]] = None) -> int:
        args = self.parser.parse_args(argv)
        logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

        try:
            files = discover_terraform_files(args.path)
        except DiscoveryError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            return 1

        if not files:
            console.print("No .tf files found to process")
            return 0

        self.formatter.show_discovery(files)

        engine = UpgradeEngine(dry_run=args.dry_run, backup=args.backup)
        reports = []
        for file_path in files:
            report = engine.process_file(file_path)
            reports.append(report)
            self.formatter.show_file_report(report)

            if args.diff and report.get("upgraded_content"):
                self.formatter.display_diff(
                    report["original_content"], report["upgraded_content"], report["file_path"]
                )

        summary = engine.generate_summary(reports)
        self.formatter.print_summary(reports, summary)

        if args.report:
            ReportExporter().write(args.report, reports, summary)
            console.print(Panel.fit(f"Report written to {args.report}", border_style="dim"))

        return 0


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(TfUpgraderCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
