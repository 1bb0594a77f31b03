#!/usr/bin/env python3
"""
TFUPGRADER ENGINE - The High Orchestrator
-----------------------------------------
The UpgradeEngine manages the lifecycle of a Terraform file through
discovery, transformation and persistence. It ensures atomic,
permission-preserving writes and keeps one file's failure from stopping
the rest of the run.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

import os
import shutil
import stat
import time
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from tfupgrader.core.models import DiscoveryError, HclParseError, TransformResult
from tfupgrader.upgrade.pipeline import UpgradePipeline

logger = logging.getLogger("tfupgrader.engine")

TERRAFORM_EXTENSION = ".tf"
UPGRADED_MARKER = "_upgraded"
EXCLUDED_DIRS = {".terraform"}
BACKUP_SUFFIX = ".tfupgrade.backup"
TEMP_SUFFIX = ".tfupgrade.tmp"

REVIEW_HINT = (
    "Please review variables named 'model', 'model_name', or containing 'model_name' "
    "to ensure they use UUIDs instead of names where appropriate."
)


def discover_terraform_files(target: Union[str, Path]) -> List[Path]:
    """
    Finds the .tf files to process under `target`.

    A file path is returned as-is. Directories are walked recursively,
    skipping `.terraform` and any path marked as an upgrade output.
    """
    path = Path(target)
    try:
        path.stat()
    except OSError as e:
        raise DiscoveryError(f"error accessing target: {e}") from e

    if not path.is_dir():
        return [path]

    def _on_error(err: OSError):
        raise DiscoveryError(f"error walking directory: {err}") from err

    files = []
    for root, dirs, names in os.walk(path, onerror=_on_error):
        dirs[:] = sorted(d for d in dirs if d not in EXCLUDED_DIRS)
        for name in sorted(names):
            candidate = Path(root) / name
            if name.endswith(TERRAFORM_EXTENSION) and UPGRADED_MARKER not in str(candidate):
                files.append(candidate)
    return files


class UpgradeEngine:
    """
    Principal orchestrator for upgrading Terraform configurations.
    Only files the pipeline actually upgraded are ever written.
    """

    def __init__(self, dry_run: bool = False, backup: bool = False,
                 pipeline: Optional[UpgradePipeline] = None):
        self.dry_run = dry_run
        self.backup = backup
        self.pipeline = pipeline or UpgradePipeline()

    def process_file(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Performs a full read / transform / write cycle on a single file.
        """
        path = Path(file_path)

        try:
            mode = stat.S_IMODE(path.stat().st_mode)
            source = path.read_bytes()
            result = self.pipeline.transform(source, str(path))
        except HclParseError as e:
            logger.error(f"Error transforming {path}: {e}")
            return self._file_error(path, "PARSE_ERROR", str(e))
        except OSError as e:
            logger.error(f"Error reading {path}: {e}")
            return self._file_error(path, "IO_ERROR", str(e))
        except Exception as e:
            logger.error(f"Error processing {path}: {e}")
            return self._file_error(path, "ENGINE_ERROR", str(e))

        report = self._build_report(path, source, result)

        if result.was_upgraded and not self.dry_run:
            if self.backup:
                backup_path = self._create_unique_backup(path)
                try:
                    shutil.copy2(path, backup_path)
                    report["backup_created"] = str(backup_path)
                except OSError as e:
                    report["backup_warning"] = f"Backup failed: {e}"

            try:
                self._atomic_write(path, result.modified_content, mode)
                report["written"] = True
                logger.info(f"Upgraded {path}")
            except IOError as e:
                logger.error(f"Error writing {path}: {e}")
                report["write_error"] = str(e)
                report["status"] = "WRITE_ERROR"
                report["success"] = False

        return report

    def run(self, target: Union[str, Path],
            progress_callback: Optional[Callable[[int, int], None]] = None) -> List[Dict[str, Any]]:
        """
        Discovers and processes every file under `target` sequentially.
        Raises DiscoveryError when the target itself is unusable.
        """
        files = discover_terraform_files(target)
        reports = []
        for processed, file_path in enumerate(files, 1):
            reports.append(self.process_file(file_path))
            if progress_callback:
                progress_callback(processed, len(files))
        return reports

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        upgraded = sum(1 for r in reports if r.get("upgraded", False))
        warnings = sum(r.get("warnings", 0) for r in reports)
        errors = sum(1 for r in reports if not r.get("success", False))

        return {
            "total_files": len(reports),
            "upgraded": upgraded,
            "written_to_disk": sum(1 for r in reports if r.get("written", False)),
            "total_warnings": warnings,
            "errors": errors,
            "hint": REVIEW_HINT if warnings else None,
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _build_report(self, path: Path, source: bytes, result: TransformResult) -> Dict[str, Any]:
        return {
            "file_path": str(path),
            "status": self._derive_status(result),
            "success": True,
            "upgraded": result.was_upgraded,
            "warnings": result.warnings,
            "changes": [change.message for change in result.changes],
            "advisories": [
                {
                    "location": advisory.location(),
                    "message": advisory.message,
                    "description": advisory.description,
                }
                for advisory in result.advisories
            ],
            "written": False,
            "backup_created": None,
            "original_content": source.decode("utf-8", errors="replace"),
            "upgraded_content": result.modified_content.decode("utf-8") if result.was_upgraded else None,
        }

    def _derive_status(self, result: TransformResult) -> str:
        if result.was_upgraded:
            return "PREVIEW" if self.dry_run else "UPGRADED"
        if result.warnings:
            return "REVIEW"
        return "UNCHANGED"

    def _atomic_write(self, target_path: Path, content: bytes, mode: int):
        if not os.access(target_path.parent, os.W_OK):
            raise PermissionError(f"No write access to {target_path.parent}")
        temp_file = target_path.with_name(target_path.name + TEMP_SUFFIX)
        try:
            temp_file.write_bytes(content)
            os.chmod(temp_file, mode)
            os.replace(temp_file, target_path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise IOError(f"Atomic write failed: {e}") from e

    def _create_unique_backup(self, target_path: Path) -> Path:
        backup_path = target_path.with_name(target_path.name + BACKUP_SUFFIX)
        counter = 1
        while backup_path.exists():
            backup_path = target_path.with_name(f"{target_path.name}-{counter}{BACKUP_SUFFIX}")
            counter += 1
        return backup_path

    def _file_error(self, path: Path, status: str, error: str) -> Dict[str, Any]:
        return {
            "file_path": str(path), "status": status, "error": error,
            "success": False, "upgraded": False, "warnings": 0,
            "changes": [], "advisories": [], "written": False,
        }
