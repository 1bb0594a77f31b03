#!/usr/bin/env python3
"""
TFUPGRADER REPORT EXPORTER
--------------------------
Writes a machine-readable YAML record of a run (per-file outcome, changes,
advisories and the summary) for CI pipelines and change reviews.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

from pathlib import Path
from typing import Any, Dict, List, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

# Bulky fields that only matter for the interactive diff
EXCLUDED_FIELDS = ("original_content", "upgraded_content")


class ReportExporter:
    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def _to_commented(self, data: Any) -> Any:
        if isinstance(data, dict):
            mapped = CommentedMap()
            for key, value in data.items():
                if key in EXCLUDED_FIELDS:
                    continue
                mapped[key] = self._to_commented(value)
            return mapped
        if isinstance(data, (list, tuple)):
            return CommentedSeq(self._to_commented(item) for item in data)
        return data

    def build(self, reports: List[Dict[str, Any]], summary: Dict[str, Any]) -> CommentedMap:
        document = CommentedMap()
        document["summary"] = self._to_commented(summary)
        document["files"] = self._to_commented(reports)
        document.yaml_set_start_comment("juju-tf-upgrader run report")
        return document

    def write(self, path: Union[str, Path], reports: List[Dict[str, Any]], summary: Dict[str, Any]):
        with open(path, "w", encoding="utf-8") as f:
            self.yaml.dump(self.build(reports, summary), f)
