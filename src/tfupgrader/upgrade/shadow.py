#!/usr/bin/env python3
"""
TFUPGRADER SHADOW - The Position Keeper
---------------------------------------
Parses the same source a second time with python-hcl2 to get an
independent, read-only view of the file. The shadow tree is never mutated;
it only answers "which line does block X start on" and acts as the strict
syntax gate before any rewrite happens.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

from typing import Any, Dict

import hcl2
from lark.exceptions import LarkError, UnexpectedInput

from tfupgrader.core.models import HclParseError

START_LINE = "__start_line__"


class PositionShadow:
    """
    Maps block addresses (`kind.label1.label2`) to their 1-based start line.
    """

    def capture(self, text: str, filename: str) -> Dict[str, int]:
        # The grammar only knows LF; line numbers are unaffected
        normalized = text.replace("\r\n", "\n")
        try:
            tree = hcl2.loads(normalized, with_meta=True)
        except UnexpectedInput as e:
            line = e.line if isinstance(e.line, int) and e.line > 0 else 0
            raise HclParseError(filename, _first_line(e), line, max(e.column, 0) if line else 0) from e
        except LarkError as e:
            raise HclParseError(filename, _first_line(e)) from e

        positions: Dict[str, int] = {}
        for kind, entries in tree.items():
            # Top-level attributes are plain values; blocks are lists of dicts
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if isinstance(entry, dict):
                    self._collect(kind, entry, positions)
        return positions

    def _collect(self, address: str, node: Dict[str, Any], positions: Dict[str, int]):
        if START_LINE in node:
            # First definition wins, duplicates keep the earliest line
            positions.setdefault(address, node[START_LINE])
            return
        for label, child in node.items():
            if isinstance(child, dict):
                self._collect(f"{address}.{_clean_label(label)}", child, positions)


def _clean_label(label: str) -> str:
    """Some python-hcl2 releases keep the quotes around block labels."""
    if len(label) >= 2 and label[0] == label[-1] == '"':
        return label[1:-1]
    return label


def _first_line(error: Exception) -> str:
    message = str(error).strip()
    return message.splitlines()[0] if message else error.__class__.__name__
