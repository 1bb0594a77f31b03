#!/usr/bin/env python3
"""
TFUPGRADER EXPORTER - High-Fidelity Round-Trip
----------------------------------------------
Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

from tfupgrader.core.models import ConfigDocument


class HclExporter:
    """
    The Reconstructor: turns a (possibly mutated) document back into bytes.
    Nodes are emitted in their stored order; nothing is sorted or re-indented.
    """

    encoding = "utf-8"

    def export(self, document: ConfigDocument) -> bytes:
        return (document.bom + document.body.render()).encode(self.encoding)
