#!/usr/bin/env python3
"""
TFUPGRADER PIPELINE - The Chief Surgeon
---------------------------------------
Central coordinator for a single file. The pipeline turns raw bytes into a
ConfigDocument, runs every top-level block through the BlockTransformer in
source order, and serializes the result exactly once.

Two independent parses are made of the same text:
  1. python-hcl2 (read-only) for strict syntax checking and block lines.
  2. HclStructurer (mutable) whose nodes keep their original text.
If either reports a syntax error the file is rejected and nothing is produced.

The pipeline performs no I/O and keeps no state between calls, so one
instance may be reused for any number of files.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

import logging

from tfupgrader.core.models import ConfigDocument, HclParseError, TransformResult
from tfupgrader.rules.transformers import BlockTransformer
from tfupgrader.upgrade.context import TransformContext
from tfupgrader.upgrade.exporter import HclExporter
from tfupgrader.upgrade.shadow import PositionShadow
from tfupgrader.upgrade.structurer import HclStructurer

logger = logging.getLogger("tfupgrader.pipeline")

BOM = "\ufeff"


class UpgradePipeline:
    """
    The Orchestrator: parse, transform and export happen in a strictly
    defined order so the output is deterministic.
    """

    def __init__(self):
        self.shadow = PositionShadow()
        self.transformer = BlockTransformer()
        self.exporter = HclExporter()

    def parse(self, source: bytes, filename: str) -> ConfigDocument:
        try:
            text = source.decode("utf-8")
        except UnicodeDecodeError as e:
            raise HclParseError(filename, f"file is not valid UTF-8: {e}") from e

        bom = ""
        if text.startswith(BOM):
            bom, text = BOM, text[len(BOM):]

        # --- PHASE 1: READ-ONLY PARSE (syntax gate + line numbers) ---
        positions = self.shadow.capture(text, filename)

        # --- PHASE 2: MUTABLE PARSE ---
        body = HclStructurer(text, filename).build()

        return ConfigDocument(filename=filename, body=body, positions=positions, bom=bom)

    def transform(self, source: bytes, filename: str) -> TransformResult:
        document = self.parse(source, filename)
        context = TransformContext(document)

        # --- PHASE 3: SINGLE TOP-TO-BOTTOM WALK ---
        for block in document.body.blocks():
            self.transformer.apply(block, context)

        # --- PHASE 4: EXPORT ---
        result = context.to_result(self.exporter.export(document))
        logger.debug(
            "%s: upgraded=%s changes=%d warnings=%d",
            filename, result.was_upgraded, len(result.changes), result.warnings,
        )
        return result


def transform_terraform_file(source: bytes, filename: str) -> TransformResult:
    """Convenience wrapper around a fresh UpgradePipeline."""
    return UpgradePipeline().transform(source, filename)
