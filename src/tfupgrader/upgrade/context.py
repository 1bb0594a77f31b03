#!/usr/bin/env python3
"""
TFUPGRADER TRANSFORM CONTEXT
----------------------------
The per-call record of one file's upgrade. Created by the pipeline at the
start of `transform`, enriched by the block transformers, and frozen into a
TransformResult at the end. Never shared between files.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from tfupgrader.core.models import Advisory, Block, ChangeRecord, ConfigDocument, TransformResult

logger = logging.getLogger("tfupgrader.context")


@dataclass
class TransformContext:
    document: ConfigDocument
    upgraded: bool = False
    changes: List[ChangeRecord] = field(default_factory=list)
    advisories: List[Advisory] = field(default_factory=list)

    @property
    def warnings(self) -> int:
        return len(self.advisories)

    def record_change(self, address: str, message: str):
        self.upgraded = True
        self.changes.append(ChangeRecord(address=address, message=message))
        logger.debug("%s: %s", self.document.filename, message)

    def warn(self, block: Block, message: str, description: Optional[str] = None):
        advisory = Advisory(
            filename=self.document.filename,
            line=self.document.line_of(block),
            message=message,
            description=description,
        )
        self.advisories.append(advisory)
        logger.debug("%s - %s", advisory.location(), message)

    def to_result(self, content: bytes) -> TransformResult:
        return TransformResult(
            modified_content=content,
            was_upgraded=self.upgraded,
            warnings=self.warnings,
            changes=tuple(self.changes),
            advisories=tuple(self.advisories),
        )
