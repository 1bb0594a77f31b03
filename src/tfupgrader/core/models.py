#!/usr/bin/env python3
"""
TFUPGRADER CORE MODELS
----------------------
Defines the fundamental data structures used across the upgrade engine.
A parsed .tf file is a tree of Body / Block / Attribute nodes where every
node keeps the exact text it was parsed from, so untouched nodes render
back byte-for-byte.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union


class UpgradeError(Exception):
    """Base class for every error raised by the upgrader."""


class HclParseError(UpgradeError):
    """Raised when a file cannot be parsed. The file must not be touched."""

    def __init__(self, filename: str, message: str, line: int = 0, column: int = 0):
        self.filename = filename
        self.line = line
        self.column = column
        self.message = message
        location = f"{filename}:{line}:{column}" if line else filename
        super().__init__(f"{location}: {message}")


class DiscoveryError(UpgradeError):
    """Raised when the target path cannot be accessed or walked."""


@dataclass
class Trivia:
    """Verbatim text between nodes: blank lines, comments, stray whitespace."""
    text: str

    def render(self) -> str:
        return self.text


@dataclass
class Attribute:
    """
    A single `name = expr` line.

    The rendered form is always lead + name + sep + expr + tail.
    """
    name: str
    expr: str                 # Raw expression text, no surrounding whitespace
    lead: str = ""            # Indentation before the name
    sep: str = " = "          # Everything between the name and the expression
    tail: str = "\n"          # Inline comment and line terminator
    line: int = 0             # 1-based source line of the name

    def render(self) -> str:
        return f"{self.lead}{self.name}{self.sep}{self.expr}{self.tail}"


@dataclass
class Block:
    """A labeled block: `kind "label" ... { body }`."""
    kind: str
    labels: List[str]
    header: str               # Raw text from the kind through the opening brace
    body: "Body"
    closing: str = "}\n"      # Closing brace plus the rest of its line
    lead: str = ""
    line: int = 0

    @property
    def address(self) -> str:
        """Dotted key used to find this block in the position map."""
        return ".".join([self.kind] + self.labels)

    def render(self) -> str:
        return f"{self.lead}{self.header}{self.body.render()}{self.closing}"


Node = Union[Trivia, Attribute, Block]


@dataclass
class Body:
    """
    Order-preserving container of nodes. Every mutation goes through this
    class so no operation can reorder siblings.
    """
    nodes: List[Node] = field(default_factory=list)

    def render(self) -> str:
        return "".join(node.render() for node in self.nodes)

    def attributes(self) -> List[Attribute]:
        return [n for n in self.nodes if isinstance(n, Attribute)]

    def blocks(self) -> List[Block]:
        return [n for n in self.nodes if isinstance(n, Block)]

    def get_attribute(self, name: str) -> Optional[Attribute]:
        for node in self.nodes:
            if isinstance(node, Attribute) and node.name == name:
                return node
        return None

    def first_block(self, kind: str) -> Optional[Block]:
        for node in self.nodes:
            if isinstance(node, Block) and node.kind == kind:
                return node
        return None

    def set_expression(self, name: str, expr: str) -> bool:
        attr = self.get_attribute(name)
        if attr is None:
            return False
        attr.expr = expr
        return True

    def remove_attribute(self, name: str) -> bool:
        attr = self.get_attribute(name)
        if attr is None:
            return False
        self.nodes.remove(attr)
        return True

    def rename_attribute(self, old: str, new: str, expr: Optional[str] = None) -> bool:
        """
        Renames `old` to `new` in place, optionally replacing its expression.

        When `new` already exists its expression is overwritten and `old` is
        dropped, so the body never ends up with a duplicate key.
        """
        attr = self.get_attribute(old)
        if attr is None:
            return False
        value = attr.expr if expr is None else expr
        if old == new:
            attr.expr = value
            return True

        existing = self.get_attribute(new)
        if existing is not None:
            existing.expr = value
            self.nodes.remove(attr)
            return True

        attr.sep = _realign_separator(attr.sep, len(old), len(new))
        attr.name = new
        attr.expr = value
        return True


def _realign_separator(sep: str, old_len: int, new_len: int) -> str:
    """Keeps the '=' column of aligned attributes where the padding allows."""
    padding = len(sep) - len(sep.lstrip(" "))
    if padding <= 1:
        return sep
    new_padding = max(1, padding + old_len - new_len)
    return " " * new_padding + sep.lstrip(" ")


@dataclass
class ConfigDocument:
    """One parsed .tf file. Lives for the duration of a single transform call."""
    filename: str
    body: Body
    positions: Dict[str, int] = field(default_factory=dict)
    bom: str = ""

    def line_of(self, block: Block) -> int:
        """Source line for a block, preferring the read-only position map."""
        return self.positions.get(block.address, block.line)


@dataclass(frozen=True)
class ChangeRecord:
    """A single rewrite applied to the document."""
    address: str
    message: str


@dataclass(frozen=True)
class Advisory:
    """Something an operator must check by hand. Never accompanied by a rewrite."""
    filename: str
    line: int
    message: str
    description: Optional[str] = None
    column: int = 1

    def location(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


@dataclass(frozen=True)
class TransformResult:
    modified_content: bytes
    was_upgraded: bool
    warnings: int
    changes: Tuple[ChangeRecord, ...] = ()
    advisories: Tuple[Advisory, ...] = ()
