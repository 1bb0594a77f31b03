"""
TFUPGRADER STRUCTURER - The Architect
-------------------------------------
Builds the mutable Body/Block/Attribute tree from raw HCL text.

Every character of the input ends up in exactly one node (Trivia for
whitespace and comments between items), so rendering an unmodified tree
reproduces the source exactly.
"""

from typing import List, Tuple

from tfupgrader.core.models import Attribute, Block, Body, Node, Trivia
from tfupgrader.upgrade.lexer import HclLexer


class HclStructurer:
    def __init__(self, text: str, filename: str):
        self.lexer = HclLexer(text, filename)
        self.text = text

    def build(self) -> Body:
        body, _ = self._parse_body(0, top_level=True)
        return body

    def _parse_body(self, pos: int, top_level: bool) -> Tuple[Body, int]:
        nodes: List[Node] = []
        lexer = self.lexer

        while True:
            start = pos
            pos = lexer.skip_trivia(pos)

            # Indentation directly in front of the next item belongs to that item
            lead_start = lexer.trim_right(start, pos)
            if lead_start > start:
                nodes.append(Trivia(self.text[start:lead_start]))
            lead = self.text[lead_start:pos]

            if pos >= lexer.length:
                if not top_level:
                    raise lexer.error(pos, "unexpected end of file, expected '}'")
                if lead:
                    nodes.append(Trivia(lead))
                return Body(nodes), pos

            if self.text[pos] == '}':
                if top_level:
                    raise lexer.error(pos, "unexpected '}'")
                if lead:
                    nodes.append(Trivia(lead))
                return Body(nodes), pos

            node, pos = self._parse_item(pos, lead)
            nodes.append(node)

    def _parse_item(self, pos: int, lead: str) -> Tuple[Node, int]:
        lexer = self.lexer
        name, name_end = lexer.read_identifier(pos)
        line = lexer.line_of(pos)
        cursor = lexer.skip_inline_space(name_end)

        if lexer.peek(cursor) == '=' and lexer.peek(cursor + 1) != '=':
            return self._parse_attribute(pos, name, name_end, cursor, lead, line)
        return self._parse_block(pos, name, cursor, lead, line)

    def _parse_attribute(self, pos: int, name: str, name_end: int, eq: int,
                         lead: str, line: int) -> Tuple[Attribute, int]:
        lexer = self.lexer
        expr_start = lexer.skip_inline_space(eq + 1)
        if lexer.peek(expr_start) in ('', '\n', '\r', '}') or lexer.is_comment_start(expr_start):
            raise lexer.error(expr_start, f"missing expression for attribute {name!r}")

        expr_end = lexer.trim_right(expr_start, lexer.scan_expression(expr_start))
        tail_end = lexer.scan_line_tail(expr_end)

        attribute = Attribute(
            name=name,
            expr=self.text[expr_start:expr_end],
            lead=lead,
            sep=self.text[name_end:expr_start],
            tail=self.text[expr_end:tail_end],
            line=line,
        )
        return attribute, tail_end

    def _parse_block(self, pos: int, kind: str, cursor: int,
                     lead: str, line: int) -> Tuple[Block, int]:
        lexer = self.lexer
        labels: List[str] = []

        while lexer.peek(cursor) != '{':
            if lexer.peek(cursor) == '"' or lexer.is_identifier_start(cursor):
                label, cursor = lexer.read_label(cursor)
                labels.append(label)
                cursor = lexer.skip_inline_space(cursor)
                continue
            raise lexer.error(cursor, f"expected a block label or '{{' after {kind!r}")

        header = self.text[pos:cursor + 1]
        body, close = self._parse_body(cursor + 1, top_level=False)
        closing_end = lexer.scan_line_tail(close + 1)

        block = Block(
            kind=kind,
            labels=labels,
            header=header,
            body=body,
            closing=self.text[close:closing_end],
            lead=lead,
            line=line,
        )
        return block, closing_end
