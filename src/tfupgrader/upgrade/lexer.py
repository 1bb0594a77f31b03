#!/usr/bin/env python3
"""
TFUPGRADER LEXER - Span Scanner
-------------------------------
Character-level scanners for HCL source. The lexer never builds tokens of
its own: every scanner takes an offset into the source text and returns the
offset where the construct ends, so the structurer can slice the original
text verbatim.

Covers quoted templates (with ${...} / %{...} nesting and $${ escapes),
heredocs (<<EOF and <<-EOF), line and block comments, and bracket nesting
inside multi-line expressions.

Author: juju-tf-upgrader maintainers
Date: 2026-10-18
"""

import bisect
import re
from typing import List, Tuple

from tfupgrader.core.models import HclParseError

IDENT_START = re.compile(r'[A-Za-z_]')
IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_-]*')
HEREDOC_OPEN = re.compile(r'<<(-?)([A-Za-z_][A-Za-z0-9_-]*)[ \t]*\r?\n')

INLINE_SPACE = ' \t'
OPENERS = '([{'
CLOSERS = ')]}'


class HclLexer:
    """
    Offset-based scanner over one file's text.
    All positions are indexes into `self.text`.
    """

    def __init__(self, text: str, filename: str):
        self.text = text
        self.filename = filename
        self.length = len(text)
        self._line_starts: List[int] = [0] + [m.end() for m in re.finditer(r'\n', text)]

    # --- Positions -------------------------------------------------------

    def position(self, pos: int) -> Tuple[int, int]:
        """1-based (line, column) for an offset."""
        idx = bisect.bisect_right(self._line_starts, pos) - 1
        return idx + 1, pos - self._line_starts[idx] + 1

    def line_of(self, pos: int) -> int:
        return self.position(pos)[0]

    def error(self, pos: int, message: str) -> HclParseError:
        line, column = self.position(min(pos, self.length))
        return HclParseError(self.filename, message, line, column)

    def peek(self, pos: int) -> str:
        return self.text[pos] if pos < self.length else ''

    # --- Whitespace & comments -------------------------------------------

    def skip_inline_space(self, pos: int) -> int:
        while pos < self.length and self.text[pos] in INLINE_SPACE:
            pos += 1
        return pos

    def skip_line_comment(self, pos: int) -> int:
        """Returns the offset of the newline ending the comment (not consumed)."""
        end = self.text.find('\n', pos)
        if end == -1:
            return self.length
        if end > pos and self.text[end - 1] == '\r':
            return end - 1
        return end

    def skip_block_comment(self, pos: int) -> int:
        end = self.text.find('*/', pos + 2)
        if end == -1:
            raise self.error(pos, "unterminated block comment")
        return end + 2

    def is_comment_start(self, pos: int) -> bool:
        return self.peek(pos) == '#' or self.text.startswith('//', pos) or self.text.startswith('/*', pos)

    def skip_comment(self, pos: int) -> int:
        if self.text.startswith('/*', pos):
            return self.skip_block_comment(pos)
        return self.skip_line_comment(pos)

    def skip_trivia(self, pos: int) -> int:
        """Skips whitespace, newlines and comments of any style."""
        while pos < self.length:
            char = self.text[pos]
            if char in ' \t\r\n':
                pos += 1
            elif self.is_comment_start(pos):
                pos = self.skip_comment(pos)
            else:
                break
        return pos

    def scan_line_tail(self, pos: int) -> int:
        """
        Consumes the rest of a logical line: spaces, an optional comment and
        the line terminator. Stops in front of a closing brace so single-line
        blocks keep their `}` for the enclosing body.
        """
        while pos < self.length:
            pos = self.skip_inline_space(pos)
            char = self.peek(pos)
            if not char:
                return pos
            if char == '\n':
                return pos + 1
            if self.text.startswith('\r\n', pos):
                return pos + 2
            if char == '}':
                return pos
            if self.text.startswith('/*', pos):
                pos = self.skip_block_comment(pos)
                continue
            if self.is_comment_start(pos):
                pos = self.skip_line_comment(pos)
                continue
            raise self.error(pos, f"unexpected {char!r}, expected a newline")
        return pos

    # --- Identifiers & labels -------------------------------------------

    def read_identifier(self, pos: int) -> Tuple[str, int]:
        match = IDENTIFIER.match(self.text, pos)
        if not match:
            raise self.error(pos, f"expected an identifier, found {self.peek(pos)!r}")
        return match.group(0), match.end()

    def is_identifier_start(self, pos: int) -> bool:
        return bool(IDENT_START.match(self.peek(pos)))

    def read_label(self, pos: int) -> Tuple[str, int]:
        """Reads a quoted or bare block label."""
        if self.peek(pos) == '"':
            end = self.scan_string(pos)
            raw = self.text[pos + 1:end - 1]
            return raw.replace('\\"', '"').replace('\\\\', '\\'), end
        return self.read_identifier(pos)

    # --- Strings, templates & heredocs -----------------------------------

    def scan_string(self, pos: int) -> int:
        """`pos` sits on the opening quote; returns the offset after the closing one."""
        i = pos + 1
        while i < self.length:
            char = self.text[i]
            if char == '\\':
                i += 2
                continue
            if char == '"':
                return i + 1
            if char in '$%' and self.text.startswith(char * 2 + '{', i):
                i += 3
                continue
            if char in '$%' and self.peek(i + 1) == '{':
                i = self.scan_interpolation(i + 2)
                continue
            if char == '\n':
                break
            i += 1
        raise self.error(pos, "unterminated string literal")

    def scan_interpolation(self, pos: int) -> int:
        """`pos` sits just after `${` or `%{`; returns the offset after the matching `}`."""
        depth = 1
        i = pos
        while i < self.length:
            char = self.text[i]
            if char == '"':
                i = self.scan_string(i)
                continue
            if char == '{':
                depth += 1
            elif char == '}':
                depth -= 1
                if depth == 0:
                    return i + 1
            i += 1
        raise self.error(pos, "unterminated template interpolation")

    def scan_heredoc(self, pos: int) -> int:
        """Returns the offset just after the closing marker of a heredoc."""
        match = HEREDOC_OPEN.match(self.text, pos)
        if not match:
            raise self.error(pos, "malformed heredoc")
        marker = match.group(2)
        i = match.end()
        while i < self.length:
            end = self.text.find('\n', i)
            line_end = self.length if end == -1 else end
            line = self.text[i:line_end].rstrip('\r')
            if line.strip() == marker:
                return i + len(line.rstrip())
            if end == -1:
                break
            i = end + 1
        raise self.error(pos, f"heredoc is missing its closing marker {marker!r}")

    # --- Expressions -----------------------------------------------------

    def scan_expression(self, pos: int) -> int:
        """
        Returns the end offset of the expression starting at `pos`.

        At bracket depth zero the expression stops at a newline, a comment or
        a `}` belonging to the enclosing block. Trailing spaces are included;
        callers trim them.
        """
        stack: List[str] = []
        i = pos
        while i < self.length:
            char = self.text[i]
            if char == '"':
                i = self.scan_string(i)
                continue
            if char == '<' and HEREDOC_OPEN.match(self.text, i):
                i = self.scan_heredoc(i)
                continue
            if char in OPENERS:
                stack.append(CLOSERS[OPENERS.index(char)])
                i += 1
                continue
            if char in CLOSERS:
                if not stack:
                    if char == '}':
                        break
                    raise self.error(i, f"unbalanced {char!r}")
                if stack.pop() != char:
                    raise self.error(i, f"mismatched {char!r}")
                i += 1
                continue
            if self.is_comment_start(i):
                if not stack:
                    break
                i = self.skip_comment(i)
                continue
            if char in '\r\n' and not stack:
                break
            i += 1
        if stack:
            raise self.error(pos, "unclosed bracket in expression")
        return i

    def trim_right(self, start: int, end: int) -> int:
        """Moves `end` back over trailing inline whitespace, never before `start`."""
        while end > start and self.text[end - 1] in INLINE_SPACE:
            end -= 1
        return end
