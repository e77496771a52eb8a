#!/usr/bin/env python3
"""
Line-Format Decoder
===================

Decodes the textual output of llvm-objdump run on COFF objects. The exact
line syntax of the tool is the wire format; nothing here parses binary
object files.

Three block types are recognized:

    Sections:
    Idx Name          Size     VMA              Type
      1 .text         00000040 0000000000000000 TEXT

    SYMBOL TABLE:
    [ 0](sec  1)(fl 0x00)(ty   0)(scl   3) (nx 1) 0x00000000 .text
    AUX scnlen 0x40 nreloc 3 nlnno 0 checksum 0x0 assoc 0 comdat 0

    RELOCATION RECORDS FOR [.text]:
    OFFSET           TYPE                     VALUE
    0000000000000004 IMAGE_REL_AMD64_REL32    __imp_foo

An empty line (or end of input) closes a block. Any other line inside a
block that does not match is fatal: one misparsed line would shift the
offset bookkeeping of every relocation after it.
"""

import logging
import re
from typing import Iterator, List, Union

from .errors import DecodeError
from .types import (BlockKind, RelocationGroup, RelocationHeader, RelocationRow,
                    SectionRow, SectionTable, SymbolRow, SymbolTable)
from .utils import parse_hex

logger = logging.getLogger(__name__)

SYMBOL_RE = re.compile(
    r'^\[\s*(\d+)\]\(sec\s+(-?\d+)\)\(fl\s+\S+\)\(ty\s+\S+\)\(scl\s+\d+\)'
    r'\s*\(nx\s+\S+\)\s+(\S+)\s+(\S+)\s*$')
SECTION_RE = re.compile(r'^\s+([0-9]+)\s+(\S+)\s+(\S+)\s+.*')
RELOC_HEADER_RE = re.compile(r'RELOCATION RECORDS FOR \[(\S+)\]:$')
RELOC_RE = re.compile(r'^(\S+)\s+(\S+)\s+(\S+)\s*')

SECTIONS_MARKER = "Sections:"
SYMTAB_MARKER = "SYMBOL TABLE:"
RELOC_MARKER = "RELOCATION RECORDS FOR ["
AUX_MARKER = "AUX "

Block = Union[SectionTable, SymbolTable, RelocationGroup]


def is_aux_line(line: str) -> bool:
    return line.startswith(AUX_MARKER)


def decode_symbol_row(line: str) -> SymbolRow:
    m = SYMBOL_RE.match(line)
    if not m:
        raise DecodeError(BlockKind.SYMBOL_TABLE, line)
    value = m.group(3)
    if not value.lower().startswith("0x"):
        raise DecodeError(BlockKind.SYMBOL_TABLE, line, "can't parse value")
    try:
        return SymbolRow(index=int(m.group(1), 10),
                         secidx=int(m.group(2), 10),
                         value=parse_hex(value),
                         name=m.group(4))
    except ValueError:
        raise DecodeError(BlockKind.SYMBOL_TABLE, line, "can't parse value")


def decode_section_row(line: str) -> SectionRow:
    m = SECTION_RE.match(line)
    if not m:
        raise DecodeError(BlockKind.SECTION_TABLE, line)
    try:
        size = parse_hex(m.group(3))
    except ValueError:
        raise DecodeError(BlockKind.SECTION_TABLE, line, "can't parse sec size")
    return SectionRow(ordinal=int(m.group(1), 10), name=m.group(2), size=size)


def decode_relocation_header(line: str) -> RelocationHeader:
    m = RELOC_HEADER_RE.search(line)
    if not m:
        raise DecodeError(BlockKind.RELOCATION_HEADER, line)
    return RelocationHeader(section=m.group(1))


def decode_relocation_row(line: str) -> RelocationRow:
    m = RELOC_RE.match(line)
    if not m:
        raise DecodeError(BlockKind.RELOCATION, line)
    try:
        offset = parse_hex(m.group(1))
    except ValueError:
        raise DecodeError(BlockKind.RELOCATION, line, "can't parse offset")
    return RelocationRow(offset=offset, reloc_type=m.group(2), symbol=m.group(3))


class DumpReader:
    """
    Walks one run of the inspection tool's output and yields decoded blocks
    in the order they appear.
    """

    def __init__(self, text: str):
        self.lines = text.split("\n")
        # split() leaves one empty trailing item for newline-terminated text
        if self.lines and self.lines[-1] == "":
            self.lines.pop()
        self.pos = 0

    def _next_line(self):
        if self.pos >= len(self.lines):
            return None
        line = self.lines[self.pos]
        self.pos += 1
        return line

    def _read_rows(self, decode, skip_aux: bool = False) -> List:
        rows = []
        while True:
            line = self._next_line()
            if line is None or line == "":
                return rows
            if skip_aux and is_aux_line(line):
                continue
            rows.append(decode(line))

    def blocks(self) -> Iterator[Block]:
        self.pos = 0
        while True:
            line = self._next_line()
            if line is None:
                return
            if line == SECTIONS_MARKER:
                self._next_line()  # column titles
                rows = self._read_rows(decode_section_row)
                logger.debug(f"Decoded section table with {len(rows)} rows")
                yield SectionTable(rows)
            elif line == SYMTAB_MARKER:
                rows = self._read_rows(decode_symbol_row, skip_aux=True)
                logger.debug(f"Decoded symbol table with {len(rows)} rows")
                yield SymbolTable(rows)
            elif line.startswith(RELOC_MARKER):
                header = decode_relocation_header(line)
                self._next_line()  # column titles
                rows = self._read_rows(decode_relocation_row)
                logger.debug(f"Decoded {len(rows)} relocations for {header.section}")
                yield RelocationGroup(header, rows)

    def symbol_tables(self) -> Iterator[SymbolTable]:
        for block in self.blocks():
            if isinstance(block, SymbolTable):
                yield block
