"""
Tests for the line-format decoder and block reader.
"""

import pytest

from winimpsyms.decoder import (DumpReader, decode_relocation_header, decode_relocation_row,
                                decode_section_row, decode_symbol_row, is_aux_line)
from winimpsyms.errors import DecodeError
from winimpsyms.types import BlockKind, RelocationGroup, SectionTable, SymbolTable

from conftest import dump


class TestSymbolRow:

    def test_definition_row(self):
        row = decode_symbol_row("[ 5](sec  3)(fl 0x00)(ty  20)(scl   2) (nx 0) 0x00000010 __imp_foo")
        assert row.index == 5
        assert row.secidx == 3
        assert row.value == 0x10
        assert row.name == "__imp_foo"

    def test_negative_section_index(self):
        row = decode_symbol_row("[12](sec -1)(fl 0x00)(ty   0)(scl   3) (nx 0) 0x00000000 @feat.00")
        assert row.secidx == -1
        assert row.name == "@feat.00"

    def test_trailing_whitespace_allowed(self):
        row = decode_symbol_row("[ 0](sec  0)(fl 0x00)(ty   0)(scl   2) (nx 0) 0x00000000 printf   ")
        assert row.name == "printf"

    def test_value_needs_hex_prefix(self):
        line = "[ 0](sec  0)(fl 0x00)(ty   0)(scl   2) (nx 0) 00000000 printf"
        with pytest.raises(DecodeError) as exc:
            decode_symbol_row(line)
        assert exc.value.line == line

    def test_garbage(self):
        with pytest.raises(DecodeError) as exc:
            decode_symbol_row("not a symbol")
        assert exc.value.kind == BlockKind.SYMBOL_TABLE
        assert "not a symbol" in str(exc.value)

    def test_aux_marker(self):
        assert is_aux_line("AUX scnlen 0x20 nreloc 1 nlnno 0")
        assert not is_aux_line("AUXILIARY")


class TestSectionRow:

    def test_row(self):
        row = decode_section_row("  1 .text         0000002a 0000000000000000 TEXT")
        assert row == (1, ".text", 0x2a)

    def test_bad_size(self):
        with pytest.raises(DecodeError):
            decode_section_row("  1 .text         zzzz 0000000000000000 TEXT")

    def test_missing_indent(self):
        with pytest.raises(DecodeError):
            decode_section_row("1 .text 0000002a 0000000000000000 TEXT")


class TestRelocations:

    def test_header(self):
        assert decode_relocation_header("RELOCATION RECORDS FOR [.text]:").section == ".text"

    def test_header_missing_bracket(self):
        line = "RELOCATION RECORDS FOR [.text:"
        with pytest.raises(DecodeError) as exc:
            decode_relocation_header(line)
        assert exc.value.line == line
        assert exc.value.kind == BlockKind.RELOCATION_HEADER

    def test_row(self):
        row = decode_relocation_row("000000000000001c IMAGE_REL_AMD64_REL32    __imp_foo")
        assert row.offset == 0x1c
        assert row.reloc_type == "IMAGE_REL_AMD64_REL32"
        assert row.symbol == "__imp_foo"

    def test_row_bad_offset(self):
        with pytest.raises(DecodeError):
            decode_relocation_row("xyz IMAGE_REL_AMD64_REL32 foo")

    def test_row_too_few_fields(self):
        with pytest.raises(DecodeError):
            decode_relocation_row("0000000000000004 IMAGE_REL_AMD64_REL32")


class TestDumpReader:

    def test_block_order(self):
        text = dump("a.o",
                    sections=[(".text", 0x10), (".data", 0x4)],
                    symbols=[(1, 0, ".text"), (0, 0, "__imp_foo")],
                    relocs={".text": [(0x2, "__imp_foo")]})
        blocks = list(DumpReader(text).blocks())
        assert [type(b) for b in blocks] == [SectionTable, SymbolTable, RelocationGroup]
        assert [r.name for r in blocks[0].rows] == [".text", ".data"]
        # AUX line after .text is skipped
        assert [r.name for r in blocks[1].rows] == [".text", "__imp_foo"]
        assert blocks[2].header.section == ".text"
        assert blocks[2].rows[0].offset == 0x2

    def test_symbol_tables_only(self):
        text = dump("a.o", sections=[(".text", 0x10)], symbols=[(0, 0, "x")])
        tables = list(DumpReader(text).symbol_tables())
        assert len(tables) == 1
        assert tables[0].rows[0].name == "x"

    def test_block_closed_by_end_of_input(self):
        text = "SYMBOL TABLE:\n[ 0](sec  0)(fl 0x00)(ty   0)(scl   2) (nx 0) 0x00000000 foo"
        (table,) = DumpReader(text).blocks()
        assert table.rows[0].name == "foo"

    def test_malformed_line_in_block_is_fatal(self):
        text = "SYMBOL TABLE:\n[ 0](sec  0)(fl 0x00)(ty   0)(scl   2) (nx 0) 0x00000000 foo\nbogus\n"
        with pytest.raises(DecodeError) as exc:
            list(DumpReader(text).blocks())
        assert exc.value.line == "bogus"

    def test_malformed_relocation_header_is_fatal(self):
        text = "RELOCATION RECORDS FOR [.text:\nOFFSET TYPE VALUE\n\n"
        with pytest.raises(DecodeError) as exc:
            list(DumpReader(text).blocks())
        assert exc.value.line == "RELOCATION RECORDS FOR [.text:"

    def test_lines_outside_blocks_ignored(self):
        text = "\na.o:\tfile format coff-x86-64\n\nrandom chatter\n"
        assert list(DumpReader(text).blocks()) == []
