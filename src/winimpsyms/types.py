#!/usr/bin/env python3
"""
Record and constant definitions for winimpsyms
==============================================

Everything the decoder produces and the cross-reference model stores lives
here, so the other modules can share one vocabulary:

- decoded rows of the object-inspection tool's text output
- the decoded blocks those rows are grouped into
- the entities of the cross-reference model (objects, sections, defs, refs)
- the def/ref disposition bit set
"""

from enum import IntEnum, IntFlag
from typing import List, NamedTuple

# 导入符号的固定前缀
IMPORT_PREFIX = "__imp_"

DEFAULT_DUMPER = "llvm-objdump-14"

# Sections decoded during detailed extraction
EXTRACT_SECTIONS = (".text", ".data", ".bss", ".rdata", ".xdata")


# =============================================================================
# 常量和枚举
# =============================================================================

class BlockKind(IntEnum):
    """Kinds of blocks in the tool's text output"""
    SECTION_TABLE = 1
    SYMBOL_TABLE = 2
    RELOCATION_HEADER = 3
    RELOCATION = 4


class Stage(IntEnum):
    """Resolver state machine stages, in the only legal order"""
    START = 0
    DISCOVERY = 1     # pass 1
    CLOSURE = 2       # pass 2
    EXTRACTION = 3    # pass 3
    DONE = 4


class DefRefMask(IntFlag):
    """Def/ref disposition of a base symbol X and its import form __imp_X"""
    NONE = 0
    DEFBASE = 1 << 1   # X is defined
    REFBASE = 1 << 2   # X is referenced
    DEFIMP = 1 << 3    # __imp_X is defined
    REFIMP = 1 << 4    # __imp_X is referenced
    SAMEOBJ = 1 << 5   # X and __imp_X defined in the same object

    def describe(self) -> str:
        """Render as space-prefixed flag names, e.g. ' defbase refimp'"""
        names = [
            (DefRefMask.DEFBASE, "defbase"),
            (DefRefMask.REFBASE, "refbase"),
            (DefRefMask.DEFIMP, "defimp"),
            (DefRefMask.REFIMP, "refimp"),
            (DefRefMask.SAMEOBJ, "sameobj"),
        ]
        return "".join(f" {name}" for flag, name in names if self & flag)


# =============================================================================
# 解码后的行记录
# =============================================================================

class SymbolRow(NamedTuple):
    """[ 0](sec  1)(fl 0x00)(ty   0)(scl   3) (nx 1) 0x00000000 .text"""
    index: int
    secidx: int
    value: int
    name: str


class SectionRow(NamedTuple):
    """  1 .text         00000010 0000000000000000 TEXT"""
    ordinal: int
    name: str
    size: int


class RelocationHeader(NamedTuple):
    """RELOCATION RECORDS FOR [.text]:"""
    section: str


class RelocationRow(NamedTuple):
    """0000000000000004 IMAGE_REL_AMD64_REL32 __imp_foo"""
    offset: int
    reloc_type: str
    symbol: str


class SectionTable(NamedTuple):
    rows: List[SectionRow]


class SymbolTable(NamedTuple):
    rows: List[SymbolRow]


class RelocationGroup(NamedTuple):
    header: RelocationHeader
    rows: List[RelocationRow]


# =============================================================================
# 交叉引用模型实体
# =============================================================================

class ObjectInfo(NamedTuple):
    index: int
    path: str
    source_path: str


class SectionInfo(NamedTuple):
    objidx: int
    name: str
    size: int
    ordinal: int


class DefInfo(NamedTuple):
    objidx: int
    secidx: int
    value: int


class RefInfo:
    """
    One symbol-table occurrence of a symbol within one object.

    Definitions are recorded here too (is_def=True) so relocations against
    a locally defined symbol have an entry to land on. Offsets are filled
    in later from the object's relocation records.
    """

    def __init__(self, objidx: int, secidx: int, is_def: bool):
        self.objidx = objidx
        self.secidx = secidx
        self.is_def = is_def
        self.offsets: List[int] = []

    def __repr__(self):
        offsets = " ".join(f"0x{off:x}" for off in self.offsets)
        return (f"RefInfo(objidx={self.objidx}, secidx={self.secidx}, "
                f"is_def={self.is_def}, offsets=[{offsets}])")
