"""
Shared fixtures: canned llvm-objdump output and a fake tool runner.
"""

import sys
import os

# 添加src目录到Python路径
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import pytest

from winimpsyms.config import ResolverConfig
from winimpsyms.model import CrossRefModel


def sym(idx, sec, value, name):
    return f"[{idx:2d}](sec {sec:2d})(fl 0x00)(ty   0)(scl   2) (nx 0) 0x{value:08x} {name}"


def section(ordinal, name, size):
    return f"  {ordinal} {name:<13} {size:08x} 0000000000000000 TEXT"


def reloc(offset, name, rtype="IMAGE_REL_AMD64_REL32"):
    return f"{offset:016x} {rtype:<24} {name}"


def dump(path, sections=(), symbols=(), relocs=None):
    """
    Build one llvm-objdump -h -t -r listing.

    Args:
        sections: (name, size) pairs, numbered from 0
        symbols: (sec, value, name) triples
        relocs: {section name: [(offset, symbol), ...]}
    """
    lines = ["", f"{path}:\tfile format coff-x86-64", ""]
    if sections:
        lines.append("Sections:")
        lines.append("Idx Name          Size     VMA              Type")
        for i, (name, size) in enumerate(sections):
            lines.append(section(i, name, size))
        lines.append("")
    lines.append("SYMBOL TABLE:")
    for i, (sec, value, name) in enumerate(symbols):
        lines.append(sym(i, sec, value, name))
        if name.startswith("."):
            lines.append("AUX scnlen 0x20 nreloc 1 nlnno 0 checksum 0x0 assoc 0 comdat 0")
    lines.append("")
    for secname, rows in (relocs or {}).items():
        lines.append(f"RELOCATION RECORDS FOR [{secname}]:")
        lines.append("OFFSET           TYPE                     VALUE")
        for offset, name in rows:
            lines.append(reloc(offset, name))
        lines.append("")
    return "\n".join(lines) + "\n"


class FakeRunner:
    """Stands in for ObjdumpRunner; serves canned text per object path"""

    def __init__(self, details, listings=None):
        self.dumper = "fake-objdump"
        self.details_text = dict(details)
        self.listings = dict(listings or {})
        self.calls = []

    def symbols(self, path):
        self.calls.append(("symbols", path))
        return self.details_text[path]

    def details(self, path, sections):
        self.calls.append(("details", path, tuple(sections)))
        return self.details_text[path]

    def disassemble(self, path):
        self.calls.append(("disassemble", path))
        return self.listings[path]


@pytest.fixture
def three_objects():
    """
    O0 defines __imp_foo and references foo, O1 defines foo,
    O2 references __imp_bar and has an unrelated local symbol.
    """
    return {
        "o0.o": dump("o0.o",
                     sections=[(".text", 0x20), (".data", 0x8)],
                     symbols=[(1, 0, ".text"), (2, 0x0, "__imp_foo"),
                              (0, 0, "foo"), (1, 0x10, "helper")],
                     relocs={".text": [(0x4, "foo"), (0xc, "foo")],
                             ".data": [(0x0, "__imp_foo")]}),
        "o1.o": dump("o1.o",
                     sections=[(".text", 0x10)],
                     symbols=[(1, 0, ".text"), (1, 0x0, "foo")]),
        "o2.o": dump("o2.o",
                     sections=[(".text", 0x30)],
                     symbols=[(1, 0, ".text"), (0, 0, "__imp_bar"),
                              (1, 0x8, "local_thing")],
                     relocs={".text": [(0x1a, "__imp_bar"), (0x22, "local_thing")]}),
    }


@pytest.fixture
def make_model():
    def factory(watch=(), all_symbols=False):
        return CrossRefModel(ResolverConfig([], watch, all_symbols=all_symbols))
    return factory
