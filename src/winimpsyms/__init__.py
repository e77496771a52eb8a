#!/usr/bin/env python3
"""
winimpsyms
==========

Cross-references import symbols (__imp_X) and their base symbols (X) across
a set of COFF object files, using the text output of llvm-objdump.

Core modules:
- decoder: line-format decoding of the tool's output
- classifier: which symbol names are worth tracking
- model: definitions, references and def/ref dispositions
- resolver: the three-pass driver
- report: text report and disassembly excerpts
- main: command line entry point
"""

__version__ = "0.1.0"

from .config import ResolverConfig
from .errors import (WinImpSymsError, ExternalToolError, DecodeError,
                     DuplicateDefinitionError, MissingReferenceError,
                     ResolverStateError, ExcerptError)
from .model import CrossRefModel
from .resolver import ImportSymbolResolver
from .report import render_report, render_excerpts, ExcerptWriter
from .main import main, resolve

__all__ = [
    'ResolverConfig',
    'CrossRefModel',
    'ImportSymbolResolver',
    'render_report',
    'render_excerpts',
    'ExcerptWriter',
    'main',
    'resolve',
    'WinImpSymsError',
    'ExternalToolError',
    'DecodeError',
    'DuplicateDefinitionError',
    'MissingReferenceError',
    'ResolverStateError',
    'ExcerptError',
]
