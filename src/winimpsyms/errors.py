#!/usr/bin/env python3
"""
Error types for winimpsyms
==========================

Every condition that aborts a run is one of these. Library code raises,
only the CLI entry point catches, logs and turns them into an exit status.

    WinImpSymsError
    ├── ExternalToolError         inspection tool failed to start or exited non-zero
    ├── DecodeError               malformed line inside a recognized block
    ├── DuplicateDefinitionError  second definition for one symbol name
    ├── MissingReferenceError     relocation with no reference entry in its object
    ├── ResolverStateError        passes driven out of order / stale lookups
    └── ExcerptError              disassembly relocation not found in the model
"""

from typing import Optional, Sequence

from .types import BlockKind, DefInfo


class WinImpSymsError(Exception):
    """Base class for all fatal winimpsyms errors"""


class ExternalToolError(WinImpSymsError):
    def __init__(self, path: str, command: Sequence[str],
                 returncode: Optional[int] = None, output: str = ""):
        self.path = path
        self.command = list(command)
        self.returncode = returncode
        self.output = output
        if returncode is None:
            detail = "could not be started"
        else:
            detail = f"exited with status {returncode}"
        message = f"running {' '.join(self.command)} on {path}: {detail}"
        if output:
            message += f"\n{output.rstrip()}"
        super().__init__(message)


class DecodeError(WinImpSymsError):
    def __init__(self, kind: BlockKind, line: str, reason: str = ""):
        self.kind = kind
        self.line = line
        self.reason = reason
        what = {
            BlockKind.SECTION_TABLE: "sections table",
            BlockKind.SYMBOL_TABLE: "symtab",
            BlockKind.RELOCATION_HEADER: "relocations header",
            BlockKind.RELOCATION: "relocs",
        }[kind]
        message = f"bad line {line!r} in {what}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DuplicateDefinitionError(WinImpSymsError):
    def __init__(self, name: str, existing: DefInfo, objidx: int, secidx: int):
        self.name = name
        self.existing = existing
        self.objidx = objidx
        self.secidx = secidx
        super().__init__(
            f"duplicate definition of {name!r}: already defined in O{existing.objidx} "
            f"sec={existing.secidx}, redefined in O{objidx} sec={secidx}")


class MissingReferenceError(WinImpSymsError):
    def __init__(self, name: str, objidx: int, offset: int):
        self.name = name
        self.objidx = objidx
        self.offset = offset
        super().__init__(
            f"could not find ref info for reloc of {name!r} at 0x{offset:x} in O{objidx}")


class ResolverStateError(WinImpSymsError):
    """Raised when the resolver or model is used outside its valid window"""


class ExcerptError(WinImpSymsError):
    """Raised when a disassembly relocation can't be matched to a model reference"""
