#!/usr/bin/env python3
"""
Cross-Reference Model
=====================

Central state of one run. Built up by the resolver across its three passes
and read by the report renderer afterwards:

- objects:  ObjectInfo per input, in input order
- sections: SectionInfo per section-table row, in decode order
- defs:     symbol name -> the one DefInfo for it
- refs:     symbol name -> RefInfo list, in admission order
- defref:   base symbol name -> DefRefMask
- interesting: the Interesting-Symbol Set

Entities are write-once (objects, sections, defs) or append-only (refs,
offsets, disposition flags). Nothing is ever removed.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

from .classifier import SymbolClassifier, base_name, is_import_name
from .config import ResolverConfig
from .errors import DuplicateDefinitionError, MissingReferenceError, ResolverStateError
from .types import DefInfo, DefRefMask, ObjectInfo, RefInfo, SectionInfo

logger = logging.getLogger(__name__)


class CrossRefModel:

    def __init__(self, config: ResolverConfig):
        self.config = config
        self.objects: List[ObjectInfo] = []
        self.sections: List[SectionInfo] = []
        self.defs: Dict[str, DefInfo] = {}
        self.refs: Dict[str, List[RefInfo]] = {}
        self.defref: Dict[str, DefRefMask] = {}
        self.interesting: Set[str] = set()
        self.classifier = SymbolClassifier(config, self.interesting)

        # name -> index into self.sections, for _secmap_obj only
        self._secmap: Dict[str, int] = {}
        self._secmap_obj: Optional[int] = None

        # (symbol, object) -> [start, end) slice of self.refs[symbol]
        self._runs: Dict[Tuple[str, int], Tuple[int, int]] = {}

        # definitions admitted per object since its last close_symbol_table()
        self._block_defs: Dict[int, Set[str]] = {}

    # =========================================================================
    # Interesting-Symbol Set
    # =========================================================================

    def is_interesting(self, name: str, include_closure: bool = True) -> bool:
        return self.classifier.is_interesting(name, include_closure)

    def add_interesting(self, name: str):
        self.interesting.add(name)

    def extend_interesting(self) -> int:
        """
        Close the set over __imp_X => X.

        Returns:
            Number of base names newly added
        """
        added = 0
        for name in list(self.interesting):
            if not is_import_name(name):
                continue
            base = base_name(name)
            if base not in self.interesting:
                self.interesting.add(base)
                added += 1
        return added

    # =========================================================================
    # Objects and sections
    # =========================================================================

    def add_object(self, path: str, source_path: str = "") -> ObjectInfo:
        obj = ObjectInfo(index=len(self.objects), path=path, source_path=source_path)
        self.objects.append(obj)
        return obj

    def add_section(self, objidx: int, name: str, ordinal: int, size: int) -> SectionInfo:
        if objidx != self._secmap_obj:
            self._secmap = {}
            self._secmap_obj = objidx
        section = SectionInfo(objidx=objidx, name=name, size=size, ordinal=ordinal)
        self._secmap[name] = len(self.sections)
        self.sections.append(section)
        logger.debug(f"O{objidx}: section {ordinal} {name} size=0x{size:x}")
        return section

    @property
    def section_object(self) -> Optional[int]:
        """Object whose section table is currently open for name lookups"""
        return self._secmap_obj

    def lookup_section(self, objidx: int, name: str) -> Optional[SectionInfo]:
        """Name lookup, only valid for the object whose sections were added last"""
        if objidx != self._secmap_obj:
            raise ResolverStateError(
                f"section lookup for O{objidx} outside its processing window "
                f"(current section table belongs to O{self._secmap_obj})")
        index = self._secmap.get(name)
        if index is None:
            return None
        return self.sections[index]

    # =========================================================================
    # Symbol-table rows
    # =========================================================================

    def _mark(self, name: str, is_def: bool):
        if is_import_name(name):
            flag = DefRefMask.DEFIMP if is_def else DefRefMask.REFIMP
        else:
            flag = DefRefMask.DEFBASE if is_def else DefRefMask.REFBASE
        base = base_name(name)
        self.defref[base] = self.defref.get(base, DefRefMask.NONE) | flag

    def admit_symbol_row(self, objidx: int, name: str, secidx: int,
                         value: int) -> Optional[RefInfo]:
        """
        Record one symbol-table row. A nonzero section index makes the row a
        definition; every admitted row also gets a reference entry so that
        relocations in this object can be bound to it.

        Returns:
            The new RefInfo, or None if the symbol is not interesting
        """
        if not self.is_interesting(name):
            return None

        is_def = secidx != 0
        if is_def:
            existing = self.defs.get(name)
            if existing is not None:
                raise DuplicateDefinitionError(name, existing, objidx, secidx)
            self.defs[name] = DefInfo(objidx=objidx, secidx=secidx, value=value)
            self._block_defs.setdefault(objidx, set()).add(name)
            logger.debug(f"O{objidx}: def {name} sec={secidx} val=0x{value:x}")

        refs = self.refs.setdefault(name, [])
        ref = RefInfo(objidx=objidx, secidx=secidx, is_def=is_def)
        start, end = self._runs.get((name, objidx), (len(refs), len(refs)))
        if end != len(refs):
            raise ResolverStateError(
                f"O{objidx} re-entered after other objects referenced {name!r}")
        refs.append(ref)
        self._runs[(name, objidx)] = (start, end + 1)

        self._mark(name, is_def)
        if not is_def:
            logger.debug(f"O{objidx}: ref {name}")
        return ref

    def close_symbol_table(self, objidx: int):
        """Flag X as sameobj when this object defined both X and __imp_X"""
        defined = self._block_defs.pop(objidx, set())
        for name in defined:
            if not is_import_name(name):
                continue
            base = base_name(name)
            if base in defined:
                self.defref[base] = self.defref.get(base, DefRefMask.NONE) | DefRefMask.SAMEOBJ
                logger.debug(f"O{objidx}: {base} and {name} defined together")

    # =========================================================================
    # Relocations
    # =========================================================================

    def object_run(self, name: str, objidx: int) -> List[RefInfo]:
        """The contiguous reference entries of `name` belonging to `objidx`"""
        refs = self.refs.get(name, [])
        start, end = self._runs.get((name, objidx), (0, 0))
        return refs[start:end]

    def bind_relocation(self, name: str, objidx: int, offset: int) -> int:
        """
        Append a relocation offset to every reference entry of `name` in the
        trailing run belonging to `objidx`. An object can declare the same
        symbol more than once and relocations don't say which declaration
        they belong to, so all of them get the offset.

        Returns:
            Number of entries the offset was appended to (0 if uninteresting)
        """
        if not self.is_interesting(name):
            return 0
        refs = self.refs.get(name)
        if refs is None:
            raise MissingReferenceError(name, objidx, offset)
        start, end = self._runs.get((name, objidx), (0, 0))
        # only the run at the tail of the list is the current object's
        if start == end or end != len(refs):
            raise MissingReferenceError(name, objidx, offset)
        for ref in refs[start:end]:
            ref.offsets.append(offset)
        logger.debug(f"O{objidx}: reloc {name} at 0x{offset:x} -> {end - start} ref(s)")
        return end - start

    # =========================================================================
    # Queries
    # =========================================================================

    def definition(self, name: str) -> Optional[DefInfo]:
        return self.defs.get(name)

    def references(self, name: str) -> List[RefInfo]:
        return list(self.refs.get(name, []))

    def reference_names(self) -> List[str]:
        return sorted(self.refs)

    def dispositions(self) -> List[Tuple[str, DefRefMask]]:
        return sorted(self.defref.items())

    def disposition(self, name: str) -> DefRefMask:
        return self.defref.get(base_name(name), DefRefMask.NONE)

    def find_reference(self, name: str, objidx: int, offset: int) -> Optional[RefInfo]:
        for ref in self.object_run(name, objidx):
            if offset in ref.offsets:
                return ref
        return None

    def has_object_references(self, name: str, objidx: int) -> bool:
        return bool(self.object_run(name, objidx))

