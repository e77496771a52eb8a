#!/usr/bin/env python3
"""
Resolution Driver
=================

Runs the three passes over the input objects, strictly in order:

    START -> DISCOVERY (per object) -> CLOSURE (once) -> EXTRACTION (per object) -> DONE

1. discovery:  symbol tables only; collect every import-prefixed or watched
               name into the Interesting-Symbol Set
2. closure:    for every __imp_X in the set, add X
3. extraction: sections, symbol tables and relocations of the allow-listed
               sections, fed into the cross-reference model

Relocations of one object are bound while that object's symbol-table entries
are still the tail of each reference list, so objects are processed one at a
time and never interleaved. Any failure aborts the run.
"""

import logging
from typing import Optional

from .config import ResolverConfig
from .decoder import DumpReader
from .errors import ResolverStateError
from .model import CrossRefModel
from .objdump import ObjdumpRunner
from .types import RelocationGroup, SectionTable, Stage, SymbolTable
from .utils import recover_source_path

logger = logging.getLogger(__name__)


class ImportSymbolResolver:
    """
    Args:
        config: Run configuration
        runner: Object providing symbols(path) and details(path, sections);
            defaults to an ObjdumpRunner for config.dumper
    """

    def __init__(self, config: ResolverConfig, runner: Optional[ObjdumpRunner] = None):
        self.config = config
        self.runner = runner if runner is not None else ObjdumpRunner(config.dumper)
        self.model = CrossRefModel(config)
        self.stage = Stage.START
        self._next_object = 0

    def _enter(self, stage: Stage, allowed_from):
        if self.stage not in allowed_from:
            raise ResolverStateError(
                f"cannot enter {stage.name} from {self.stage.name}")
        self.stage = stage

    def _check_order(self, objidx: int):
        if objidx != self._next_object:
            raise ResolverStateError(
                f"objects must be processed in input order: expected O{self._next_object}, "
                f"got O{objidx}")
        self._next_object += 1

    def run(self) -> CrossRefModel:
        inputs = self.config.inputs
        logger.info(f"Resolving import symbols across {len(inputs)} object(s)")

        for objidx, path in enumerate(inputs):
            self.discover(objidx, path)

        self.close_interesting()

        for objidx, path in enumerate(inputs):
            self.extract(objidx, path)

        self._enter(Stage.DONE, (Stage.EXTRACTION, Stage.CLOSURE))
        logger.info(f"Done: {len(self.model.defs)} definition(s), "
                    f"{len(self.model.refs)} referenced symbol(s)")
        return self.model

    # =========================================================================
    # Pass 1
    # =========================================================================

    def discover(self, objidx: int, path: str) -> int:
        """
        Scan one object's symbol table and collect interesting names.

        Returns:
            Number of names added to the Interesting-Symbol Set
        """
        if self.stage == Stage.START:
            self._enter(Stage.DISCOVERY, (Stage.START,))
            self._next_object = 0
        elif self.stage != Stage.DISCOVERY:
            raise ResolverStateError(f"cannot run discovery during {self.stage.name}")
        self._check_order(objidx)

        logger.info(f"Pass 1: O{objidx} {path}")
        text = self.runner.symbols(path)
        added = 0
        for table in DumpReader(text).symbol_tables():
            for row in table.rows:
                if not self.model.is_interesting(row.name, include_closure=False):
                    continue
                if row.name not in self.model.interesting:
                    self.model.add_interesting(row.name)
                    added += 1
        logger.debug(f"O{objidx}: {added} new interesting symbol(s)")
        return added

    # =========================================================================
    # Pass 2
    # =========================================================================

    def close_interesting(self) -> int:
        self._enter(Stage.CLOSURE, (Stage.START, Stage.DISCOVERY))
        added = self.model.extend_interesting()
        logger.info(f"Pass 2: {len(self.model.interesting)} interesting symbol(s), "
                    f"{added} base name(s) added")
        self._next_object = 0
        return added

    # =========================================================================
    # Pass 3
    # =========================================================================

    def extract(self, objidx: int, path: str):
        if self.stage == Stage.CLOSURE:
            self._enter(Stage.EXTRACTION, (Stage.CLOSURE,))
        elif self.stage != Stage.EXTRACTION:
            raise ResolverStateError(f"cannot run extraction during {self.stage.name}")
        self._check_order(objidx)

        logger.info(f"Pass 3: O{objidx} {path}")
        source_path = recover_source_path(path)
        self.model.add_object(path, source_path)
        text = self.runner.details(path, self.config.sections)
        self.digest(objidx, text)

    def digest(self, objidx: int, text: str):
        """Feed one object's section/symbol/relocation dump into the model"""
        model = self.model
        nsyms = nrelocs = 0
        for block in DumpReader(text).blocks():
            if isinstance(block, SectionTable):
                for row in block.rows:
                    model.add_section(objidx, row.name, row.ordinal, row.size)
            elif isinstance(block, SymbolTable):
                for row in block.rows:
                    if model.admit_symbol_row(objidx, row.name, row.secidx, row.value) is not None:
                        nsyms += 1
                model.close_symbol_table(objidx)
            elif isinstance(block, RelocationGroup):
                section = block.header.section
                if model.section_object == objidx:
                    info = model.lookup_section(objidx, section)
                    if info is None:
                        logger.debug(f"O{objidx}: relocations for unlisted section {section}")
                    else:
                        logger.debug(f"O{objidx}: relocations for section {info.ordinal} {section}")
                for row in block.rows:
                    if model.bind_relocation(row.symbol, objidx, row.offset):
                        nrelocs += 1
        logger.info(f"O{objidx}: {nsyms} symbol row(s), {nrelocs} relocation(s) admitted")
