#!/usr/bin/env python3
"""
Run configuration
=================

ResolverConfig carries everything that used to be process-wide state:
the input objects, the all-symbols switch, the watch set and the
inspection tool to run. Build it once and hand it to the resolver.
"""

from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .types import DEFAULT_DUMPER, EXTRACT_SECTIONS, IMPORT_PREFIX


def split_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated option value, dropping empty items"""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def expand_watch_names(names: Iterable[str]) -> FrozenSet[str]:
    """Watching X also watches __imp_X"""
    watched = set()
    for name in names:
        watched.add(name)
        watched.add(IMPORT_PREFIX + name)
    return frozenset(watched)


class ResolverConfig:

    def __init__(self, inputs: Sequence[str], watch: Iterable[str] = (),
                 all_symbols: bool = False, dumper: str = DEFAULT_DUMPER,
                 sections: Tuple[str, ...] = EXTRACT_SECTIONS):
        self.inputs = list(inputs)
        self.watch_names = list(watch)
        self.watched = expand_watch_names(self.watch_names)
        self.all_symbols = all_symbols
        self.dumper = dumper
        self.sections = tuple(sections)

    @classmethod
    def from_options(cls, inputs: str, watch: Optional[str] = None,
                     all_symbols: bool = False,
                     dumper: str = DEFAULT_DUMPER) -> 'ResolverConfig':
        return cls(split_list(inputs), split_list(watch),
                   all_symbols=all_symbols, dumper=dumper)

    def __repr__(self):
        return (f"ResolverConfig(inputs={self.inputs!r}, watch={self.watch_names!r}, "
                f"all_symbols={self.all_symbols}, dumper={self.dumper!r})")
