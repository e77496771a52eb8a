#!/usr/bin/env python3
"""
Symbol Interest Classifier
==========================

Decides whether a symbol name is worth tracking. Every decoded record is
checked here before it reaches the model; uninteresting names are dropped
on the spot and leave no trace.
"""

from typing import AbstractSet

from .config import ResolverConfig
from .types import IMPORT_PREFIX


def is_import_name(name: str) -> bool:
    return name.startswith(IMPORT_PREFIX)


def base_name(name: str) -> str:
    """__imp_X -> X; anything else is returned unchanged"""
    if is_import_name(name):
        return name[len(IMPORT_PREFIX):]
    return name


def import_name(name: str) -> str:
    return IMPORT_PREFIX + name


class SymbolClassifier:
    """
    Args:
        config: Run configuration (all-symbols switch, watch set)
        interesting: The live Interesting-Symbol Set; the classifier only
            reads it, the resolver grows it
    """

    def __init__(self, config: ResolverConfig, interesting: AbstractSet[str]):
        self.config = config
        self.interesting = interesting

    def is_interesting(self, name: str, include_closure: bool = True) -> bool:
        if is_import_name(name):
            return True
        if self.config.all_symbols:
            return True
        if name in self.config.watched:
            return True
        return include_closure and name in self.interesting
