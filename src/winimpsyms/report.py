#!/usr/bin/env python3
"""
Report Renderer
===============

Turns a finished CrossRefModel into text. Nothing here mutates the model.

- render_report(): object list, sections, sorted defs, sorted refs and the
  def/ref breakdown
- ExcerptWriter: for every object referencing a watched symbol, prints the
  disassembly lines around each relocation against it
"""

import json
import logging
import re
from typing import AbstractSet, Iterable, List, Optional

from .config import ResolverConfig
from .classifier import base_name, import_name, is_import_name
from .errors import ExcerptError
from .model import CrossRefModel
from .objdump import ObjdumpRunner
from .types import ObjectInfo, RefInfo

logger = logging.getLogger(__name__)

# 0000000000000000 <makeEvent>:
FUNC_RE = re.compile(r'^\S+\s+<(\S+)>:\s*$')
# 000000000000009b:  IMAGE_REL_AMD64_REL32	printf
INLINE_RELOC_RE = re.compile(r'^\s+(\S+):\s+IMAGE_\S+\s+(\S+)\s*$')

CONTEXT_LINES = 2


def quote(name: str) -> str:
    return json.dumps(name, ensure_ascii=False)


def hexlist(values: Iterable[int]) -> str:
    return "[" + " ".join(f"0x{v:x}" for v in values) + "]"


def _render_refs(model: CrossRefModel, name: str) -> List[str]:
    out = [f" {quote(name)}:"]
    for j, ref in enumerate(model.refs[name]):
        mark = "*" if ref.is_def else " "
        out.append(f"  {mark}{j}: O={ref.objidx} S={ref.secidx} {hexlist(ref.offsets)}")
    return out


def render_report(model: CrossRefModel) -> str:
    out = ["Objects:"]
    for obj in model.objects:
        out.append(f" O{obj.index}: {obj.path} {obj.source_path}")

    out.append("Sections:")
    for sec in model.sections:
        out.append(f" O{sec.objidx}: {sec.ordinal} {quote(sec.name)} 0x{sec.size:x}")

    if model.defs:
        out.append("Defs:")
        for k, name in enumerate(sorted(model.defs)):
            di = model.defs[name]
            out.append(f" {k}: {quote(name)} obj={di.objidx} sec={di.secidx} val=0x{di.value:x}")

    if model.refs:
        # each base symbol is followed by its import form
        out.append("Refs:")
        for name in model.reference_names():
            if is_import_name(name):
                if base_name(name) in model.refs:
                    continue
                out.extend(_render_refs(model, name))
                continue
            out.extend(_render_refs(model, name))
            if import_name(name) in model.refs:
                out.extend(_render_refs(model, import_name(name)))

    out.append("Def/ref breakdown:")
    for name, mask in model.dispositions():
        out.append(f" {quote(name)}: {mask.describe()}")
    return "\n".join(out) + "\n"


# =============================================================================
# 反汇编摘录
# =============================================================================

def collect_watched_objects(model: CrossRefModel,
                            watched: AbstractSet[str]) -> List[ObjectInfo]:
    """Objects holding a reference entry for any watched symbol, by path then index"""
    indices = set()
    for name in watched:
        for ref in model.refs.get(name, []):
            indices.add(ref.objidx)
    objects = [model.objects[i] for i in indices]
    return sorted(objects, key=lambda obj: (obj.path, obj.index))


def _locate(model: CrossRefModel, name: str, objidx: int, offset: int) -> RefInfo:
    ref = model.find_reference(name, objidx, offset)
    if ref is not None:
        return ref
    if model.has_object_references(name, objidx):
        raise ExcerptError(f"could not find offset 0x{offset:x} in refinfo for "
                           f"fn={name} in O{objidx}")
    raise ExcerptError(f"could not find refinfo for fn={name} of=0x{offset:x} in O{objidx}")


def render_excerpts(model: CrossRefModel, listing: str, objidx: int,
                    watched: AbstractSet[str]) -> str:
    """
    Extract excerpts around watched-symbol relocations from one object's
    `-l -d -r` listing.

    Args:
        model: The finished model; every relocation found must be known to it
        listing: Text output of the disassembler for object `objidx`
        objidx: Index of the object the listing belongs to
        watched: Expanded watch set (bare and __imp_ forms)

    Returns:
        The excerpt text, "" when nothing watched is relocated
    """
    lines = listing.split("\n")
    fn_line = 0
    hits = []
    for i, line in enumerate(lines):
        m = FUNC_RE.match(line)
        if m:
            fn_line = i
            continue
        m = INLINE_RELOC_RE.match(line)
        if not m:
            continue
        name = m.group(2)
        if name not in watched:
            continue
        try:
            offset = int(m.group(1), 16)
        except ValueError:
            raise ExcerptError(f"bad offset {m.group(1)} in line {line!r}")
        ref = _locate(model, name, objidx, offset)
        hits.append((i, ref.objidx, offset, fn_line))

    out = []
    for i, ref_obj, offset, fn in hits:
        out.append(f"\n=-= ref O{ref_obj} off=0x{offset:x}:")
        out.append(f"{fn}: {lines[fn]}")
        out.append("...")
        for ci in range(max(i - CONTEXT_LINES, 0), min(i + CONTEXT_LINES + 1, len(lines))):
            out.append(f"{ci}: {lines[ci]}")
    if not out:
        return ""
    return "\n".join(out) + "\n"


class ExcerptWriter:

    def __init__(self, model: CrossRefModel, config: ResolverConfig,
                 runner: Optional[ObjdumpRunner] = None):
        self.model = model
        self.config = config
        self.runner = runner if runner is not None else ObjdumpRunner(config.dumper)

    def render(self) -> str:
        watched = self.config.watched
        out = []
        for obj in collect_watched_objects(self.model, watched):
            logger.info(f"Disassembling O{obj.index} {obj.path} for excerpts")
            listing = self.runner.disassemble(obj.path)
            out.append(f"\nexcerpts from '{self.config.dumper} -ldr {obj.path}`\n")
            out.append(render_excerpts(self.model, listing, obj.index, watched))
        return "".join(out)
