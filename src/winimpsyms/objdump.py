#!/usr/bin/env python3
"""
Object-inspection tool runner
=============================

Thin wrapper around llvm-objdump. Each call blocks until the tool exits;
a non-zero exit or a failure to start raises ExternalToolError carrying the
tool's stderr.
"""

import logging
import subprocess
from typing import List, Sequence

from .errors import ExternalToolError
from .types import DEFAULT_DUMPER

logger = logging.getLogger(__name__)


class ObjdumpRunner:

    def __init__(self, dumper: str = DEFAULT_DUMPER):
        self.dumper = dumper

    def run(self, args: List[str], path: str) -> str:
        cmd = [self.dumper] + args + [path]
        logger.debug(f"> {' '.join(cmd)}")
        try:
            proc = subprocess.run(cmd, capture_output=True, check=True,
                                  universal_newlines=True)
        except subprocess.CalledProcessError as e:
            raise ExternalToolError(path, cmd, e.returncode, e.stderr or e.stdout or "")
        except OSError as e:
            raise ExternalToolError(path, cmd, None, str(e))
        return proc.stdout

    def symbols(self, path: str) -> str:
        """Symbol table only (pass 1)"""
        return self.run(['-t'], path)

    def details(self, path: str, sections: Sequence[str]) -> str:
        """Section headers, symbols and relocations for `sections` (pass 3)"""
        args = ['-h', '-t', '-r']
        args += [f'--section={name}' for name in sections]
        return self.run(args, path)

    def disassemble(self, path: str) -> str:
        """Line numbers, disassembly and inline relocations (excerpts)"""
        return self.run(['-l', '-d', '-r'], path)
