#!/usr/bin/env python3
"""
winimpsyms command line
=======================

Given a set of COFF object files, find where every import symbol (__imp_X)
and its base symbol (X) is defined and referenced, down to relocation
offsets. Built for chasing linker bugs in import symbol resolution.

CLI Usage:
    winimpsyms -i a.o,b.o,c.o --watch foo,bar -d

Module Usage:
    import winimpsyms

    model = winimpsyms.resolve(['a.o', 'b.o'], watch=['foo'])
    print(winimpsyms.render_report(model))
"""

import sys
import argparse
import logging
from typing import Iterable, Optional, Sequence

from .config import ResolverConfig
from .errors import WinImpSymsError
from .model import CrossRefModel
from .objdump import ObjdumpRunner
from .report import ExcerptWriter, render_report
from .resolver import ImportSymbolResolver
from .types import DEFAULT_DUMPER
from .utils import setup_logging

logger = logging.getLogger(__name__)


def resolve(inputs: Sequence[str], watch: Iterable[str] = (),
            all_symbols: bool = False, dumper: str = DEFAULT_DUMPER,
            runner: Optional[ObjdumpRunner] = None) -> CrossRefModel:
    """
    Run all three passes over `inputs` and return the finished model.

    Raises:
        WinImpSymsError: on any tool, decode or consistency failure
    """
    config = ResolverConfig(inputs, watch, all_symbols=all_symbols, dumper=dumper)
    return ImportSymbolResolver(config, runner).run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='winimpsyms',
        description='Cross-reference import symbols (__imp_X) and their base symbols '
                    'across COFF object files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Import symbols only
  winimpsyms -i a.o,b.o

  # Also track foo/__imp_foo and print disassembly around their relocations
  winimpsyms -i a.o,b.o --watch foo -d
        """
    )
    parser.add_argument('-i', '--inputs', required=True,
                        help='Comma-separated list of input object files')
    parser.add_argument('--all', dest='all_symbols', action='store_true',
                        help='Process all syms, not just import syms')
    parser.add_argument('--watch', default='',
                        help='Comma-separated list of additional symbols to include in analysis')
    parser.add_argument('--dumper', default=DEFAULT_DUMPER,
                        help=f'Object inspection tool to run (default: {DEFAULT_DUMPER})')
    parser.add_argument('-o', '--output',
                        help='Write the report to this file instead of stdout')
    parser.add_argument('--no-excerpts', action='store_true',
                        help='Skip disassembly excerpts for watched symbols')
    parser.add_argument('-d', '--debug', action='store_true',
                        help='Enable debug output')
    return parser


def main(argv: Optional[Sequence[str]] = None, runner: Optional[ObjdumpRunner] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)

    config = ResolverConfig.from_options(args.inputs, args.watch,
                                         all_symbols=args.all_symbols,
                                         dumper=args.dumper)
    if not config.inputs:
        parser.error("supply input files with -i option")
    if runner is None:
        runner = ObjdumpRunner(config.dumper)

    try:
        model = ImportSymbolResolver(config, runner).run()
        text = f"state: {render_report(model)}\n"
        if config.watched and not args.no_excerpts:
            text += ExcerptWriter(model, config, runner).render()

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(text)
            logger.info(f"Wrote report to {args.output}")
        else:
            sys.stdout.write(text)
        return 0

    except WinImpSymsError as e:
        logger.error(str(e))
        if args.debug:
            import traceback
            traceback.print_exc()
        return 1
    except (IOError, OSError) as e:
        logger.error(f"Failed to write output file {args.output}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
