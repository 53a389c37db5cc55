#!/usr/bin/env python3
"""
namegen CLI
===========
Learn a sample file and print generated names.

Usage:
    namegen markov names.txt -n 20 --tokens th,ae --lrs --rtf
    namegen grammar rows.txt -n 20 --subtokens th,sh --rlf --ral
    namegen wordlist titles.txt -n 5 --seed 7
"""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich import box

from . import __version__
from .core import GenerationState, LearnError, ValidationError
from .generators import GrammarEngine, MarkovEngine, WordList, new_rng
from .sample import load_sample_sets
from .settings import get_setting, resolve_path

logger = logging.getLogger(__name__)


# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def print(self, *args, **kwargs):
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def error(self, msg: str):
        self.err_console.print(f"Error: {msg}", markup=False, soft_wrap=True)

    def names(self, names: list, columns: int):
        """Print names as a borderless grid."""
        table = Table(show_header=False, box=box.SIMPLE, pad_edge=False)
        for _ in range(columns):
            table.add_column()
        for i in range(0, len(names), columns):
            row = names[i:i + columns]
            table.add_row(*(Text(n) for n in row), *([''] * (columns - len(row))))
        self.console.print(table)


def split_list(value: str) -> list:
    """Split a comma-separated option value."""
    if not value:
        return []
    return [v.strip() for v in value.split(',') if v.strip()]


def configure_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else get_setting('logging.level', 'WARNING')
    logging.basicConfig(
        level=level,
        format=get_setting('logging.format', '%(levelname)s %(name)s: %(message)s'),
    )


def build_engine(args):
    """Create the engine selected on the command line."""
    if args.engine == 'markov':
        return MarkovEngine(
            args.tokens,
            lrs=args.lrs, lrm=args.lrm, lre=args.lre, rtf=args.rtf,
        )
    if args.engine == 'grammar':
        return GrammarEngine(args.subtokens, rlf=args.rlf, ral=args.ral)
    return WordList()


# =============================================================================
# Commands
# =============================================================================

def cmd_generate(args, out: Output) -> int:
    """Learn the sample file and generate names."""
    path = resolve_path(args.file)
    kind = 'tokens' if args.engine == 'grammar' else 'word'
    sample_sets = load_sample_sets(path, kind=kind)

    engine = build_engine(args)
    for sample_set in sample_sets:
        engine.learn(sample_set)
    logger.info(f"Learned {sum(len(s) for s in sample_sets)} samples from {path}")

    if args.validate:
        engine.validate()
        out.print("[green]OK:[/green] model is valid")

    if getattr(args, 'tree', False):
        out.print(engine.format_tree(), markup=False)

    state = GenerationState()
    rng = new_rng(args.seed)
    names = list(engine.generate_many(args.count, state, rng))

    if args.json:
        print(json.dumps(names, ensure_ascii=False))
    else:
        out.names(names, args.columns)
    return 0


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='namegen',
        description='Generate names from learned samples',
    )
    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('file', help='Sample file')
    common.add_argument('-n', '--count', type=int, default=get_setting('cli.count', 20),
                        help='Number of names (default: %(default)s)')
    common.add_argument('--seed', type=int, help='RNG seed for reproducible output')
    common.add_argument('--columns', type=int, default=get_setting('cli.columns', 4),
                        help='Names per row (default: %(default)s)')
    common.add_argument('--validate', action='store_true', help='Validate the model after learning')
    common.add_argument('--json', '-j', action='store_true', help='Output as JSON')
    common.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='engine', help='Engines')

    # --- markov ---
    p = subparsers.add_parser('markov', parents=[common], help='Markov chain over tokens')
    p.add_argument('--tokens', type=split_list, default=get_setting('markov.tokens', []),
                   help='Comma-separated multi-letter tokens (e.g. th,ae)')
    p.add_argument('--lrs', action='store_true', default=get_setting('markov.lrs', False),
                   help='Restrict length by start')
    p.add_argument('--lrm', action='store_true', default=get_setting('markov.lrm', False),
                   help='Restrict length in the middle')
    p.add_argument('--lre', action='store_true', default=get_setting('markov.lre', False),
                   help='Restrict length by ending')
    p.add_argument('--rtf', action='store_true', default=get_setting('markov.rtf', False),
                   help='Restrict token frequencies')
    p.add_argument('--tree', action='store_true', help='Print the learned graph')

    # --- grammar ---
    p = subparsers.add_parser('grammar', parents=[common], help='Slot grammar over labeled columns')
    p.add_argument('--subtokens', type=split_list, default=get_setting('cfgrammar.subtokens', []),
                   help='Comma-separated multi-letter subtokens (e.g. th,sh)')
    p.add_argument('--rlf', action='store_true', default=get_setting('cfgrammar.rlf', False),
                   help='Restrict subtoken frequencies')
    p.add_argument('--ral', action='store_true', default=get_setting('cfgrammar.ral', False),
                   help='Restrict adjacent subtokens')

    # --- wordlist ---
    subparsers.add_parser('wordlist', parents=[common], help='Weighted word list')

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.engine:
        parser.print_help()
        return 0

    configure_logging(args.verbose)
    out = Output(quiet=args.quiet)

    if args.count < 0:
        out.error("--count cannot be negative")
        return 1
    if args.columns < 1:
        out.error("--columns must be at least 1")
        return 1

    try:
        return cmd_generate(args, out)
    except KeyboardInterrupt:
        out.print("\nCancelled.")
        return 130
    except (LearnError, ValidationError, FileNotFoundError, ValueError) as e:
        out.error(str(e))
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
