#!/usr/bin/env python3
"""Print the token stream of a journal file, one token per line.

    python scripts/dump_tokens.py examples/books.journal
    python scripts/dump_tokens.py examples/books.journal --raw

Exits 1 if the file does not lex.
"""

import argparse
import sys
from pathlib import Path

from tallybook import LexError, Lexer, fold_tokens, format_error
from tallybook.report import locate
from tallybook.tokens import DecoratedToken


def format_token(idx: int, token: DecoratedToken, source: str) -> str:
    line, column = locate(source, token.location)
    return f"[{idx}] {line}:{column} offset={token.location} {token.token}"


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump the tokens of a journal file")
    parser.add_argument("file", type=Path)
    parser.add_argument("--raw", action="store_true", help="Show tokens before folding")
    args = parser.parse_args()

    source = args.file.read_text(encoding="utf-8")
    try:
        tokens = Lexer(source).tokenize()
    except LexError as e:
        print(format_error(e, source, str(args.file)), file=sys.stderr)
        return 1
    if not args.raw:
        tokens = fold_tokens(tokens)

    for idx, token in enumerate(tokens):
        print(format_token(idx, token, source))
    print(f"{len(tokens)} tokens", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
