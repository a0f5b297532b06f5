"""Compile a journal and summarize balances per account.

Usage:
    python examples/export_books.py examples/books.journal
    python examples/export_books.py examples/books.journal books.json

Prints every account's running balance per commodity, and optionally writes
the compiled journal as JSON.
"""

import sys
from collections import defaultdict
from pathlib import Path

from tallybook import JournalError, compile_string, format_error


def account_balances(journal) -> dict[str, dict[str, int]]:
    """Total each account's postings per commodity."""
    totals: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for t in journal.transactions:
        for p in t.postings:
            totals[p.account][p.commodity] += p.amount
    return {account: dict(by_commodity) for account, by_commodity in sorted(totals.items())}


def main(journal_path: str, output_path: str | None = None) -> int:
    source = Path(journal_path).read_text(encoding="utf-8")

    print(f"Compiling {journal_path}...")
    try:
        journal = compile_string(source)
    except JournalError as e:
        print(format_error(e, source, journal_path), file=sys.stderr)
        return 1
    print(f"  {len(journal.transactions)} transactions")

    print()
    print(f"{'Account':<24} {'Commodity':<10} {'Balance':>12}")
    print("-" * 48)
    for account, by_commodity in account_balances(journal).items():
        for commodity, amount in by_commodity.items():
            print(f"{account:<24} {commodity:<10} {amount:>12,}")

    if output_path:
        Path(output_path).write_text(journal.to_json(indent=2) + "\n", encoding="utf-8")
        print(f"\nWrote {output_path}")

    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    sys.exit(main(*sys.argv[1:3]))
