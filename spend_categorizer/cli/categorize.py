#!/usr/bin/env python3
"""
Transaction categorization CLI

Resolves categories for descriptions given on the command line, in a text
file (one per line) or in a JSON file of transaction objects.
"""
import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import List

from spend_categorizer.config import Settings
from spend_categorizer.core.categorization_orchestrator import category_distribution, create_orchestrator
from spend_categorizer.core.errors import CategorizationError
from spend_categorizer.core.models import Transaction


def load_transactions(args) -> List[Transaction]:
    """Collect transactions from positional args, --file and --json"""
    transactions = [
        Transaction(description=desc, amount=0.0, date=date.today(), currency=args.currency)
        for desc in args.descriptions
    ]

    if args.file:
        with open(args.file) as f:
            for line in f:
                line = line.strip()
                if line:
                    transactions.append(
                        Transaction(description=line, amount=0.0, date=date.today(), currency=args.currency)
                    )

    if args.json:
        with open(args.json) as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{args.json} must contain a JSON list of transactions")
        transactions.extend(Transaction.from_dict(item) for item in data)

    return transactions


def main(argv=None):
    """Main categorize function"""
    parser = argparse.ArgumentParser(description='Categorize bank transaction descriptions')
    parser.add_argument('descriptions', nargs='*', help='Transaction descriptions')
    parser.add_argument('--file', type=Path, help='Text file with one description per line')
    parser.add_argument('--json', type=Path, help='JSON file with a list of transactions')
    parser.add_argument('--currency', default='EUR', help='Currency for plain descriptions (default: EUR)')
    parser.add_argument('--no-llm', action='store_true', help='Disable LLM categorization (no API credits used)')
    parser.add_argument('--no-remote', action='store_true', help='Use the local cache only')
    parser.add_argument('--batch-size', type=int, help='Descriptions per LLM call')
    parser.add_argument('--output', type=Path, help='Write categorized transactions to this JSON file')
    parser.add_argument('--cache-stats', action='store_true', help='Print local cache contents summary')

    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except CategorizationError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(1)

    if args.batch_size:
        settings = replace(settings, batch_size=args.batch_size)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        transactions = load_transactions(args)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ Could not read transactions: {e}")
        sys.exit(1)

    if not transactions and not args.cache_stats:
        parser.error("no descriptions given (use positional args, --file or --json)")

    print("=" * 80)
    print("🏷️  TRANSACTION CATEGORIZATION")
    print("=" * 80)
    print(f"Transactions: {len(transactions)}")
    print(f"LLM Enabled: {settings.llm_configured and not args.no_llm}")
    print(f"Remote Cache: {settings.remote_configured and not args.no_remote}")
    print("=" * 80)

    orchestrator = create_orchestrator(
        settings,
        use_llm=False if args.no_llm else None,
        use_remote=False if args.no_remote else None,
    )

    try:
        with orchestrator:
            categorized = orchestrator.resolve(transactions) if transactions else []

            if categorized:
                print(f"\n📋 Results:")
                for i, txn in enumerate(categorized, 1):
                    status = "✅" if txn.category and txn.category.is_informative else "⚠️ "
                    print(f"{status} {i:3d}. {txn.description[:50]:<50} → {txn.category.value}")

                orchestrator.print_stats()

                print(f"\n📊 Category distribution:")
                distribution = category_distribution(categorized)
                for category, count in sorted(distribution.items(), key=lambda x: x[1], reverse=True):
                    print(f"  • {category.value}: {count}")

            if args.output:
                with open(args.output, 'w') as f:
                    json.dump([t.to_dict() for t in categorized], f, indent=2)
                print(f"\n💾 Wrote {len(categorized)} transactions to {args.output}")

            if args.cache_stats:
                stats = orchestrator.cache.stats()
                print(f"\n🗃️  Local cache: {stats['total']} mappings "
                      f"(remote {'on' if stats['remote_configured'] else 'off'})")
                for entry in stats['entries'][:20]:
                    print(f"   • {entry['name'][:50]:<50} {entry['category']}")
                if stats['total'] > 20:
                    print(f"   ... and {stats['total'] - 20} more")

    except OSError as e:
        print(f"\n❌ Categorization failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 80)
    print("✅ Categorization complete!")
    print("=" * 80)


if __name__ == "__main__":
    main()
