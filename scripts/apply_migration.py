#!/usr/bin/env python3
"""
Print the follow_ups schema migration and verify the table afterwards.

The Supabase Python client cannot run DDL, so the SQL has to be pasted into
the Supabase SQL editor. Run with --verify once applied.

Usage:
    python scripts/apply_migration.py
    python scripts/apply_migration.py --verify
"""

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from services.database import FollowUpRepository, create_supabase_client, RepositoryError
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MIGRATION_FILE = os.path.join(
    os.path.dirname(__file__),
    '..',
    'docs',
    'migrations',
    '001_create_follow_ups.sql'
)


def show_migration(sql_file_path: str):
    """Print migration SQL with instructions"""
    try:
        with open(sql_file_path, 'r') as f:
            sql = f.read()
    except FileNotFoundError:
        print(f"❌ Error: Migration file not found: {sql_file_path}")
        sys.exit(1)

    print("\n" + "=" * 80)
    print(f"MIGRATION: {os.path.basename(sql_file_path)}")
    print("=" * 80 + "\n")
    print(sql)
    print("-" * 80)
    print("Apply it manually:")
    print("  1. Go to your Supabase dashboard")
    print("  2. Navigate to SQL Editor")
    print(f"  3. Paste the contents of: {os.path.abspath(sql_file_path)}")
    print("  4. Execute, then re-run this script with --verify")
    print()


def verify_table() -> bool:
    """Check the follow_ups table answers a select"""
    try:
        repository = FollowUpRepository(create_supabase_client())
        repository.check_connection()
    except RepositoryError as e:
        print(f"❌ follow_ups table not reachable: {e}")
        return False

    print("✅ follow_ups table is reachable")
    return True


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="follow_ups schema migration helper")
    parser.add_argument('--verify', action='store_true', help='Only check that the table exists')
    args = parser.parse_args()

    if args.verify:
        sys.exit(0 if verify_table() else 1)

    show_migration(MIGRATION_FILE)
