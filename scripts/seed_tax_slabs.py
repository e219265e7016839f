#!/usr/bin/env python3
"""
Seed the starter GST slab set (0/5/12/18/28%, 18% default).

Usage:
    python scripts/seed_tax_slabs.py
    python scripts/seed_tax_slabs.py --list
"""
import argparse
import sys

from gstledger.core.exceptions import AlreadySeededError
from gstledger.core.logger import init_logging
from gstledger.db.session import session_scope
from gstledger.services.gst import build_gst_service


def seed() -> int:
    with session_scope() as db:
        service = build_gst_service(db)
        try:
            slabs = service.bulk_create_default_slabs()
        except AlreadySeededError as exc:
            print(f"Skipped: {exc.message}")
            return 1
        for slab in slabs:
            marker = " (default)" if slab.is_default else ""
            print(f"  {slab.id:>4}  {slab.name:<10} {slab.rate}%{marker}")
        print(f"Seeded {len(slabs)} tax slabs")
    return 0


def list_slabs() -> int:
    with session_scope() as db:
        slabs = build_gst_service(db).list_slabs()
        if not slabs:
            print("No tax slabs found")
        for slab in slabs:
            marker = " (default)" if slab.is_default else ""
            print(f"  {slab.id:>4}  {slab.name:<10} {slab.rate}% {slab.status}{marker}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed default GST tax slabs")
    parser.add_argument("--list", action="store_true", help="List existing slabs instead of seeding")
    args = parser.parse_args(argv)

    init_logging()
    if args.list:
        return list_slabs()
    return seed()


if __name__ == "__main__":
    sys.exit(main())
