#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

import coffee_menu.models  # noqa: E402,F401
from coffee_menu.core.config import IS_DEV  # noqa: E402
from coffee_menu.core.database import Base, SessionLocal, engine  # noqa: E402
from coffee_menu.services.admin_bootstrap import upsert_main_admin, upsert_shop_admin  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update a main admin or shop admin.")
    parser.add_argument("kind", choices=["main", "shop"], help="Principal kind")
    parser.add_argument("--username", required=True, help="Admin username")
    parser.add_argument("--password", help="Admin password (required when creating)")
    parser.add_argument("--shop", type=int, help="Coffee shop ID (shop admins only)")
    return parser.parse_args()


def main() -> int:
    args = parse_args()

    if args.kind == "shop" and args.shop is None:
        print("--shop is required for shop admins.")
        return 1

    if IS_DEV:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if args.kind == "main":
            admin, created = upsert_main_admin(db, username=args.username, password=args.password)
        else:
            admin, created = upsert_shop_admin(
                db,
                shop_id=args.shop,
                username=args.username,
                password=args.password,
            )
    except ValueError as exc:
        print(str(exc))
        return 1
    finally:
        db.close()

    action = "created" if created else "updated"
    shop_info = f" shop={admin.coffee_shop_id}" if args.kind == "shop" else ""
    print(f"{args.kind.capitalize()} admin {action}: id={admin.id} username={admin.username}{shop_info}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
