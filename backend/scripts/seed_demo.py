#!/usr/bin/env python3
import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List

REPO_BACKEND = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_BACKEND))

from marketplace.config import load_store_config  # noqa: E402
from marketplace.dependencies import build_marketplace  # noqa: E402
from marketplace.models import CreateServiceData, RegisterData  # noqa: E402
from marketplace.services.account_client import AccountConflictError  # noqa: E402

DEMO_PASSWORD = "marketplace-demo"

DEMO_SERVICES: List[Dict[str, Any]] = [
    {
        "title": "Leaky Tap Repair",
        "description": "Washer and cartridge replacement for kitchen and bathroom taps.",
        "category": "Plumbing",
        "price": 500,
        "duration": 60,
        "location": "Indiranagar",
    },
    {
        "title": "Ceiling Fan Installation",
        "description": "Mounting, wiring and balancing of one ceiling fan.",
        "category": "Electrical",
        "price": 650,
        "duration": 90,
        "location": "Koramangala",
    },
    {
        "title": "Deep Kitchen Cleaning",
        "description": "Degreasing of cabinets, chimney and tiles.",
        "category": "Cleaning",
        "price": 1800,
        "duration": 180,
    },
]


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed a demo provider, customer and listings.")
    parser.add_argument("--db-path", type=str, default="", help="SQLite file to seed (defaults to MARKETPLACE_DB_PATH).")
    parser.add_argument("--provider-email", type=str, default="provider@example.com")
    parser.add_argument("--customer-email", type=str, default="customer@example.com")
    args = parser.parse_args()

    config = load_store_config()
    if args.db_path:
        config = replace(config, db_path=args.db_path)
    marketplace = build_marketplace(config)
    session = marketplace.session

    accounts = [
        RegisterData(name="Demo Provider", email=args.provider_email, password=DEMO_PASSWORD, role="provider"),
        RegisterData(name="Demo Customer", email=args.customer_email, password=DEMO_PASSWORD, role="customer"),
    ]
    for data in accounts:
        try:
            session.register(data)
            print(f"Registered {data.role}: {data.email}")
        except AccountConflictError:
            print(f"Already registered: {data.email}")

    provider = session.login(args.provider_email, DEMO_PASSWORD)
    if provider is None or provider.role != "provider":
        print(f"{args.provider_email} is not a provider account")
        return 1

    created = []
    for fields in DEMO_SERVICES:
        service = marketplace.listings.create_service(CreateServiceData(**fields), provider.id, provider.name)
        created.append({"id": service.id, "title": service.title, "price": service.price})
    session.logout()

    print(json.dumps({"db_path": config.db_path, "services": created}, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
