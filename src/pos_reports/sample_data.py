"""Generate sample back-office records for demos and tests."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional
import numpy as np
from faker import Faker

from .report_templates import ReportKind


CATEGORY_NAMES = ["Beer", "Spirits", "Wine", "Soft Drinks", "Snacks", "Tobacco"]

DAMAGE_REASONS = ["Broken", "Expired", "Leaking", "Crushed in delivery", "Spoiled"]
RETURN_REASONS = ["Customer return", "Wrong item", "Supplier recall", "Damaged packaging"]

BOTTLE_TYPES = ["Beer crate", "Soda crate", "Glass 330ml", "Glass 500ml", "Keg"]
BOTTLE_UNITS = ["crate", "piece", "keg"]

INCOME_LABELS = ["Deposit refund", "Event rental", "Delivery fee", "Commission"]
EXPENSE_LABELS = ["Electricity", "Water", "Rent", "Transport", "Repairs", "Salaries"]


@dataclass
class Catalog:
    """Categories and products that sample movements refer to."""
    categories: List[dict]
    products: List[dict]

    def product_ref(self, product: dict) -> dict:
        """Nested product reference as the data store returns it in joins."""
        category = next(
            (c for c in self.categories if c["id"] == product["category_id"]), None
        )
        return {
            "name": product["name"],
            "price": product["price"],
            "categories": {"name": category["name"]} if category else None,
        }


def generate_catalog(
    rng: np.random.Generator,
    fake: Faker,
    num_products: int = 20,
) -> Catalog:
    """Generate categories and priced products with stock on hand."""
    categories = [
        {"id": idx + 1, "name": name} for idx, name in enumerate(CATEGORY_NAMES)
    ]

    products = []
    for idx in range(num_products):
        category = categories[int(rng.integers(0, len(categories)))]
        products.append({
            "id": idx + 1,
            "name": f"{fake.word().title()} {category['name'].rstrip('s')}",
            "category_id": category["id"],
            "price": round(float(rng.uniform(0.5, 60.0)), 2),
            "current_stock": int(rng.integers(0, 250)),
        })

    return Catalog(categories=categories, products=products)


def _random_date(rng: np.random.Generator, start: date, end: date) -> date:
    span = max((end - start).days, 0)
    return start + timedelta(days=int(rng.integers(0, span + 1)))


def _movement(
    catalog: Catalog,
    rng: np.random.Generator,
    date_key: str,
    start: date,
    end: date,
    orphan_rate: float,
) -> dict:
    product = catalog.products[int(rng.integers(0, len(catalog.products)))]
    quantity = int(rng.integers(1, 24))
    record = {
        "id": int(rng.integers(1, 10**6)),
        date_key: _random_date(rng, start, end).isoformat(),
        "quantity": quantity,
        "product_id": product["id"],
        "products": catalog.product_ref(product),
    }
    # Products deleted after the movement was recorded come back as null
    if rng.random() < orphan_rate:
        record["products"] = None
    return record


def generate_records(
    kind: ReportKind,
    catalog: Catalog,
    rng: np.random.Generator,
    fake: Faker,
    start: date,
    end: date,
    num_rows: int = 25,
    orphan_rate: float = 0.0,
) -> List[dict]:
    """
    Generate records for one dataset, shaped like the data store's rows.

    Sales, purchases, damages and returns embed their product under
    "products"; `orphan_rate` sets the share whose product is missing.
    """
    kind = ReportKind(kind)
    records: List[dict] = []

    if kind == ReportKind.CURRENT_STOCK:
        for product in catalog.products[:num_rows]:
            ref = catalog.product_ref(product)
            records.append({
                "id": product["id"],
                "name": product["name"],
                "price": product["price"],
                "current_stock": product["current_stock"],
                "categories": ref["categories"],
            })
        return records

    for _ in range(num_rows):
        if kind == ReportKind.SALES:
            record = _movement(catalog, rng, "sale_date", start, end, orphan_rate)
            price = (record["products"] or {}).get("price") or float(rng.uniform(1, 40))
            record["revenue"] = round(price * record["quantity"], 2)
        elif kind == ReportKind.PURCHASES:
            record = _movement(catalog, rng, "purchase_date", start, end, orphan_rate)
            record["supplier"] = fake.company()
        elif kind == ReportKind.DAMAGES:
            record = _movement(catalog, rng, "damage_date", start, end, orphan_rate)
            record["reason"] = str(rng.choice(DAMAGE_REASONS))
        elif kind == ReportKind.RETURNS:
            record = _movement(catalog, rng, "return_date", start, end, orphan_rate)
            record["reason"] = str(rng.choice(RETURN_REASONS))
        elif kind == ReportKind.BOTTLES:
            record = {
                "id": int(rng.integers(1, 10**6)),
                "date": _random_date(rng, start, end).isoformat(),
                "type": str(rng.choice(BOTTLE_TYPES)),
                "unit": str(rng.choice(BOTTLE_UNITS)),
                "quantity": int(rng.integers(1, 50)),
                "price": round(float(rng.uniform(0.1, 15.0)), 2),
            }
        elif kind == ReportKind.OTHER_INCOME:
            record = {
                "id": int(rng.integers(1, 10**6)),
                "income_date": _random_date(rng, start, end).isoformat(),
                "label": f"{rng.choice(INCOME_LABELS)} - {fake.last_name()}",
                "amount": round(float(rng.uniform(5, 800)), 2),
            }
        else:
            record = {
                "id": int(rng.integers(1, 10**6)),
                "expense_date": _random_date(rng, start, end).isoformat(),
                "label": str(rng.choice(EXPENSE_LABELS)),
                "amount": round(float(rng.uniform(10, 2500)), 2),
            }
        records.append(record)

    records.sort(key=lambda r: str(next(v for k, v in r.items() if k.endswith("date"))))
    return records


def generate_dataset(
    kinds: List[ReportKind],
    start: date,
    end: date,
    seed: int = 42,
    num_rows: int = 25,
    orphan_rate: float = 0.05,
    rng: Optional[np.random.Generator] = None,
) -> Dict[str, List[dict]]:
    """Generate records for several datasets from one shared catalog."""
    rng = rng if rng is not None else np.random.default_rng(seed)
    fake = Faker()
    fake.seed_instance(int(rng.integers(0, 2**31)))

    catalog = generate_catalog(rng, fake)
    return {
        ReportKind(kind).value: generate_records(
            kind, catalog, rng, fake, start, end, num_rows, orphan_rate,
        )
        for kind in kinds
    }
