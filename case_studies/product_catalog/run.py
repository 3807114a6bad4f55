"""Product Catalog: end-to-end demonstration.

Walks a storefront feed through the engine:

  1. Parse      raw mapping -> validated Product with nested relations
  2. Reject     malformed entries, each error naming the offending attribute
  3. Atomicity  a failing fill leaves an existing entity untouched
  4. Views      json_serialize() (hidden attributes removed) vs to_dict()
  5. SHACL      the Product schema as shapes, the entity as RDF, validated

Run with ``python -m case_studies.product_catalog.run``.
"""

import json
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from schemamodel.errors import ModelError
from schemamodel.shacl_bridge import shacl_validate

from .domain import Category, Product, sample_product


def print_header(title: str) -> None:
    print(f"\n{'=' * 60}")
    print(f"  {title}")
    print(f"{'=' * 60}")


def run_parse_demo() -> Product:
    print_header("1. Parse")
    product = Product.parse(sample_product())
    print(f"  {product!r}")
    for name in ("name", "short_description", "price", "sku", "slug", "available_since"):
        print(f"    {name:<18} = {product.get(name)!r}")
    print(f"    category           = {product.get('category')!r}")
    print(f"    reviews            = {len(product.get('reviews'))} entries")
    return product


def run_rejection_demo() -> None:
    print_header("2. Reject")
    broken = {
        "missing name": {k: v for k, v in sample_product().items() if k != "name"},
        "short name": {**sample_product(), "name": "shrt"},
        "zero price": {**sample_product(), "price": 0},
        "bad sku": {**sample_product(), "sku": "invalid sku with @"},
        "bad date": {**sample_product(), "available_since": "20/10/2025"},
        "reviews as mapping": {**sample_product(), "reviews": {"first": {"rating": 5}}},
    }
    for label, data in broken.items():
        try:
            Product.parse(data)
            print(f"  {label:<20} accepted (unexpected)")
        except ModelError as exc:
            print(f"  {label:<20} {type(exc).__name__}: {exc}")
        assert Product.try_parse(data) is None


def run_atomicity_demo() -> None:
    print_header("3. Atomicity")
    category = Category.parse({"id": 1, "name": "General"})
    print(f"  before: {category.to_dict()}")
    try:
        category.fill({"id": 2})
    except ModelError as exc:
        print(f"  fill failed: {exc}")
    print(f"  after:  {category.to_dict()}")


def run_views_demo(product: Product) -> None:
    print_header("4. Views")
    print("  json_serialize():")
    print(json.dumps(product.json_serialize(), indent=2).replace("\n", "\n    "))
    dump = product.to_dict()
    print(f"  to_dict() keys not in JSON: "
          f"{sorted(set(dump) - set(product.json_serialize()))}")


def run_shacl_demo(product: Product) -> None:
    print_header("5. SHACL")
    result = shacl_validate(product)
    print("  " + result.summary().replace("\n", "\n  "))


def main():
    print("=" * 60)
    print("  schemamodel: Case Study")
    print("  Product Catalog")
    print("=" * 60)

    product = run_parse_demo()
    run_rejection_demo()
    run_atomicity_demo()
    run_views_demo(product)
    run_shacl_demo(product)


if __name__ == "__main__":
    main()
