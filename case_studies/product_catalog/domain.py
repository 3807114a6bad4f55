"""Product Catalog: model definitions.

A storefront feed delivers products as JSON. Three model types cover it:
- Category: where a product is listed (required relation)
- Review: customer reviews (optional list relation)
- Product: the catalog entry, with length rules, a price floor, flags
  accepting "Y"/"no" style values, a derived slug and a normalized SKU
"""

import re
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../.."))

from schemamodel.model import Model
from schemamodel.mutators import Mutator
from schemamodel.schema import Schema
from schemamodel.types import ISO_DATE


_SKU_PATTERN = re.compile(r"^[A-Z0-9\-]+$")


class Category(Model):
    @classmethod
    def define_schema(cls, schema: Schema) -> None:
        schema.int("id").required()
        schema.string("name").required()


class Review(Model):
    @classmethod
    def define_schema(cls, schema: Schema) -> None:
        schema.int("rating").required()
        schema.string("comment").nullable().hidden_if_null()
        schema.string("author").default("Anonymous")


def _normalize_sku(value, context):
    value = str(value).replace(" ", "-").upper()
    context.ensure(_SKU_PATTERN.match(value), "Invalid SKU format.")
    return value


def _derive_slug(value, context):
    name = context.target.get("name") or ""
    return name.replace(" ", "-").lower()


class Product(Model):
    @classmethod
    def define_schema(cls, schema: Schema) -> None:
        schema.int("id").required()
        schema.string("name").between(5, 50).required()
        schema.string("description").limit(200).nullable()
        schema.float("price").min(0.01).required()
        schema.bool("is_active").default(True)
        schema.date("available_since", ISO_DATE).required()
        schema.enum("condition", ["new", "used", "refurbished"])
        schema.string("internal_code").hidden()
        schema.string("short_description").truncate(10)
        schema.string("sku")
        schema.string("slug")
        schema.string("tags").list().nullable()
        schema.int("alternate_ids").list().nullable()
        schema.has("category", Category).required()
        schema.has_many("reviews", Review).nullable()
        schema.bool("is_shippable").positives(["Y", "yes"]).negatives(["N", "no"]).default(True)
        schema.string("non_truncated_limit").limit(5)
        schema.string("matrix").list().list().nullable()
        schema.string("promo_code").nullable().hidden_if(
            lambda value, product: product.get("price") > 100.0
        )

        schema.mutator("sku", getter=lambda value, context: f"SKU-{value}", setter=_normalize_sku)
        schema.mutator("slug", setter=_derive_slug)


def sample_product() -> dict:
    """A complete, valid feed entry."""
    return {
        "id": 101,
        "name": "Awesome Wireless Keyboard",
        "description": "A very long description that is well within the 200 character limit.",
        "short_description": "This description is definitely going to be truncated.",
        "price": 129.99,
        "is_active": True,
        "available_since": "2025-10-20",
        "condition": "new",
        "internal_code": "XYZ-INTERNAL-SECRET",
        "sku": "awk-101-blue",
        "slug": "will-be-overwritten",
        "tags": ["wireless", "mechanical", "rgb"],
        "alternate_ids": [202, 303],
        "category": {"id": 15, "name": "Peripherals"},
        "reviews": [
            {"rating": 5, "comment": "Best keyboard ever!"},
            {"rating": 4, "author": "keyboard-fan"},
            {"rating": 1, "comment": "Broke after one day.", "author": "UnhappyCustomer"},
        ],
        "promo_code": "SAVE10",
    }
