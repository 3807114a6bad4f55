"""End-to-end tests for the Product Catalog case study."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime

import pytest
from schemamodel.errors import MutatorError, ParseError

from case_studies.product_catalog.domain import Category, Product, Review, sample_product
from case_studies.product_catalog.run import main


@pytest.fixture
def product():
    return Product.parse(sample_product())


def _with(**changes) -> dict:
    return {**sample_product(), **changes}


def _without(name: str) -> dict:
    return {k: v for k, v in sample_product().items() if k != name}


class TestParsing:
    def test_scalars(self, product):
        assert product.get("id") == 101
        assert product.get("name") == "Awesome Wireless Keyboard"
        assert product.get("price") == pytest.approx(129.99)
        assert product.get("is_active") is True
        assert product.get("available_since") == datetime(2025, 10, 20)
        assert product.get("condition") == "new"

    def test_truncation(self, product):
        assert product.get("short_description") == "This descr"

    def test_mutators(self, product):
        assert product.attributes()["sku"] == "AWK-101-BLUE"
        assert product.get("sku") == "SKU-AWK-101-BLUE"
        assert product.get("slug") == "awesome-wireless-keyboard"

    def test_defaults(self, product):
        assert product.get("is_shippable") is True
        assert product.get("reviews")[0].get("author") == "Anonymous"
        assert product.get("reviews")[1].get("author") == "keyboard-fan"

    def test_relations(self, product):
        category = product.get("category")
        assert isinstance(category, Category)
        assert category.get("name") == "Peripherals"
        reviews = product.get("reviews")
        assert [r.get("rating") for r in reviews] == [5, 4, 1]
        assert all(isinstance(r, Review) for r in reviews)

    def test_arrays(self, product):
        assert product.get("tags") == ["wireless", "mechanical", "rgb"]
        assert product.get("alternate_ids") == [202, 303]

    def test_nested_arrays(self):
        product = Product.parse(_with(matrix=[["a", "b"], ["c", "e"]]))
        assert product.get("matrix")[1][1] == "e"

    def test_empty_reviews_stay_a_list(self):
        product = Product.parse(_with(reviews=[]))
        assert product.get("reviews") == []
        assert product.json_serialize()["reviews"] == []

    def test_shippable_matchers(self):
        assert Product.parse(_with(is_shippable="Y")).get("is_shippable") is True
        assert Product.parse(_with(is_shippable="no")).get("is_shippable") is False
        assert Product.parse(_with(is_shippable=0)).get("is_shippable") is False

    def test_numeric_string_price(self):
        assert Product.parse(_with(price="19.5")).get("price") == 19.5


class TestRejection:
    def test_missing_name(self):
        with pytest.raises(ParseError, match="'Product.name' Missing required attribute"):
            Product.parse(_without("name"))

    def test_missing_category(self):
        with pytest.raises(ParseError, match="'Product.category' Missing required attribute"):
            Product.parse(_without("category"))

    def test_short_name(self):
        with pytest.raises(
            ParseError, match="'shrt' is shorter than the minimum of 5 characters"
        ):
            Product.parse(_with(name="shrt"))

    def test_price_below_minimum(self):
        with pytest.raises(ParseError, match="is less than the minimum value of 0.01"):
            Product.parse(_with(price=0))

    def test_invalid_sku(self):
        with pytest.raises(MutatorError, match="'Product.sku' Invalid SKU format."):
            Product.parse(_with(sku="invalid sku with @"))

    def test_limit_without_truncation(self):
        with pytest.raises(ParseError, match="exceeding the limit of 5 character\\(s\\)"):
            Product.parse(_with(non_truncated_limit="too long"))

    def test_bad_date(self):
        with pytest.raises(ParseError, match="'Product.available_since' Provided value is not a valid date"):
            Product.parse(_with(available_since="20/10/2025"))

    def test_reviews_must_be_a_list(self):
        with pytest.raises(ParseError, match="Provided value is not a list."):
            Product.parse(_with(reviews={"first": {"rating": 5}}))

    def test_unknown_condition(self):
        with pytest.raises(ParseError, match="is not one of new, used, refurbished"):
            Product.parse(_with(condition="broken"))

    def test_nested_error_names_nested_type(self):
        with pytest.raises(ParseError, match="'Review.rating' Missing required attribute"):
            Product.parse(_with(reviews=[{"comment": "no rating"}]))

    def test_try_parse_returns_none(self):
        assert Product.try_parse(_with(price=-1)) is None
        assert Product.try_parse(_with(sku="bad sku!")) is None
        assert Product.try_parse(sample_product()) is not None


class TestViews:
    def test_hidden_attribute_only_in_dump(self, product):
        assert "internal_code" not in product.json_serialize()
        assert product.to_dict()["internal_code"] == "XYZ-INTERNAL-SECRET"

    def test_promo_code_hidden_above_threshold(self, product):
        assert "promo_code" not in product.json_serialize()
        cheap = Product.parse(_with(price=50))
        assert cheap.json_serialize()["promo_code"] == "SAVE10"

    def test_review_comment_hidden_when_null(self, product):
        reviews = product.json_serialize()["reviews"]
        assert "comment" not in reviews[1]
        assert reviews[0]["comment"] == "Best keyboard ever!"

    def test_serialized_values(self, product):
        serialized = product.json_serialize()
        assert serialized["available_since"] == "2025-10-20"
        assert serialized["sku"] == "SKU-AWK-101-BLUE"
        assert serialized["category"] == {"id": 15, "name": "Peripherals"}

    def test_dump_is_plain(self, product):
        dump = product.to_dict()
        assert dump["category"] == {"id": 15, "name": "Peripherals"}
        assert dump["reviews"][1] == {"rating": 4, "author": "keyboard-fan"}

    def test_dump_round_trip(self, product):
        assert Product.parse(product.to_dict()) == product


class TestAtomicity:
    def test_failed_fill_keeps_category(self):
        category = Category.parse({"id": 1, "name": "General"})
        with pytest.raises(ParseError):
            category.fill({"id": 2})
        assert category.to_dict() == {"id": 1, "name": "General"}


class TestDemo:
    def test_main_runs(self, capsys):
        main()
        out = capsys.readouterr().out
        assert "Product Catalog" in out
        assert "CONFORMS" in out
