"""Tests for the schema->SHACL bridge.

Checks that model schemas translate to the expected SHACL constraints and
that pySHACL agrees with the engine on entities it accepted or built by hand.
"""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from rdflib import Literal, RDF, RDFS
from rdflib.collection import Collection
from rdflib.namespace import SH, XSD

from schemamodel.model import Model
from schemamodel.schema import Schema
from schemamodel.shacl_bridge import SM, entity_to_rdf, schema_to_shacl, shacl_validate

from case_studies.product_catalog.domain import Category, Product, Review, sample_product


class Account(Model):
    @classmethod
    def define_schema(cls, schema: Schema) -> None:
        schema.enum("user_type", ["personal", "business"]).required()
        schema.string("company_name").nullable().required_if("user_type", "business")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _property_shape(shapes, type_name: str, attribute: str):
    shape = SM[f"{type_name}Shape"]
    for prop_shape in shapes.objects(shape, SH.property):
        if shapes.value(prop_shape, SH.path) == SM[attribute]:
            return prop_shape
    raise AssertionError(f"no property shape for {type_name}.{attribute}")


@pytest.fixture(scope="module")
def shapes():
    return schema_to_shacl(Product)


# ---------------------------------------------------------------------------
# Shape generation
# ---------------------------------------------------------------------------

class TestSchemaToShacl:
    def test_generates_node_shapes_for_related_types(self, shapes):
        node_shapes = set(shapes.subjects(RDF.type, SH.NodeShape))
        assert node_shapes == {SM.ProductShape, SM.CategoryShape, SM.ReviewShape}
        assert shapes.value(SM.ProductShape, SH.targetClass) == SM.Product

    def test_required_scalar(self, shapes):
        prop = _property_shape(shapes, "Product", "id")
        assert shapes.value(prop, SH.minCount) == Literal(1)
        assert shapes.value(prop, SH.maxCount) == Literal(1)
        assert shapes.value(prop, SH.datatype) == XSD.integer

    def test_optional_scalar_has_no_min_count(self, shapes):
        prop = _property_shape(shapes, "Product", "description")
        assert shapes.value(prop, SH.minCount) is None
        assert shapes.value(prop, SH.maxLength) == Literal(200)

    def test_string_bounds(self, shapes):
        prop = _property_shape(shapes, "Product", "name")
        assert shapes.value(prop, SH.minLength) == Literal(5)
        assert shapes.value(prop, SH.maxLength) == Literal(50)

    def test_truncated_string_has_no_max_length(self, shapes):
        prop = _property_shape(shapes, "Product", "short_description")
        assert shapes.value(prop, SH.maxLength) is None
        comments = [str(c) for c in shapes.objects(SM.ProductShape, RDFS.comment)]
        assert "[schemamodel truncate] short_description: 10" in comments

    def test_float_minimum(self, shapes):
        prop = _property_shape(shapes, "Product", "price")
        assert shapes.value(prop, SH.datatype) == XSD.double
        assert shapes.value(prop, SH.minInclusive).toPython() == pytest.approx(0.01)

    def test_date_datatype(self, shapes):
        prop = _property_shape(shapes, "Product", "available_since")
        assert shapes.value(prop, SH.datatype) == XSD.dateTime

    def test_enum_members(self, shapes):
        prop = _property_shape(shapes, "Product", "condition")
        members = Collection(shapes, shapes.value(prop, SH["in"]))
        assert [str(m) for m in members] == ["new", "used", "refurbished"]

    def test_arrays_are_multi_valued(self, shapes):
        for name in ("tags", "matrix"):
            prop = _property_shape(shapes, "Product", name)
            assert shapes.value(prop, SH.maxCount) is None
            assert shapes.value(prop, SH.datatype) == XSD.string
        prop = _property_shape(shapes, "Product", "alternate_ids")
        assert shapes.value(prop, SH.datatype) == XSD.integer

    def test_relations(self, shapes):
        category = _property_shape(shapes, "Product", "category")
        assert shapes.value(category, SH["class"]) == SM.Category
        assert shapes.value(category, SH.minCount) == Literal(1)
        assert shapes.value(category, SH.maxCount) == Literal(1)

        reviews = _property_shape(shapes, "Product", "reviews")
        assert shapes.value(reviews, SH["class"]) == SM.Review
        assert shapes.value(reviews, SH.maxCount) is None

    def test_hidden_rules_annotated(self, shapes):
        comments = [str(c) for c in shapes.objects(SM.ProductShape, RDFS.comment)]
        assert "[schemamodel hidden] internal_code" in comments
        assert "[schemamodel hidden_if] promo_code" in comments
        review_comments = [str(c) for c in shapes.objects(SM.ReviewShape, RDFS.comment)]
        assert "[schemamodel hidden_if] comment" in review_comments

    def test_conditional_requirement_annotated_not_enforced(self):
        shapes = schema_to_shacl(Account)
        prop = _property_shape(shapes, "Account", "company_name")
        assert shapes.value(prop, SH.minCount) is None
        comments = [str(c) for c in shapes.objects(SM.AccountShape, RDFS.comment)]
        assert "[schemamodel required] company_name: required when user_type == 'business'" in comments


# ---------------------------------------------------------------------------
# Entity -> RDF
# ---------------------------------------------------------------------------

class TestEntityToRdf:
    def test_entity_tree_as_triples(self):
        data = entity_to_rdf(Product.parse(sample_product()))
        products = list(data.subjects(RDF.type, SM.Product))
        assert len(products) == 1
        product = products[0]

        assert len(list(data.objects(product, SM.tags))) == 3
        assert len(list(data.objects(product, SM.reviews))) == 3
        category = data.value(product, SM.category)
        assert data.value(category, RDF.type) == SM.Category
        assert data.value(category, SM.name) == Literal("Peripherals", datatype=XSD.string)

    def test_none_values_omitted(self):
        data = entity_to_rdf(Review.parse({"rating": 3, "comment": None}))
        review = next(iter(data.subjects(RDF.type, SM.Review)))
        assert data.value(review, SM.comment) is None
        assert data.value(review, SM.rating) == Literal(3, datatype=XSD.integer)

    def test_nested_lists_flattened(self):
        product = Product.parse({**sample_product(), "matrix": [["a", "b"], ["c"]]})
        data = entity_to_rdf(product)
        node = next(iter(data.subjects(RDF.type, SM.Product)))
        assert sorted(str(v) for v in data.objects(node, SM.matrix)) == ["a", "b", "c"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class TestShaclValidate:
    def test_parsed_entity_conforms(self):
        result = shacl_validate(Product.parse(sample_product()))
        assert result.conforms, result.results_text
        assert result.violations == []
        assert "CONFORMS" in result.summary()

    def test_hand_built_entity_violates(self):
        category = Category.make().set("id", 1)
        result = shacl_validate(category)
        assert not result.conforms
        paths = {v.path for v in result.violations}
        assert str(SM.name) in paths
        assert "DOES NOT CONFORM" in result.summary()

    def test_turtle_output(self):
        result = shacl_validate(Category.parse({"id": 1, "name": "Tools"}))
        assert "CategoryShape" in result.shapes_as_turtle()
        assert "Tools" in result.data_as_turtle()
