"""SHACL Bridge: exports model schemas as SHACL shapes and entities as RDF.

The engine validates values while they are parsed; SHACL validates a graph
after the fact. This bridge lets the two meet:

  1. schema_to_shacl(): each model type -> sh:NodeShape
       Int/Float/String/Bool/Date  -> sh:datatype (xsd:integer, double, ...)
       required                    -> sh:minCount 1
       scalar / one-relation       -> sh:maxCount 1
       Enum                        -> sh:in (...)
       String between/limit        -> sh:minLength / sh:maxLength
       Float min                   -> sh:minInclusive
       Relation                    -> sh:class of the target type
  2. entity_to_rdf(): an entity and its relations -> RDF data graph
  3. shacl_validate(): both graphs through pySHACL

Rules without a SHACL equivalent (conditional requirements, hidden and
hidden_if, truncation, mutators) are recorded as rdfs:comment annotations.
Requires optional dependencies: rdflib, pyshacl.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from rdflib import BNode, Graph, Literal, Namespace, RDF, RDFS, XSD
from rdflib.collection import Collection
from rdflib.namespace import SH

from .attributes import ArrayAttribute, RelationAttribute, SchemaAttribute, StringAttribute
from .model import Model
from .types import AttributeKind, RequirementKind


SM = Namespace("http://schemamodel.example.org/")


_DATATYPES = {
    AttributeKind.INT: XSD.integer,
    AttributeKind.FLOAT: XSD.double,
    AttributeKind.STRING: XSD.string,
    AttributeKind.BOOL: XSD.boolean,
    AttributeKind.DATE: XSD.dateTime,
}


# ---------------------------------------------------------------------------
# Schema -> SHACL Shapes
# ---------------------------------------------------------------------------

def schema_to_shacl(*model_classes: type[Model]) -> Graph:
    """Translate model types into a SHACL shapes graph.

    Relation targets are followed, so passing the root type of a model tree
    is enough to get a shape for every nested type.
    """
    sg = Graph()
    sg.bind("sh", SH)
    sg.bind("sm", SM)
    sg.bind("xsd", XSD)

    pending = list(model_classes)
    seen: set[type] = set()
    while pending:
        model_cls = pending.pop(0)
        if model_cls in seen:
            continue
        seen.add(model_cls)
        schema = model_cls.registry.resolve(model_cls)
        type_name = model_cls.__name__
        shape_uri = SM[f"{type_name}Shape"]

        sg.add((shape_uri, RDF.type, SH.NodeShape))
        sg.add((shape_uri, SH.targetClass, SM[type_name]))
        sg.add((shape_uri, RDFS.label, Literal(f"Shape for {type_name}")))

        for attribute in schema.attributes():
            prop_shape = BNode()
            sg.add((shape_uri, SH.property, prop_shape))
            sg.add((prop_shape, SH.path, SM[attribute.name]))
            sg.add((prop_shape, SH.name, Literal(attribute.visible_name)))

            if attribute.is_required():
                sg.add((prop_shape, SH.minCount, Literal(1)))

            multi = isinstance(attribute, ArrayAttribute) or (
                isinstance(attribute, RelationAttribute) and attribute.is_many
            )
            if not multi:
                sg.add((prop_shape, SH.maxCount, Literal(1)))

            value_attribute = attribute.innermost if isinstance(attribute, ArrayAttribute) else attribute
            if value_attribute is not None:
                _add_value_constraints(sg, prop_shape, value_attribute, pending)

            for comment in _annotations(attribute):
                sg.add((shape_uri, RDFS.comment, Literal(comment)))

    return sg


def _add_value_constraints(sg: Graph, prop_shape, attribute: SchemaAttribute, pending: list) -> None:
    if isinstance(attribute, RelationAttribute):
        sg.add((prop_shape, SH["class"], SM[attribute.type_name]))
        if isinstance(attribute.target, type) and issubclass(attribute.target, Model):
            pending.append(attribute.target)
        return

    if attribute.kind in _DATATYPES:
        sg.add((prop_shape, SH.datatype, _DATATYPES[attribute.kind]))

    if attribute.kind == AttributeKind.ENUM:
        members = BNode()
        Collection(sg, members, [_to_literal(v) for v in attribute.allowed])
        sg.add((prop_shape, SH["in"], members))

    elif isinstance(attribute, StringAttribute):
        if attribute.min_length is not None:
            sg.add((prop_shape, SH.minLength, Literal(attribute.min_length)))
        maximum = attribute.effective_max_length
        if maximum is not None and attribute.truncate_at is None:
            sg.add((prop_shape, SH.maxLength, Literal(maximum)))

    elif attribute.kind == AttributeKind.FLOAT and attribute.minimum is not None:
        sg.add((prop_shape, SH.minInclusive, Literal(float(attribute.minimum), datatype=XSD.double)))


def _annotations(attribute: SchemaAttribute) -> list[str]:
    notes = []
    for rule in attribute.requirements:
        if rule.kind != RequirementKind.ALWAYS:
            notes.append(f"[schemamodel required] {attribute.name}: {rule.describe()}")
    if attribute.is_hidden():
        notes.append(f"[schemamodel hidden] {attribute.name}")
    elif attribute.has_hidden_check():
        notes.append(f"[schemamodel hidden_if] {attribute.name}")
    if isinstance(attribute, StringAttribute) and attribute.truncate_at is not None:
        notes.append(f"[schemamodel truncate] {attribute.name}: {attribute.truncate_at}")
    return notes


# ---------------------------------------------------------------------------
# Entity -> RDF Data Graph
# ---------------------------------------------------------------------------

def entity_to_rdf(entity: Model, graph: Graph | None = None) -> Graph:
    """Translate an entity, and every entity it relates to, into RDF.

    Each entity becomes a blank node typed by its class. Stored values
    become literals (None omitted, arrays flattened to repeated triples);
    relations become object triples to the related entities' nodes.
    """
    dg = graph if graph is not None else Graph()
    dg.bind("sm", SM)
    _add_entity(dg, entity)
    return dg


def _add_entity(dg: Graph, entity: Model) -> BNode:
    node = BNode()
    dg.add((node, RDF.type, SM[type(entity).__name__]))

    for name, value in entity.attributes().items():
        for item in _flatten(value):
            if item is None:
                continue
            dg.add((node, SM[name], _to_literal(item)))

    for name, value in entity.relations().items():
        for related in _flatten(value):
            if isinstance(related, Model):
                dg.add((node, SM[name], _add_entity(dg, related)))

    return node


def _flatten(value) -> list:
    if isinstance(value, (list, tuple)):
        flat = []
        for item in value:
            flat.extend(_flatten(item))
        return flat
    return [value]


def _to_literal(value) -> Literal:
    """Convert a Python value to an RDF Literal with appropriate datatype."""
    if isinstance(value, bool):
        return Literal(value, datatype=XSD.boolean)
    if isinstance(value, int):
        return Literal(value, datatype=XSD.integer)
    if isinstance(value, float):
        return Literal(value, datatype=XSD.double)
    if isinstance(value, datetime):
        return Literal(value, datatype=XSD.dateTime)
    if isinstance(value, date):
        return Literal(value, datatype=XSD.date)
    return Literal(str(value), datatype=XSD.string)


# ---------------------------------------------------------------------------
# SHACL Validation
# ---------------------------------------------------------------------------

def shacl_validate(entity: Model) -> SHACLValidationResult:
    """Run SHACL validation: entity type -> shapes, entity -> data, then validate."""
    from pyshacl import validate as pyshacl_validate

    shapes_graph = schema_to_shacl(type(entity))
    data_graph = entity_to_rdf(entity)

    conforms, results_graph, results_text = pyshacl_validate(
        data_graph,
        shacl_graph=shapes_graph,
        inference="none",
        abort_on_first=False,
    )

    violations = []
    for result in results_graph.subjects(RDF.type, SH.ValidationResult):
        path = results_graph.value(result, SH.resultPath)
        message = results_graph.value(result, SH.resultMessage)
        severity = results_graph.value(result, SH.resultSeverity)
        focus = results_graph.value(result, SH.focusNode)
        focus_type = data_graph.value(focus, RDF.type) if focus is not None else None

        violations.append(SHACLViolation(
            focus_type=str(focus_type) if focus_type else "",
            path=str(path) if path else "",
            message=str(message) if message else "",
            severity=str(severity) if severity else "",
        ))

    return SHACLValidationResult(
        conforms=conforms,
        violations=violations,
        results_text=results_text,
        shapes_graph=shapes_graph,
        data_graph=data_graph,
    )


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

def _local(uri: str) -> str:
    return uri.split("/")[-1] if "/" in uri else uri


@dataclass
class SHACLViolation:
    """A single SHACL validation violation."""
    focus_type: str
    path: str
    message: str
    severity: str

    def __repr__(self) -> str:
        return f"SHACLViolation({_local(self.focus_type)}.{_local(self.path)}: {self.message})"


@dataclass
class SHACLValidationResult:
    """Result of SHACL validation of one entity tree."""
    conforms: bool
    violations: list[SHACLViolation] = field(default_factory=list)
    results_text: str = ""
    shapes_graph: Graph | None = None
    data_graph: Graph | None = None

    def summary(self) -> str:
        lines = []
        status = "CONFORMS" if self.conforms else "DOES NOT CONFORM"
        lines.append(f"SHACL Validation: {status}")
        lines.append("-" * 50)
        if self.violations:
            lines.append(f"  Violations ({len(self.violations)}):")
            for v in self.violations:
                lines.append(f"    - {_local(v.focus_type)}.{_local(v.path)}: {v.message}")
        else:
            lines.append("  No violations found.")
        return "\n".join(lines)

    def shapes_as_turtle(self) -> str:
        if self.shapes_graph is None:
            return ""
        return self.shapes_graph.serialize(format="turtle")

    def data_as_turtle(self) -> str:
        if self.data_graph is None:
            return ""
        return self.data_graph.serialize(format="turtle")
