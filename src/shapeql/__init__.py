"""shapeql: a linked-data shape algebra compiled to SPARQL queries.

Shapes describe and constrain RDF resources; they are redacted for a
role/task/view/mode context, simplified, compiled into SPARQL text for
resource listings, value statistics and facet items, or used to validate
RDF descriptions into structured traces.
"""
__version__ = "0.1.0"

from shapeql.schema.common import Step, parse_path, format_path
from shapeql.schema.shape import (
    Shape, And, Or, When, Field, Meta, Guard, Datatype, Clazz,
    MinExclusive, MaxExclusive, MinInclusive, MaxInclusive,
    MinLength, MaxLength, Pattern, Like, MinCount, MaxCount, In, All, Any,
    PASS, FAIL, is_pass, is_fail,
)
from shapeql.schema.query import (
    Order, Edges, Stats, Items, increasing, decreasing, parse_order, format_order,
)
from shapeql.schema.trace import Trace

from shapeql.probe.traverser import Probe, Traverser, Transformer
from shapeql.probe.redactor import redact
from shapeql.probe.optimizer import optimize
from shapeql.probe.pruner import prune
from shapeql.probe.outliner import outline

from shapeql.compiler.pattern import compile_pattern
from shapeql.compiler.sparql import SPARQLCompiler, compile_query
from shapeql.validator.validator import validate

from shapeql.parser.json_parser import parse_shape, parse_shape_file
from shapeql.parser.rdf_parser import parse_data, parse_data_file
from shapeql.serializer.json_serializer import serialize_json, serialize_trace

from shapeql.config import CompilerConfig
from shapeql.errors import UnredactedGuardError

__all__ = [
    # Schema
    "Step", "parse_path", "format_path",
    "Shape", "And", "Or", "When", "Field", "Meta", "Guard", "Datatype", "Clazz",
    "MinExclusive", "MaxExclusive", "MinInclusive", "MaxInclusive",
    "MinLength", "MaxLength", "Pattern", "Like", "MinCount", "MaxCount",
    "In", "All", "Any", "PASS", "FAIL", "is_pass", "is_fail",
    "Order", "Edges", "Stats", "Items", "increasing", "decreasing",
    "parse_order", "format_order", "Trace",
    # Probes
    "Probe", "Traverser", "Transformer",
    "redact", "optimize", "prune", "outline",
    # Compiler and validator
    "compile_pattern", "SPARQLCompiler", "compile_query", "validate",
    # Parsers and serializers
    "parse_shape", "parse_shape_file", "parse_data", "parse_data_file",
    "serialize_json", "serialize_trace",
    # Configuration and errors
    "CompilerConfig", "UnredactedGuardError",
]
