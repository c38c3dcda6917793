"""Parsers for JSON shape definitions and RDF data."""
from shapeql.parser.json_parser import ShapeParseError, parse_shape, parse_shape_dict, parse_shape_file
from shapeql.parser.rdf_parser import parse_data, parse_data_file
