"""Validation of RDF descriptions against shapes."""
from shapeql.validator.validator import Validator, validate
