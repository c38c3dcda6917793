"""Compilation of shapes and queries into SPARQL text."""
from shapeql.compiler.pattern import compile_pattern
from shapeql.compiler.sparql import SPARQLCompiler, QueryProbe, compile_query
