"""Load RDF descriptions to be validated using rdflib."""
from __future__ import annotations

import logging
import os

from rdflib import Graph

logger = logging.getLogger(__name__)


def parse_data(source: str, format: str = "turtle") -> Graph:
    """Parse RDF data (file path or serialized string) into an rdflib Graph.

    Args:
        source: File path or RDF text.
        format: RDF format (default: turtle).

    Returns:
        Graph holding the parsed statements.
    """
    g = Graph()

    if os.path.isfile(source):
        g.parse(source=source, format=format)
    else:
        g.parse(data=source, format=format)

    logger.debug("parsed %d statements", len(g))

    return g


def parse_data_file(filepath: str, format: str = "turtle") -> Graph:
    """Parse an RDF file from a file path."""
    if not os.path.isfile(filepath):
        raise FileNotFoundError(filepath)
    return parse_data(filepath, format=format)
