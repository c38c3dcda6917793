"""Tests for compiler configuration."""
import pytest
from rdflib import RDFS, URIRef

from shapeql.config import CompilerConfig
from shapeql.schema.common import LDP


def test_defaults():
    config = CompilerConfig()

    assert config.sampling == 0
    assert config.container == LDP.contains
    assert config.label == RDFS.label
    assert config.prefixes == {}


def test_iris_are_coerced():
    config = CompilerConfig(container="http://example.org/item")
    assert config.container == URIRef("http://example.org/item")


@pytest.mark.parametrize("sampling, error", [
    (-1, ValueError),
    ("10", TypeError),
    (True, TypeError),
])
def test_invalid_sampling(sampling, error):
    with pytest.raises(error):
        CompilerConfig(sampling=sampling)


def test_invalid_container():
    with pytest.raises(ValueError):
        CompilerConfig(container="not an iri")


def test_dict_round_trip():
    config = CompilerConfig(sampling=10, prefixes={"ex": "http://example.org/"})

    assert config.to_dict() == {
        "sampling": 10,
        "container": "http://www.w3.org/ns/ldp#contains",
        "label": "http://www.w3.org/2000/01/rdf-schema#label",
        "prefixes": {"ex": "http://example.org/"},
    }
    assert CompilerConfig.from_dict(config.to_dict()) == config


def test_from_dict_defaults():
    assert CompilerConfig.from_dict({}) == CompilerConfig()


def test_from_env():
    config = CompilerConfig.from_env({
        "SHAPEQL_SAMPLING": "100",
        "SHAPEQL_LABEL": "http://example.org/title",
    })

    assert config.sampling == 100
    assert config.label == URIRef("http://example.org/title")
    assert config.container == LDP.contains


def test_from_empty_env():
    assert CompilerConfig.from_env({}) == CompilerConfig()


def test_from_env_rejects_malformed_sampling():
    with pytest.raises(ValueError, match="SHAPEQL_SAMPLING"):
        CompilerConfig.from_env({"SHAPEQL_SAMPLING": "many"})


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("SHAPEQL_SAMPLING", "7")
    assert CompilerConfig.from_env().sampling == 7
