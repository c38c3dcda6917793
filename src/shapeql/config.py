"""Query compiler configuration."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from rdflib import RDFS, URIRef

from shapeql.schema.common import LDP, to_iri

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilerConfig:
    """Settings for SPARQL query generation.

    ``sampling`` caps the number of resources selected by edges queries
    (0 for no cap); ``container`` links the focus to listed resources;
    ``label`` is the predicate read for facet item labels; ``prefixes`` maps
    prefix names to namespace IRIs used to compact the generated text.
    """
    sampling: int = 0
    container: URIRef = LDP.contains
    label: URIRef = RDFS.label
    prefixes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.sampling, bool) or not isinstance(self.sampling, int):
            raise TypeError("sampling must be an int")
        if self.sampling < 0:
            raise ValueError(f"negative sampling {self.sampling}")
        object.__setattr__(self, "container", to_iri(self.container))
        object.__setattr__(self, "label", to_iri(self.label))
        object.__setattr__(self, "prefixes", dict(self.prefixes))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sampling": self.sampling,
            "container": str(self.container),
            "label": str(self.label),
            "prefixes": dict(self.prefixes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompilerConfig":
        return cls(
            sampling=data.get("sampling", 0),
            container=data.get("container", LDP.contains),
            label=data.get("label", RDFS.label),
            prefixes=data.get("prefixes", {}),
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CompilerConfig":
        """Read ``SHAPEQL_SAMPLING``, ``SHAPEQL_CONTAINER`` and ``SHAPEQL_LABEL``."""
        env = os.environ if environ is None else environ

        sampling = env.get("SHAPEQL_SAMPLING", "0")
        try:
            sampling = int(sampling)
        except ValueError as e:
            raise ValueError(f"invalid SHAPEQL_SAMPLING value {sampling!r}") from e

        config = cls(
            sampling=sampling,
            container=env.get("SHAPEQL_CONTAINER", LDP.contains),
            label=env.get("SHAPEQL_LABEL", RDFS.label),
        )
        logger.debug("compiler configuration from environment: %s", config.to_dict())
        return config
