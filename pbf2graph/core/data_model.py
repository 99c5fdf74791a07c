"""
Entity types delivered by an OSM reader.

Readers turn an extract into a stream of these objects; the graph builder
consumes the stream without knowing which library produced it.
"""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class OsmNode:
    """
    A plain OSM node.

    Parameters
    ----------
    id : int
        OSM node identifier
    lat : float
        Latitude in degrees
    lon : float
        Longitude in degrees
    """
    id: int
    lat: float
    lon: float


@dataclass(frozen=True)
class OsmDenseNode(OsmNode):
    """A node decoded from a dense-node block."""


@dataclass(frozen=True)
class OsmWay:
    """
    An OSM way.

    Parameters
    ----------
    id : int
        OSM way identifier
    tags : dict
        Tag keys mapped to tag values
    refs : list of int
        Identifiers of the referenced nodes, in way order
    """
    id: int
    tags: Dict[str, str] = field(default_factory=dict)
    refs: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class OsmRelation:
    id: int
    tags: Dict[str, str] = field(default_factory=dict)
