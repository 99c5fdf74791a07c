"""
Core functionality for pbf2graph.

This module contains the road graph, the entity types read from OSM
extracts and the shortest-path search.
"""

from .data_model import OsmNode, OsmDenseNode, OsmWay, OsmRelation
from .graph import RoadGraph
from .routing import shortest_path, path_length

__all__ = [
    'OsmNode', 'OsmDenseNode', 'OsmWay', 'OsmRelation',
    'RoadGraph', 'shortest_path', 'path_length',
]
