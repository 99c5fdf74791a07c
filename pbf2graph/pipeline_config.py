"""
Pipeline configuration for pbf2graph.

This module defines the default settings used when turning an OSM extract
into a road graph:
1. Selection of road ways from the extract
2. Tabular (and optional GeoPackage) export of the graph
3. Shortest-path queries over the assembled graph
"""

# Selection of ways from the extract
ROAD_FILTER_CONFIG = {
    'tag_key': 'highway',
    # Mirror edges of ways that are not tagged as one-way
    'bidirectional': False,
    'oneway_values': ['yes', 'true', '1'],
    'reverse_oneway_values': ['-1'],
}

# Export of the coordinate store and the edge list
EXPORT_CONFIG = {
    'output_directory': 'output',
    'nodes_file': 'nodes.csv',
    'edges_file': 'edges.csv',
    'float_format': None,  # e.g. '%.7f'
}

# Shortest-path queries
ROUTING_CONFIG = {
    'start': None,
    'end': None,
    'deadline': None,  # seconds, no limit when None
}

# Full pipeline
PIPELINE_CONFIG = {
    'pbf_file': None,
    'steps': [
        {'name': 'load_graph', 'enabled': True, 'params': ROAD_FILTER_CONFIG},
        {'name': 'export_csv', 'enabled': True, 'params': EXPORT_CONFIG},
        {'name': 'export_geopackage', 'enabled': False, 'params': {'path': None}},
        {'name': 'shortest_path', 'enabled': True, 'params': ROUTING_CONFIG},
    ],
    'logger': {
        'level': 'INFO',
        'console': True,
    },
}


# Error classes
class Pbf2GraphError(Exception):
    """Base class for every failure raised by pbf2graph."""
    pass

class PipelineConfigError(Pbf2GraphError):
    """Invalid pipeline configuration."""
    pass

class IngestionError(Pbf2GraphError):
    """The input extract could not be read."""
    pass

class ExportError(Pbf2GraphError):
    """The graph could not be written to disk."""
    pass

class QueryError(Pbf2GraphError):
    """A shortest-path query was aborted."""
    pass

class DanglingEdgeReference(QueryError):
    """An edge endpoint has no entry in the coordinate store."""

    def __init__(self, node_id):
        self.node_id = node_id
        super().__init__(f"Node {node_id} is referenced by an edge but has no coordinates")

class InvalidCoordinate(QueryError):
    """An edge weight could not be ordered (NaN coordinates)."""

    def __init__(self, u, v):
        self.edge = (u, v)
        super().__init__(f"Edge ({u}, {v}) has a NaN weight; NaN coordinates are not supported")

class QueryTimeout(QueryError):
    """The query ran past its deadline."""
    pass
