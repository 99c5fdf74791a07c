"""
Functions for loading road graphs from OSM extracts and CSV tables.
"""

import os
import logging

import osmium
import pandas as pd

from ..core.data_model import OsmNode, OsmWay
from ..core.graph import RoadGraph, NODE_COLUMNS, EDGE_COLUMNS
from ..pipeline_config import EXPORT_CONFIG, IngestionError

logger = logging.getLogger(__name__)


class _WayCollector(osmium.SimpleHandler):
    """Collects the ways accepted by a filter and the nodes they reference."""

    def __init__(self, way_filter):
        osmium.SimpleHandler.__init__(self)
        self.way_filter = way_filter
        self.ways = []
        self.required_nodes = set()

    def way(self, w):
        tags = {tag.k: tag.v for tag in w.tags}
        if not self.way_filter(tags):
            return
        refs = [node.ref for node in w.nodes]
        self.ways.append(OsmWay(w.id, tags, refs))
        self.required_nodes.update(refs)


class _NodeCollector(osmium.SimpleHandler):
    """Collects the coordinates of a fixed set of nodes."""

    def __init__(self, node_ids):
        osmium.SimpleHandler.__init__(self)
        self.node_ids = node_ids
        self.nodes = []

    def node(self, n):
        if n.id in self.node_ids and n.location.valid():
            self.nodes.append(OsmNode(n.id, n.location.lat, n.location.lon))


def read_pbf_entities(filepath, way_filter):
    """
    Read the ways accepted by a filter, together with the nodes they use.

    The file is read twice: first for the ways, then for the referenced
    nodes. All nodes are yielded before the first way.

    Parameters
    ----------
    filepath : str
        Path to an OSM file (``.osm.pbf`` or any format libosmium reads)
    way_filter : callable
        Predicate over a way's tag dictionary

    Returns
    -------
    iterator
        OsmNode entities followed by OsmWay entities

    Raises
    ------
    IngestionError
        If the file is missing or cannot be parsed
    """
    filepath = str(filepath)
    if not os.path.isfile(filepath):
        raise IngestionError(f"Input file not found: {filepath}")

    ways = _WayCollector(way_filter)
    try:
        ways.apply_file(filepath)
    except (RuntimeError, OSError) as e:
        raise IngestionError(f"Could not read ways from {filepath}: {e}") from e
    logger.info(f"Read {len(ways.ways)} ways referencing {len(ways.required_nodes)} nodes")

    nodes = _NodeCollector(ways.required_nodes)
    try:
        nodes.apply_file(filepath)
    except (RuntimeError, OSError) as e:
        raise IngestionError(f"Could not read nodes from {filepath}: {e}") from e

    missing = len(ways.required_nodes) - len(nodes.nodes)
    if missing:
        logger.warning(f"{missing} referenced nodes are not present in {filepath}")

    yield from nodes.nodes
    yield from ways.ways


def load_road_graph(filepath, builder=None):
    """
    Load a road graph from an OSM extract.

    Parameters
    ----------
    filepath : str
        Path to the OSM file
    builder : GraphBuilder, optional
        Builder to use (default selects ways tagged ``highway``)

    Returns
    -------
    RoadGraph
        Graph with the road ways and their nodes
    """
    from ..pipeline.graph_builder import GraphBuilder

    if builder is None:
        builder = GraphBuilder()

    logger.info(f"Loading road graph from {filepath}")
    graph = builder.build(read_pbf_entities(filepath, builder.is_road))
    graph.name = os.path.splitext(os.path.basename(str(filepath)))[0]
    return graph


def load_csv_graph(directory, nodes_file=None, edges_file=None):
    """
    Load a road graph from the headerless tables written by ``write_csv``.

    Parameters
    ----------
    directory : str
        Directory holding the tables
    nodes_file : str, optional
        Node table file name (default ``nodes.csv``)
    edges_file : str, optional
        Edge table file name (default ``edges.csv``)

    Returns
    -------
    RoadGraph
    """
    nodes_path = os.path.join(directory, nodes_file or EXPORT_CONFIG['nodes_file'])
    edges_path = os.path.join(directory, edges_file or EXPORT_CONFIG['edges_file'])

    try:
        nodes_df = _read_table(nodes_path, NODE_COLUMNS, {'id': 'int64', 'lat': 'float64', 'lon': 'float64'})
        edges_df = _read_table(edges_path, EDGE_COLUMNS, {'id1': 'int64', 'id2': 'int64'})
    except (OSError, ValueError) as e:
        raise IngestionError(f"Could not read graph tables from {directory}: {e}") from e

    return RoadGraph.from_dataframes(nodes_df, edges_df, name=os.path.basename(os.path.normpath(directory)))


def _read_table(path, columns, dtypes):
    # pandas refuses to parse a zero-byte file
    if os.path.exists(path) and os.path.getsize(path) == 0:
        return pd.DataFrame({col: pd.Series(dtype=dtypes[col]) for col in columns})
    return pd.read_csv(path, header=None, names=columns, dtype=dtypes, float_precision='round_trip')
