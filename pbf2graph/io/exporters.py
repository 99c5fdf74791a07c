"""
Functions for exporting road graphs to various formats.
"""

import os
import logging

from ..pipeline_config import EXPORT_CONFIG, ExportError

logger = logging.getLogger(__name__)


def write_csv(graph, directory, nodes_file=None, edges_file=None, float_format=None):
    """
    Write a road graph as two headerless CSV tables.

    One row ``id,lat,lon`` per node and one row ``id1,id2`` per edge, in
    edge-list order.

    Parameters
    ----------
    graph : RoadGraph
        Graph to export
    directory : str
        Output directory, created if it doesn't exist
    nodes_file : str, optional
        Node table file name (default ``nodes.csv``)
    edges_file : str, optional
        Edge table file name (default ``edges.csv``)
    float_format : str, optional
        Format string for coordinates, e.g. ``'%.7f'``

    Returns
    -------
    tuple of str
        (nodes_path, edges_path)
    """
    nodes_path = os.path.join(directory, nodes_file or EXPORT_CONFIG['nodes_file'])
    edges_path = os.path.join(directory, edges_file or EXPORT_CONFIG['edges_file'])

    nodes_df, edges_df = graph.to_dataframes()

    try:
        # Create directory if it doesn't exist
        os.makedirs(directory, exist_ok=True)

        nodes_df.to_csv(nodes_path, header=False, index=False, float_format=float_format)
        edges_df.to_csv(edges_path, header=False, index=False)
    except OSError as e:
        raise ExportError(f"Could not write graph to {directory}: {e}") from e

    logger.info(f"Wrote {len(nodes_df)} nodes to {nodes_path} and {len(edges_df)} edges to {edges_path}")
    return nodes_path, edges_path


def export_geopackage(graph, filepath):
    """
    Export a road graph to a GeoPackage with ``nodes`` and ``edges`` layers.

    Parameters
    ----------
    graph : RoadGraph
        Graph to export
    filepath : str
        Path to the output ``.gpkg`` file
    """
    nodes_gdf, edges_gdf = graph.to_geodataframes()

    try:
        # Create directory if it doesn't exist
        os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)

        nodes_gdf.to_file(filepath, layer='nodes', driver='GPKG')
        edges_gdf.to_file(filepath, layer='edges', driver='GPKG')
    except (OSError, ValueError) as e:
        raise ExportError(f"Could not write GeoPackage {filepath}: {e}") from e

    logger.info(f"Exported {len(nodes_gdf)} nodes and {len(edges_gdf)} edges to {filepath}")
    return filepath
