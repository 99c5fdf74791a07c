"""
Input/output operations for road graphs.

This module provides functions for reading OSM extracts and
writing graphs to tabular and geospatial formats.
"""

from .loaders import read_pbf_entities, load_road_graph, load_csv_graph
from .exporters import write_csv, export_geopackage

__all__ = ['read_pbf_entities', 'load_road_graph', 'load_csv_graph', 'write_csv', 'export_geopackage']
