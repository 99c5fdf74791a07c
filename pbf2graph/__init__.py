"""
pbf2graph - Road graphs and shortest paths from OpenStreetMap extracts.
"""

__version__ = '0.1.0'

from . import core
from . import io
from . import pipeline

from .core import RoadGraph, shortest_path, path_length
from .io import load_road_graph, load_csv_graph, write_csv
from .pipeline import GraphBuilder, Pipeline
from .pipeline_config import (
    Pbf2GraphError, PipelineConfigError, IngestionError, ExportError,
    QueryError, DanglingEdgeReference, InvalidCoordinate, QueryTimeout,
)
