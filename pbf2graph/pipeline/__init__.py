"""
Pipeline module for building and querying road graphs.

This module provides the graph builder and the pipeline that chains
loading, export and routing.
"""

from .graph_builder import GraphBuilder
from .pipeline import Pipeline, PipelineConfig, PipelineStep

__all__ = ['GraphBuilder', 'Pipeline', 'PipelineConfig', 'PipelineStep']
