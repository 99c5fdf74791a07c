"""
Road graph data structure.

This module provides the graph assembled from an OSM extract: a coordinate
store keyed by node id and an ordered list of directed edges.
"""

import math
from collections import defaultdict

import numpy as np
import pandas as pd
import geopandas as gpd
import networkx as nx
from shapely.geometry import LineString
from typing import Dict, List, Tuple

from ..pipeline_config import DanglingEdgeReference, InvalidCoordinate


NODE_COLUMNS = ['id', 'lat', 'lon']
EDGE_COLUMNS = ['id1', 'id2']


class RoadGraph:
    """
    A directed road graph with node coordinates in degrees.

    Edges may reference nodes that have no coordinates; such edges are only
    rejected when a query needs their weight.
    """

    def __init__(self, name=None):
        """
        Initialize an empty RoadGraph.

        Parameters
        ----------
        name : str, optional
            Name of the graph
        """
        self.name = name
        self.nodes: Dict[int, Tuple[float, float]] = {}
        self.edges: List[Tuple[int, int]] = []
        self._adjacency: Dict[int, List[int]] = defaultdict(list)

    def add_node(self, node_id, lat, lon):
        """
        Add a node, replacing any coordinates already stored for it.

        Parameters
        ----------
        node_id : int
            OSM node identifier
        lat : float
            Latitude in degrees
        lon : float
            Longitude in degrees
        """
        self.nodes[node_id] = (float(lat), float(lon))

    def add_edge(self, id1, id2):
        """
        Append a directed edge from ``id1`` to ``id2``.

        Parameters
        ----------
        id1 : int
            Source node identifier
        id2 : int
            Target node identifier
        """
        self.edges.append((id1, id2))
        self._adjacency[id1].append(id2)

    @property
    def node_count(self):
        return len(self.nodes)

    @property
    def edge_count(self):
        return len(self.edges)

    def __len__(self):
        return len(self.nodes)

    def __contains__(self, node_id):
        return node_id in self.nodes

    def __repr__(self):
        return f"RoadGraph(name={self.name}, nodes={self.node_count}, edges={self.edge_count})"

    def coordinates(self, node_id):
        """
        Get the coordinates of a node.

        Parameters
        ----------
        node_id : int
            Node identifier

        Returns
        -------
        tuple of float
            (lat, lon)

        Raises
        ------
        DanglingEdgeReference
            If the node has no coordinates
        """
        try:
            return self.nodes[node_id]
        except KeyError:
            raise DanglingEdgeReference(node_id) from None

    def edge_weight(self, u, v):
        """
        Flat Euclidean distance between two nodes, in degrees.

        Parameters
        ----------
        u, v : int
            Endpoint identifiers

        Returns
        -------
        float
            sqrt((lat_u - lat_v)^2 + (lon_u - lon_v)^2)
        """
        lat_u, lon_u = self.coordinates(u)
        lat_v, lon_v = self.coordinates(v)
        weight = math.sqrt((lat_u - lat_v) ** 2 + (lon_u - lon_v) ** 2)
        if math.isnan(weight):
            raise InvalidCoordinate(u, v)
        return weight

    def successors(self, node_id):
        """
        Get the targets of the edges leaving a node, in edge-list order.

        Parameters
        ----------
        node_id : int
            Node identifier

        Returns
        -------
        tuple of int
            Target identifiers, duplicates included
        """
        # reads must not insert keys
        return tuple(self._adjacency.get(node_id, ()))

    def to_dataframes(self):
        """
        Convert the graph to DataFrames.

        Returns
        -------
        tuple of DataFrame
            (nodes_df, edges_df) with columns ``id, lat, lon`` and ``id1, id2``
        """
        ids = np.fromiter(self.nodes.keys(), dtype=np.int64, count=len(self.nodes))
        coords = np.array(list(self.nodes.values()), dtype=np.float64).reshape(-1, 2)
        nodes_df = pd.DataFrame({'id': ids, 'lat': coords[:, 0], 'lon': coords[:, 1]})

        edges = np.array(self.edges, dtype=np.int64).reshape(-1, 2)
        edges_df = pd.DataFrame({'id1': edges[:, 0], 'id2': edges[:, 1]})

        return nodes_df, edges_df

    @classmethod
    def from_dataframes(cls, nodes_df, edges_df, name=None):
        """
        Create a RoadGraph from DataFrames.

        Parameters
        ----------
        nodes_df : DataFrame
            Node rows with columns ``id, lat, lon``
        edges_df : DataFrame
            Edge rows with columns ``id1, id2``
        name : str, optional
            Name of the graph

        Returns
        -------
        RoadGraph
            A new RoadGraph instance
        """
        graph = cls(name=name)

        for node_id, lat, lon in zip(nodes_df['id'], nodes_df['lat'], nodes_df['lon']):
            graph.add_node(int(node_id), float(lat), float(lon))

        for id1, id2 in zip(edges_df['id1'], edges_df['id2']):
            graph.add_edge(int(id1), int(id2))

        return graph

    def to_geodataframes(self, crs="EPSG:4326"):
        """
        Convert the graph to GeoDataFrames.

        Edges whose endpoints have no coordinates are left out of the edge
        layer since they have no geometry.

        Returns
        -------
        tuple of GeoDataFrame
            (nodes_gdf, edges_gdf)
        """
        nodes_df, edges_df = self.to_dataframes()
        nodes_gdf = gpd.GeoDataFrame(
            nodes_df, geometry=gpd.points_from_xy(nodes_df['lon'], nodes_df['lat']), crs=crs
        )

        known = list(self.nodes)
        resolvable = edges_df['id1'].isin(known) & edges_df['id2'].isin(known)
        edges_df = edges_df[resolvable].reset_index(drop=True)
        geometries = []
        for id1, id2 in zip(edges_df['id1'], edges_df['id2']):
            lat1, lon1 = self.nodes[int(id1)]
            lat2, lon2 = self.nodes[int(id2)]
            geometries.append(LineString([(lon1, lat1), (lon2, lat2)]))
        edges_gdf = gpd.GeoDataFrame(edges_df, geometry=geometries, crs=crs)

        return nodes_gdf, edges_gdf

    def to_networkx(self):
        """
        Convert the graph to a networkx DiGraph.

        Parallel edges collapse into one; every edge carries its Euclidean
        ``weight``. Nodes carry ``pos`` as (lon, lat).

        Returns
        -------
        networkx.DiGraph
        """
        G = nx.DiGraph(name=self.name)
        for node_id, (lat, lon) in self.nodes.items():
            G.add_node(node_id, lat=lat, lon=lon, pos=(lon, lat))
        for u, v in self.edges:
            G.add_edge(u, v, weight=self.edge_weight(u, v))
        return G
