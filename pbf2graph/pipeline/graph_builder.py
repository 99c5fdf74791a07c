"""
Construction of road graphs from a stream of OSM entities.

The builder selects road ways by tag key and turns every pair of
consecutive node references into a directed edge.
"""

import logging
from typing import Dict, Iterable, Optional

from ..core.data_model import OsmNode, OsmWay, OsmRelation
from ..core.graph import RoadGraph
from ..pipeline_config import ROAD_FILTER_CONFIG, IngestionError

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Builds a RoadGraph from OSM entities."""

    def __init__(self, tag_key: str = ROAD_FILTER_CONFIG['tag_key'],
                 bidirectional: bool = ROAD_FILTER_CONFIG['bidirectional'],
                 oneway_values=None, reverse_oneway_values=None):
        """
        Initialize a new graph builder.

        Args:
            tag_key: Tag key a way must carry to be kept
            bidirectional: If True, also add the reverse of every edge of a
                way not tagged as one-way
            oneway_values: ``oneway`` values that keep a way one-directional
            reverse_oneway_values: ``oneway`` values meaning the way runs
                against its node order
        """
        self.tag_key = tag_key
        self.bidirectional = bidirectional
        if oneway_values is None:
            oneway_values = ROAD_FILTER_CONFIG['oneway_values']
        if reverse_oneway_values is None:
            reverse_oneway_values = ROAD_FILTER_CONFIG['reverse_oneway_values']
        self.oneway_values = set(oneway_values)
        self.reverse_oneway_values = set(reverse_oneway_values)
        self.graph = None
        self.reset()

    @classmethod
    def from_config(cls, config: Dict):
        """
        Create a builder from a ``ROAD_FILTER_CONFIG``-like dictionary.

        Args:
            config: Builder settings; missing keys fall back to the defaults

        Returns:
            Configured GraphBuilder
        """
        params = {**ROAD_FILTER_CONFIG, **(config or {})}
        return cls(tag_key=params['tag_key'],
                   bidirectional=params['bidirectional'],
                   oneway_values=params['oneway_values'],
                   reverse_oneway_values=params['reverse_oneway_values'])

    def reset(self, graph: Optional[RoadGraph] = None):
        """Start a new graph and clear the counters."""
        self.graph = graph if graph is not None else RoadGraph()
        self.stats = {
            'nodes_added': 0,
            'ways_added': 0,
            'ways_skipped': 0,
            'edges_added': 0,
            'relations_ignored': 0,
        }

    def is_road(self, tags: Dict[str, str]) -> bool:
        """Return True if the tags contain the road key, whatever its value."""
        return any(key == self.tag_key for key in tags)

    def handle(self, entity):
        """
        Add one entity to the graph.

        Args:
            entity: OsmNode, OsmDenseNode, OsmWay or OsmRelation

        Raises:
            IngestionError: If the entity kind is unknown
        """
        if isinstance(entity, OsmNode):
            self.graph.add_node(entity.id, entity.lat, entity.lon)
            self.stats['nodes_added'] += 1
        elif isinstance(entity, OsmWay):
            if self.is_road(entity.tags):
                self._add_way(entity)
            else:
                self.stats['ways_skipped'] += 1
        elif isinstance(entity, OsmRelation):
            self.stats['relations_ignored'] += 1
        else:
            raise IngestionError(f"Unexpected entity type: {type(entity).__name__}")

    def _add_way(self, way: OsmWay):
        refs = list(way.refs)
        oneway = way.tags.get('oneway')
        if oneway in self.reverse_oneway_values and self.bidirectional:
            refs.reverse()

        for i in range(len(refs) - 1):
            self.graph.add_edge(refs[i], refs[i + 1])
            self.stats['edges_added'] += 1

        if self.bidirectional and oneway not in self.oneway_values | self.reverse_oneway_values:
            for i in range(len(refs) - 1, 0, -1):
                self.graph.add_edge(refs[i], refs[i - 1])
                self.stats['edges_added'] += 1

        self.stats['ways_added'] += 1

    def build(self, entities: Iterable, graph: Optional[RoadGraph] = None) -> RoadGraph:
        """
        Build a graph from a stream of entities.

        Args:
            entities: Iterable of OSM entities
            graph: Existing graph to extend; a new one is created if omitted

        Returns:
            The populated RoadGraph
        """
        self.reset(graph)

        for entity in entities:
            self.handle(entity)

        logger.info(
            f"Graph built: {self.stats['nodes_added']} nodes, "
            f"{self.stats['ways_added']} ways, {self.stats['edges_added']} edges "
            f"({self.stats['ways_skipped']} ways skipped)"
        )
        return self.graph
