import logging

import pytest

from pbf2graph.core.graph import RoadGraph


@pytest.fixture
def diamond_graph():
    g = RoadGraph(name="diamond")
    for node_id, lat, lon in [(1, 0, 0), (2, 1, 1), (3, 2, 2), (4, 0, 2), (5, 2, 0)]:
        g.add_node(node_id, lat, lon)
    for u, v in [(1, 2), (2, 3), (3, 4), (4, 1), (1, 5), (5, 3)]:
        g.add_edge(u, v)
    return g


OSM_XML = """<?xml version='1.0' encoding='UTF-8'?>
<osm version="0.6" generator="pbf2graph-tests">
  <node id="10" version="1" lat="48.0" lon="11.0"/>
  <node id="11" version="1" lat="48.001" lon="11.001"/>
  <node id="12" version="1" lat="48.002" lon="11.0"/>
  <node id="20" version="1" lat="48.5" lon="11.5"/>
  <node id="21" version="1" lat="48.6" lon="11.6"/>
  <node id="99" version="1" lat="50.0" lon="10.0"/>
  <way id="100" version="1">
    <nd ref="10"/>
    <nd ref="11"/>
    <nd ref="12"/>
    <tag k="highway" v="residential"/>
  </way>
  <way id="101" version="1">
    <nd ref="20"/>
    <nd ref="21"/>
    <tag k="name" v="Main St"/>
  </way>
  <relation id="200" version="1">
    <member type="way" ref="100" role=""/>
    <tag k="type" v="route"/>
  </relation>
</osm>
"""


@pytest.fixture
def osm_file(tmp_path):
    path = tmp_path / "extract.osm"
    path.write_text(OSM_XML, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("pbf2graph")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
