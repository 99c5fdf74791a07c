import json

import pytest

from pbf2graph.pipeline.pipeline import Pipeline, PipelineConfig, PipelineStep
from pbf2graph.pipeline_config import PIPELINE_CONFIG, PipelineConfigError, DanglingEdgeReference


def test_config_defaults_are_not_shared():
    config = PipelineConfig({"steps": [{"name": "export_csv", "params": {"output_directory": "x"}}]})
    assert config.get_step_config("export_csv")["output_directory"] == "x"
    assert PipelineConfig().get_step_config("export_csv")["output_directory"] == "output"
    assert PIPELINE_CONFIG["steps"][1]["params"]["output_directory"] == "output"


def test_config_file_is_overridden_by_dict(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({
        "pbf_file": "a.osm.pbf",
        "logger": {"level": "DEBUG"},
        "steps": [{"name": "export_geopackage", "enabled": True, "params": {"path": "g.gpkg"}}],
    }))
    config = PipelineConfig({"pbf_file": "b.osm.pbf"}, config_file=str(config_file))

    assert config.get_global_config()["pbf_file"] == "b.osm.pbf"
    assert config.get_global_config()["logger"] == {"level": "DEBUG", "console": True}
    assert config.is_step_enabled("export_geopackage")
    assert config.get_step_config("export_geopackage") == {"path": "g.gpkg"}


@pytest.mark.parametrize("overrides", [
    {"steps": [{"name": "no_such_step"}]},
    {"steps": [{"name": "export_csv", "params": {"colour": "red"}}]},
])
def test_invalid_config(overrides):
    with pytest.raises(PipelineConfigError):
        PipelineConfig(overrides)


def test_missing_config_file(tmp_path):
    with pytest.raises(PipelineConfigError):
        PipelineConfig(config_file=str(tmp_path / "missing.json"))


def test_step_records_status():
    step = PipelineStep("double", lambda context, value: value * 2, params={"value": 21})
    assert step.execute({}) == 42
    assert step.status == "completed"

    disabled = PipelineStep("off", lambda context: 1, enabled=False)
    assert disabled.execute({}) is None
    assert disabled.status == "skipped"


def test_run_with_graph_exports_and_routes(diamond_graph, tmp_path):
    pipeline = Pipeline({
        "steps": [
            {"name": "export_csv", "params": {"output_directory": str(tmp_path)}},
            {"name": "shortest_path", "params": {"start": 2, "end": 5}},
        ],
    })
    context = pipeline.run(graph=diamond_graph)

    assert context["path"] == [2, 3, 4, 1, 5]
    assert context["path_length"] == pytest.approx(2 ** 0.5 + 2 + 2 + 2)
    assert (tmp_path / "nodes.csv").exists()
    assert context["outputs"]["edges"].endswith("edges.csv")
    assert [s["status"] for s in pipeline.summary()] == ["completed", "completed", "skipped", "completed"]


def test_run_without_route(diamond_graph, tmp_path):
    pipeline = Pipeline({"steps": [{"name": "export_csv", "params": {"output_directory": str(tmp_path)}}]})
    context = pipeline.run(graph=diamond_graph)
    assert context["path"] is None


def test_run_from_extract(osm_file, tmp_path):
    pipeline = Pipeline({
        "pbf_file": str(osm_file),
        "steps": [
            {"name": "export_csv", "params": {"output_directory": str(tmp_path / "out")}},
            {"name": "shortest_path", "params": {"start": 10, "end": 12}},
        ],
    })
    context = pipeline.run()

    assert context["path"] == [10, 11, 12]
    assert (tmp_path / "out" / "edges.csv").read_text().splitlines() == ["10,11", "11,12"]


def test_missing_input_file_setting(tmp_path):
    pipeline = Pipeline({"steps": [{"name": "export_csv", "params": {"output_directory": str(tmp_path)}}]})
    with pytest.raises(PipelineConfigError):
        pipeline.run()
    assert pipeline.get_step("load_graph").status == "failed"


def test_geopackage_step_requires_path(diamond_graph, tmp_path):
    pipeline = Pipeline({"steps": [
        {"name": "export_csv", "params": {"output_directory": str(tmp_path)}},
        {"name": "export_geopackage", "enabled": True},
    ]})
    with pytest.raises(PipelineConfigError):
        pipeline.run(graph=diamond_graph)


def test_query_failure_propagates(diamond_graph, tmp_path):
    diamond_graph.add_edge(1, 6)
    pipeline = Pipeline({"steps": [
        {"name": "export_csv", "params": {"output_directory": str(tmp_path)}},
        {"name": "shortest_path", "params": {"start": 1, "end": 3}},
    ]})
    with pytest.raises(DanglingEdgeReference):
        pipeline.run(graph=diamond_graph)
    assert pipeline.get_step("shortest_path").error


def test_failed_step_reports_error_type(diamond_graph, tmp_path):
    diamond_graph.add_edge(1, 6)
    pipeline = Pipeline({"steps": [
        {"name": "export_csv", "params": {"output_directory": str(tmp_path)}},
        {"name": "shortest_path", "params": {"start": 1, "end": 3}},
    ]})
    with pytest.raises(DanglingEdgeReference):
        pipeline.run(graph=diamond_graph)

    failed = pipeline.failed_step()
    assert failed.name == "shortest_path"
    assert failed.error_type == "DanglingEdgeReference"
    assert failed.describe_failure().startswith("shortest_path: DanglingEdgeReference: Node 6")
    assert pipeline.get_step("export_csv").describe_failure() is None
    assert pipeline.summary()[-1]["error_type"] == "DanglingEdgeReference"


def test_successful_run_has_no_failed_step(diamond_graph, tmp_path):
    pipeline = Pipeline({"steps": [{"name": "export_csv", "params": {"output_directory": str(tmp_path)}}]})
    pipeline.run(graph=diamond_graph)
    assert pipeline.failed_step() is None
