from pbf2graph.cli import main


def test_cli_exports_tables(osm_file, tmp_path, capsys):
    out = tmp_path / "out"
    assert main(["-p", str(osm_file), "-o", str(out)]) == 0

    assert (out / "edges.csv").read_text().splitlines() == ["10,11", "11,12"]
    assert len((out / "nodes.csv").read_text().splitlines()) == 3
    assert capsys.readouterr().out == ""


def test_cli_prints_route(osm_file, tmp_path, capsys):
    assert main(["-p", str(osm_file), "-o", str(tmp_path), "--route", "10", "12"]) == 0
    assert capsys.readouterr().out.strip() == "10 11 12"


def test_cli_reports_missing_route(osm_file, tmp_path, capsys):
    assert main(["-p", str(osm_file), "-o", str(tmp_path), "--route", "12", "10"]) == 0
    assert capsys.readouterr().out.strip() == "no path"


def test_cli_bidirectional(osm_file, tmp_path, capsys):
    assert main(["-p", str(osm_file), "-o", str(tmp_path), "--bidirectional", "--route", "12", "10"]) == 0
    assert capsys.readouterr().out.strip() == "12 11 10"


def test_cli_missing_input(tmp_path, capsys):
    assert main(["-p", str(tmp_path / "missing.osm.pbf"), "-o", str(tmp_path / "out")]) == 1
    assert "error:" in capsys.readouterr().err


def test_cli_diagnostic_names_failed_step(tmp_path, capsys):
    assert main(["-p", str(tmp_path / "missing.osm.pbf"), "-o", str(tmp_path / "out")]) == 1
    assert "error: load_graph: IngestionError: Input file not found" in capsys.readouterr().err


def test_cli_config_error_without_pipeline(tmp_path, capsys):
    args = ["-p", "x.osm.pbf", "-o", str(tmp_path), "--config", str(tmp_path / "missing.json")]
    assert main(args) == 1
    assert "error: Configuration file not found" in capsys.readouterr().err
