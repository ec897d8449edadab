import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # noqa: E402

import networkx as nx  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402
from pipeview.errors import PipelineDataError, UnknownNodeError  # noqa: E402
from pipeview.pipeline_model import (  # noqa: E402
    PANEL_ROOT,
    buildPipelineGraph,
    listRoots,
    readAnalyses,
    readDependencies,
)


def sample_tables():
    analyses = pd.DataFrame({"Analysis ID": ["Reco", "Skim", "Plot", "Calib"]})
    dependencies = pd.DataFrame({
        "Parent": ["Reco", "Skim"],
        "Child": ["Skim", "Plot"],
    })
    return analyses, dependencies


def test_build_graph_links_roots_to_panel():
    G = buildPipelineGraph(*sample_tables())
    assert ("Reco", "Skim") in G.edges
    assert set(G.successors(PANEL_ROOT)) == {"Reco", "Calib"}
    assert listRoots(G) == ["Reco", "Calib"]


def test_build_graph_without_dependencies():
    analyses, _ = sample_tables()
    G = buildPipelineGraph(analyses)
    assert listRoots(G) == ["Reco", "Skim", "Plot", "Calib"]


def test_unknown_dependency_raises():
    analyses, _ = sample_tables()
    deps = pd.DataFrame({"Parent": ["Reco"], "Child": ["Missing"]})
    with pytest.raises(UnknownNodeError) as info:
        buildPipelineGraph(analyses, deps)
    assert info.value.label == "Missing"


def test_duplicate_analysis_ids():
    analyses = pd.DataFrame({"Analysis ID": ["A", "A"]})
    with pytest.raises(ValueError):
        buildPipelineGraph(analyses)


def test_list_roots_without_panel_root():
    G = nx.DiGraph()
    G.add_edges_from([("A", "B"), ("C", "B")])
    assert listRoots(G) == ["A", "C"]


def test_read_csv_files(tmp_path):
    analyses_path = tmp_path / "analyses.csv"
    deps_path = tmp_path / "deps.csv"
    analyses_path.write_text("Analysis ID,Owner\nReco,ann\nSkim,bo\n", encoding="utf-8")
    deps_path.write_text("Parent,Child\nReco,Skim\n", encoding="utf-8")
    G = buildPipelineGraph(readAnalyses(analyses_path), readDependencies(deps_path))
    assert listRoots(G) == ["Reco"]


def test_read_csv_missing_column(tmp_path):
    path = tmp_path / "deps.csv"
    path.write_text("From,To\nA,B\n", encoding="utf-8")
    with pytest.raises(ValueError):
        readDependencies(path)


def test_cycle_without_root_is_rejected():
    analyses = pd.DataFrame({"Analysis ID": ["R", "S", "A", "B"]})
    deps = pd.DataFrame({"Parent": ["R", "A", "B"], "Child": ["S", "B", "A"]})
    with pytest.raises(PipelineDataError) as info:
        buildPipelineGraph(analyses, deps)
    message = str(info.value)
    assert "循環" in message
    assert "A" in message and "B" in message


def test_self_dependency_is_rejected():
    analyses = pd.DataFrame({"Analysis ID": ["A"]})
    deps = pd.DataFrame({"Parent": ["A"], "Child": ["A"]})
    with pytest.raises(ValueError):
        buildPipelineGraph(analyses, deps)


def test_missing_column_is_pipeline_data_error(tmp_path):
    path = tmp_path / "analyses.csv"
    path.write_text("Name\nReco\n", encoding="utf-8")
    with pytest.raises(PipelineDataError):
        readAnalyses(path)
