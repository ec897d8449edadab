from __future__ import annotations

import logging

import networkx as nx
import pandas as pd

from .errors import PipelineDataError, UnknownNodeError

logger = logging.getLogger(__name__)

# 合成的面板根節點，所有無上游的分析都掛在它之下
PANEL_ROOT = "PATH_STEPS_PANEL"

ANALYSIS_COLUMN = "Analysis ID"
PARENT_COLUMN = "Parent"
CHILD_COLUMN = "Child"


def _requireColumns(df: pd.DataFrame, columns: list[str], source: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise PipelineDataError(f"{source} 缺少欄位：{', '.join(missing)}")


def readAnalyses(path: str) -> pd.DataFrame:
    """讀取分析清單 CSV。

    Args:
        path: 分析清單檔案路徑，需包含 ``Analysis ID`` 欄位。

    Returns:
        pd.DataFrame: 讀取後的分析資料表。
    """
    analyses = pd.read_csv(path, encoding="utf-8-sig", dtype=str)
    _requireColumns(analyses, [ANALYSIS_COLUMN], "分析清單")
    return analyses


def readDependencies(path: str) -> pd.DataFrame:
    """讀取依賴關係 CSV。

    Args:
        path: 依賴檔案路徑，需包含 ``Parent`` 與 ``Child`` 欄位。

    Returns:
        pd.DataFrame: 讀取後的依賴資料表。
    """
    dependencies = pd.read_csv(path, encoding="utf-8-sig", dtype=str)
    _requireColumns(dependencies, [PARENT_COLUMN, CHILD_COLUMN], "依賴清單")
    return dependencies


def buildPipelineGraph(
    analyses: pd.DataFrame,
    dependencies: pd.DataFrame | None = None,
) -> nx.DiGraph:
    """根據分析與依賴資料建立管線依賴圖。

    每一列依賴代表「Parent -> Child」的有向邊。沒有任何上游的分析
    會連到合成的 ``PANEL_ROOT`` 之下，作為佈局時的根節點。

    Args:
        analyses: 分析資料表。
        dependencies: 依賴資料表，可省略。

    Returns:
        nx.DiGraph: 含面板根節點的依賴圖。

    Raises:
        PipelineDataError: 分析代號重複、使用保留名稱或依賴含有循環。
        UnknownNodeError: 依賴引用了未定義的分析。
    """
    _requireColumns(analyses, [ANALYSIS_COLUMN], "分析清單")
    G = nx.DiGraph()
    ids = [str(a).strip() for a in analyses[ANALYSIS_COLUMN].dropna()]
    # 檢查分析代號是否重複
    if len(ids) != len(set(ids)):
        raise PipelineDataError("分析清單含有重複 Analysis ID")
    if PANEL_ROOT in ids:
        raise PipelineDataError(f"{PANEL_ROOT} 為保留名稱，不可作為分析代號")
    G.add_nodes_from(ids)

    if dependencies is not None:
        _requireColumns(dependencies, [PARENT_COLUMN, CHILD_COLUMN], "依賴清單")
        for parent, child in zip(
                dependencies[PARENT_COLUMN], dependencies[CHILD_COLUMN]):
            parent = str(parent).strip()
            child = str(child).strip()
            for label in (parent, child):
                if label not in G:
                    raise UnknownNodeError(
                        label, f"依賴關係引用了未定義的分析：{label}")
            G.add_edge(parent, child)

    # 佈局只走訪根節點可達的分析，依賴中不可有循環
    try:
        cycle = nx.find_cycle(G)
    except nx.NetworkXNoCycle:
        cycle = None
    if cycle:
        path = " -> ".join([u for u, _ in cycle] + [cycle[0][0]])
        raise PipelineDataError(f"依賴關係含有循環：{path}")

    roots = [n for n in ids if G.in_degree(n) == 0]
    G.add_node(PANEL_ROOT)
    for root in roots:
        G.add_edge(PANEL_ROOT, root)
    logger.info("建立依賴圖：%d 個分析、%d 個根節點", len(ids), len(roots))
    return G


def listRoots(G: nx.DiGraph) -> list[str]:
    """列出依賴圖的根節點。

    有面板根節點時回傳其子節點，否則回傳所有沒有上游的節點。

    Args:
        G: 依賴圖。

    Returns:
        list[str]: 根節點名稱，依圖中插入順序排列。
    """
    if PANEL_ROOT in G:
        return list(G.successors(PANEL_ROOT))
    return [n for n in G.nodes if G.in_degree(n) == 0]
