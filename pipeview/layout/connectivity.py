"""
連通分析模組
Connectivity Analysis Module

在佈局前分析依賴樹森林：找出連通元件、依扇出數排序根節點，並以
深度與扇出的雙重走訪為每個節點配置初始網格座標。所有走訪皆使用
明確堆疊，深層管線不會觸及遞迴上限。
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from ..pipeline_model import PANEL_ROOT
from .graph_types import Dyad

logger = logging.getLogger(__name__)


def _relatedElements(G: nx.DiGraph, label: str) -> List[str]:
    """子節點與父節點，排除面板根節點"""
    related = list(G.successors(label)) + list(G.predecessors(label))
    return [r for r in related if r != PANEL_ROOT]


def findAllConnectedElements(G: nx.DiGraph, seed: str, found: Set[str]) -> Set[str]:
    """將與 seed 連通的所有節點加入 ``found``。

    父子邊視為無向邊，已在 ``found`` 中的節點不會再次走訪。

    Args:
        G: 依賴圖。
        seed: 起始節點。
        found: 收集結果的集合，會被就地修改。

    Returns:
        Set[str]: 同一個 ``found`` 集合。
    """
    stack = [seed]
    while stack:
        label = stack.pop()
        if label in found or label == PANEL_ROOT:
            continue
        found.add(label)
        logger.debug("將節點 %s 加入元件", label)
        stack.extend(reversed(_relatedElements(G, label)))
    return found


def findConnectedComponents(G: nx.DiGraph, roots: Iterable[str]) -> List[Set[str]]:
    """找出根節點所屬的連通元件。

    元件順序依根節點首次出現的順序決定。

    Args:
        G: 依賴圖。
        roots: 根節點列表。

    Returns:
        List[Set[str]]: 各連通元件的節點集合。
    """
    components: List[Set[str]] = []
    allFound: Set[str] = set()
    for root in roots:
        if root in allFound:
            logger.debug("節點 %s 已屬於既有元件", root)
            continue
        component = findAllConnectedElements(G, root, set())
        allFound |= component
        components.append(component)
    return components


def computeFanOut(G: nx.DiGraph, label: str) -> int:
    """直接子節點數量（扇出數）"""
    return sum(1 for c in G.successors(label) if c != PANEL_ROOT)


def sortRootsByConnectivity(G: nx.DiGraph, roots: Iterable[str]) -> List[str]:
    """依連通元件分組根節點，組內依扇出數由大到小排序。

    扇出數相同時保持原本順序。

    Args:
        G: 依賴圖。
        roots: 根節點列表。

    Returns:
        List[str]: 重新排序後的根節點。
    """
    roots = list(dict.fromkeys(roots))
    ordered: List[str] = []
    for component in findConnectedComponents(G, roots):
        members = [r for r in roots if r in component]
        members.sort(key=lambda r: computeFanOut(G, r), reverse=True)
        ordered.extend(members)
    return ordered


def positionElementsOfSet(
    G: nx.DiGraph,
    seed: str,
    column: int,
    row: int,
    placed: Dict[str, Dyad],
) -> Set[str]:
    """以深度優先配置 seed 所在樹的網格座標。

    每個節點先把子節點放在下一列（同欄），再把子節點放在右一欄
    （同列）；已配置的節點不會被移動。

    Args:
        G: 依賴圖。
        seed: 起始節點。
        column: seed 的欄位。
        row: seed 的列。
        placed: 已配置的座標，會被就地修改。

    Returns:
        Set[str]: 本次新配置的節點。
    """
    newlyPlaced: Set[str] = set()
    stack: List[Tuple[str, int, int]] = [(seed, column, row)]
    while stack:
        label, x, y = stack.pop()
        if label in placed or label == PANEL_ROOT:
            continue
        placed[label] = Dyad(x, y)
        newlyPlaced.add(label)
        logger.debug("配置節點 %s 於 (%d, %d)", label, x, y)

        children = [c for c in G.successors(label) if c != PANEL_ROOT]
        # 堆疊為後進先出：扇出任務先推入，深度任務後推入並反序，
        # 彈出順序即為遞迴版本的前序順序
        fanOut = [(c, x + 1, y) for c in children]
        depth = [(c, x, y + 1) for c in children]
        stack.extend(reversed(fanOut))
        stack.extend(reversed(depth))
    return newlyPlaced


def getMaxExtentsOfSet(positions: Dict[str, Dyad], labels: Iterable[str]) -> Dyad:
    """已配置節點集合的最大欄與最大列"""
    maxX = 0
    maxY = 0
    for label in labels:
        position = positions[label]
        maxX = max(maxX, position.x)
        maxY = max(maxY, position.y)
    return Dyad(maxX, maxY)


def positionElements(
    G: nx.DiGraph,
    roots: Iterable[str],
) -> Tuple[Dict[str, Dyad], List[Set[str]]]:
    """為整個森林配置初始網格座標。

    根節點先依連通元件與扇出數排序，再逐一根節點配置；第一棵樹
    從第 0 欄開始，之後的樹放在前一棵樹最右欄的右邊。只能經由
    父節點走到的節點（例如多父節點的另一個根）會在輪到其根節點時
    另外配置。

    Args:
        G: 依賴圖。
        roots: 根節點列表。

    Returns:
        Tuple[Dict[str, Dyad], List[Set[str]]]:
            各節點的網格座標，以及依配置順序排列的連通元件。
    """
    ordered = sortRootsByConnectivity(G, roots)
    positions: Dict[str, Dyad] = {}
    current: Optional[Set[str]] = None
    column = 0
    for root in ordered:
        if root in positions:
            continue
        if current:
            column = getMaxExtentsOfSet(positions, current).x + 1
            logger.debug("上一棵樹最右欄為 %d", column - 1)
        current = positionElementsOfSet(G, root, column, 0, positions)
    return positions, findConnectedComponents(G, ordered)


def collectAncestors(G: nx.DiGraph, start: str) -> Set[str]:
    """回傳 start 及其所有上游節點，不含面板根節點"""
    if start not in G:
        return set()
    ancestors = {start}
    stack = [start]
    while stack:
        label = stack.pop()
        for parent in G.predecessors(label):
            if parent == PANEL_ROOT or parent in ancestors:
                continue
            ancestors.add(parent)
            stack.append(parent)
    return ancestors


def findRelatedElement(G: nx.DiGraph, seed: str, name: str) -> Optional[str]:
    """在 seed 所屬的連通元件中尋找名稱為 name 的節點"""
    if seed not in G:
        return None
    component = findAllConnectedElements(G, seed, set())
    return name if name in component else None
