"""
佈局執行組裝模組
Layout Run Assembly Module

將依賴圖、佈局參數與已保存的座標組成一次佈局執行所需的節點、
邊線、計算器與控制器。一次執行獨佔自己的節點陣列，重新讀取資料
後應建立新的執行而非修改舊的。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Set, Tuple

import networkx as nx

from ..config import LayoutConfiguration
from ..errors import UnknownNodeError
from ..pipeline_model import PANEL_ROOT, listRoots
from .connectivity import positionElements
from .force_layout import LayoutCalculator
from .graph_types import Dyad, Edge, Node
from .graph_updater import GraphUpdater, PositionMap
from .position_codec import Bounds, decodePositions, encodePositions

logger = logging.getLogger(__name__)

# 網格座標換算成像素時的邊界留白
MARGIN = 10

# 節點外框估算值：以最短名稱 "SubmitSlice" 為最小寬度
CHAR_WIDTH = 7
LABEL_PADDING = 15
MIN_LABEL = "SubmitSlice"
RECTANGLE_HEIGHT = 40


def estimateNodeSize(label: str) -> Tuple[int, int]:
    """依名稱長度估算節點外框大小"""
    width = max(len(label), len(MIN_LABEL)) * CHAR_WIDTH + LABEL_PADDING
    return width, RECTANGLE_HEIGHT


@dataclass
class LayoutRun:
    """一次佈局執行的完整狀態"""

    config: LayoutConfiguration
    nodes: List[Node]
    edges: List[Edge]
    calculator: LayoutCalculator
    roots: List[str]
    grid: Dict[str, Dyad]
    components: List[Set[str]]
    positionFailures: Dict[str, str] = field(default_factory=dict)

    @property
    def width(self) -> float:
        return self.calculator.width

    @property
    def height(self) -> float:
        return self.calculator.height

    def nodeIndex(self) -> Dict[str, int]:
        return {node.label: i for i, node in enumerate(self.nodes)}

    def createUpdater(
        self,
        publish: Callable[[PositionMap], None],
    ) -> GraphUpdater:
        """建立驅動本次執行的控制器"""
        return GraphUpdater(
            self.calculator,
            publish,
            iterates=self.config.iterates,
            showInterval=self.config.showInterval,
            movementLimit=self.config.movementLimit,
            gravity=self.config.gravity,
            repulsionMultiplier=self.config.repulsionMultiplier,
        )

    def positions(self) -> PositionMap:
        """目前的整數像素座標"""
        return {n.label: (int(n.x), int(n.y)) for n in self.nodes}

    def currentBounds(
        self,
        nodeSizes: Optional[Mapping[str, Tuple[int, int]]] = None,
    ) -> Dict[str, Bounds]:
        """目前各節點的外框 (x, y, 寬, 高)"""
        bounds: Dict[str, Bounds] = {}
        for node in self.nodes:
            size = (nodeSizes or {}).get(node.label) or estimateNodeSize(node.label)
            bounds[node.label] = (int(node.x), int(node.y), int(size[0]), int(size[1]))
        return bounds

    def savePositions(
        self,
        nodeSizes: Optional[Mapping[str, Tuple[int, int]]] = None,
    ) -> Dict[str, str]:
        """產生可保存的座標字典"""
        return encodePositions(self.currentBounds(nodeSizes))


def collectEdges(
    G: nx.DiGraph,
    index: Mapping[str, int],
    restLength: float,
) -> List[Edge]:
    """為每個父子關係建立彈簧邊線，面板根節點的連線不計。

    Raises:
        UnknownNodeError: 端點不在節點集合中。
    """
    edges: List[Edge] = []
    for parent, child in G.edges():
        if parent == PANEL_ROOT or child == PANEL_ROOT:
            continue
        for label in (parent, child):
            if label not in index:
                raise UnknownNodeError(
                    label, f"邊線 {parent} -> {child} 的端點 {label} 不在節點集合中")
        edges.append(Edge(index[parent], index[child], float(restLength)))
        logger.debug("建立邊線 %s -> %s", parent, child)
    return edges


def buildLayoutRun(
    G: nx.DiGraph,
    config: LayoutConfiguration,
    savedPositions: Optional[Mapping[str, str]] = None,
    *,
    seed: Optional[int] = None,
) -> LayoutRun:
    """建立一次佈局執行。

    節點的初始座標優先採用保存的座標，否則以網格座標乘上間距；
    保存座標格式錯誤的節點會改用網格座標。

    Args:
        G: 依賴圖。
        config: 佈局參數。
        savedPositions: 節點名稱對應 ``"x y 寬 高"`` 的字典。
        seed: 排斥力隨機擾動的亂數種子。

    Returns:
        LayoutRun: 組裝完成的佈局執行。
    """
    roots = listRoots(G)
    grid, components = positionElements(G, roots)

    saved, failures = decodePositions(savedPositions or {})
    rootSet = set(roots)
    nodes: List[Node] = []
    for label, cell in grid.items():
        node = Node(label)
        if label in saved:
            node.x = float(saved[label].x)
            node.y = float(saved[label].y)
        else:
            node.x = float(config.horizontalSpacing * cell.x + MARGIN)
            node.y = float(config.verticalSpacing * cell.y + MARGIN)
        if config.fixRoots and label in rootSet:
            logger.debug("固定根節點 %s", label)
            node.fixed = True
        logger.debug("節點 %s: %s-%s", label, node.x, node.y)
        nodes.append(node)

    index = {node.label: i for i, node in enumerate(nodes)}
    edges = collectEdges(G, index, config.springNaturalLength)

    width = max(1, len(roots)) * config.horizontalSpacing
    calculator = LayoutCalculator(
        nodes,
        edges,
        width,
        config.canvasHeight,
        boundaryMode=config.boundaryMode,
        seed=seed,
    )
    logger.info(
        "建立佈局：%d 個節點、%d 條邊、%d 個連通元件，畫布 %s x %s",
        len(nodes), len(edges), len(components), width, config.canvasHeight)
    return LayoutRun(
        config=config,
        nodes=nodes,
        edges=edges,
        calculator=calculator,
        roots=roots,
        grid=grid,
        components=components,
        positionFailures=failures,
    )
