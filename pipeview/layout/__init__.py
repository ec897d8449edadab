"""
佈局套件
Layout Package

- connectivity: 連通元件與初始網格配置
- force_layout: 力導向模擬引擎
- graph_updater: 逐批推進模擬的控制器
- animated_layout: 以 QTimer 驅動控制器的動畫器
- position_codec: 保存座標的編解碼
- layout_run: 組裝一次佈局執行
"""

from .graph_types import Node, Edge, Dyad
from .connectivity import (
    findConnectedComponents,
    sortRootsByConnectivity,
    positionElements,
    collectAncestors,
)
from .force_layout import LayoutCalculator
from .graph_updater import GraphUpdater
from .position_codec import encodeBounds, decodePosition, encodePositions, decodePositions
from .layout_run import LayoutRun, buildLayoutRun

__all__ = [
    # 資料結構
    'Node', 'Edge', 'Dyad',

    # 連通分析
    'findConnectedComponents', 'sortRootsByConnectivity',
    'positionElements', 'collectAncestors',

    # 模擬
    'LayoutCalculator', 'GraphUpdater',

    # 座標保存
    'encodeBounds', 'decodePosition', 'encodePositions', 'decodePositions',

    # 組裝
    'LayoutRun', 'buildLayoutRun',
]
