"""
力導向佈局引擎
Force-Directed Layout Engine

每次迭代依序計算：
1. 邊線彈簧吸引力（朝自然長度收縮或伸展）
2. 重力（每個節點的 dy 減去固定值）
3. 兩兩節點排斥力（正規化後乘上排斥倍率）
4. 套用位移、限制單步移動量並處理畫布邊界，最後位移減半作為阻尼

引擎本身不判斷收斂，只執行呼叫者指定的迭代次數。
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from ..config import BOUNDARY_CLAMP, BOUNDARY_MODES, BOUNDARY_REFLECT_DELTA
from ..errors import UnknownNodeError
from .graph_types import Edge, Node

logger = logging.getLogger(__name__)

# 邊線長度低於此值時不計算彈簧力，避免除以零
EPSILON = 1e-9


class LayoutCalculator:
    """對節點與邊線執行力導向鬆弛"""

    def __init__(
        self,
        nodes: Sequence[Node],
        edges: Sequence[Edge],
        width: float,
        height: float,
        *,
        boundaryMode: str = BOUNDARY_REFLECT_DELTA,
        seed: Optional[int] = None,
    ):
        """
        Args:
            nodes: 節點列表，模擬時就地更新。
            edges: 邊線列表，端點為 ``nodes`` 的索引。
            width: 畫布寬度，亦用於排斥力的截止距離。
            height: 畫布高度。
            boundaryMode: 節點越過左/上邊界時的處理方式。
            seed: 重疊節點隨機擾動所用的亂數種子。
        """
        if boundaryMode not in BOUNDARY_MODES:
            raise ValueError(f"未知的邊界處理方式：{boundaryMode}")
        self.nodes: List[Node] = list(nodes)
        self.edges: List[Edge] = list(edges)
        self.width = width
        self.height = height
        self.boundaryMode = boundaryMode
        self.rng = np.random.default_rng(seed)

        count = len(self.nodes)
        for edge in self.edges:
            for index in (edge.source, edge.target):
                if not 0 <= index < count:
                    raise UnknownNodeError(
                        str(index), f"邊線端點索引 {index} 超出節點範圍 0..{count - 1}")

        self._sources = np.array([e.source for e in self.edges], dtype=np.intp)
        self._targets = np.array([e.target for e in self.edges], dtype=np.intp)
        self._restLengths = np.array(
            [e.restLength for e in self.edges], dtype=float)
        self._fixed = np.array([n.fixed for n in self.nodes], dtype=bool)

    def layout(
        self,
        iterates: int,
        movementLimit: float,
        gravity: float,
        repulsionMultiplier: float,
    ) -> None:
        """執行指定次數的鬆弛迭代。

        Args:
            iterates: 迭代次數。
            movementLimit: 每次迭代 x、y 各自的最大移動量。
            gravity: 每次迭代自 dy 扣除的值，0 表示停用。
            repulsionMultiplier: 排斥力倍率。
        """
        if not self.nodes or iterates <= 0:
            return

        x = np.array([n.x for n in self.nodes], dtype=float)
        y = np.array([n.y for n in self.nodes], dtype=float)
        dx = np.array([n.dx for n in self.nodes], dtype=float)
        dy = np.array([n.dy for n in self.nodes], dtype=float)

        for _ in range(iterates):
            self._attract(x, y, dx, dy)
            if gravity != 0:
                dy -= gravity
            self._repulse(x, y, dx, dy, repulsionMultiplier)
            self._move(x, y, dx, dy, movementLimit)

        for i, node in enumerate(self.nodes):
            node.x = float(x[i])
            node.y = float(y[i])
            node.dx = float(dx[i])
            node.dy = float(dy[i])

    def _attract(self, x, y, dx, dy) -> None:
        if not self.edges:
            return
        src, dst = self._sources, self._targets
        vx = x[dst] - x[src]
        vy = y[dst] - y[src]
        length = np.hypot(vx, vy)
        separated = length >= EPSILON
        f = np.zeros_like(length)
        f[separated] = (
            (self._restLengths[separated] - length[separated])
            / (length[separated] * 3)
        )
        fx = f * vx
        fy = f * vy
        np.add.at(dx, dst, fx)
        np.add.at(dy, dst, fy)
        np.add.at(dx, src, -fx)
        np.add.at(dy, src, -fy)

    def _repulse(self, x, y, dx, dy, repulsionMultiplier: float) -> None:
        count = len(x)
        if count < 2:
            return
        # vx[i, j] = x[i] - x[j]
        vx = x[:, None] - x[None, :]
        vy = y[:, None] - y[None, :]
        lengthSq = vx * vx + vy * vy
        offDiagonal = ~np.eye(count, dtype=bool)

        coincident = offDiagonal & (lengthSq == 0)
        inRange = offDiagonal & (lengthSq > 0) & (lengthSq < self.width * self.height)

        sx = np.zeros(count)
        sy = np.zeros(count)
        np.divide(vx, lengthSq, out=vx, where=inRange)
        np.divide(vy, lengthSq, out=vy, where=inRange)
        sx += np.where(inRange, vx, 0.0).sum(axis=1)
        sy += np.where(inRange, vy, 0.0).sum(axis=1)

        jitterCounts = coincident.sum(axis=1)
        for i in np.flatnonzero(jitterCounts):
            # 完全重疊時加入隨機擾動讓節點分開
            jitter = self.rng.random((int(jitterCounts[i]), 2)).sum(axis=0)
            sx[i] += jitter[0]
            sy[i] += jitter[1]

        half = np.sqrt(sx * sx + sy * sy) / 2
        active = half > 0
        dx[active] += repulsionMultiplier * sx[active] / half[active]
        dy[active] += repulsionMultiplier * sy[active] / half[active]

    def _move(self, x, y, dx, dy, movementLimit: float) -> None:
        free = ~self._fixed
        x[free] += np.clip(dx[free], -movementLimit, movementLimit)
        y[free] += np.clip(dy[free], -movementLimit, movementLimit)
        self._bound(x, dx, free, self.width)
        self._bound(y, dy, free, self.height)
        dx /= 2
        dy /= 2

    def _bound(self, position, delta, free, limit: float) -> None:
        """處理越過畫布邊界的自由節點。

        ``reflect_delta`` 以 ``|delta|`` 作為新座標且不再檢查上界，
        位移量大於畫布時節點會落在畫布之外；只有 ``clamp`` 保證
        座標留在 ``[0, limit]`` 之內。
        """
        under = free & (position < 0)
        if self.boundaryMode == BOUNDARY_CLAMP:
            position[under] = 0.0
        else:
            # 以位移量本身決定新座標
            position[under] = np.abs(delta[under])
        over = free & ~under & (position > limit)
        position[over] = limit

    def getNodes(self) -> List[Node]:
        """回傳模擬中的節點列表"""
        return self.nodes
