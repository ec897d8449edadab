"""逐步推進力導向模擬並回報節點座標的控制器"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict, Tuple

from ..errors import LayoutNumericError, LayoutStateError
from .force_layout import LayoutCalculator

logger = logging.getLogger(__name__)

PositionMap = Dict[str, Tuple[int, int]]


class GraphUpdater:
    """以批次方式推進 LayoutCalculator。

    每次 ``advance()`` 執行 ``showInterval`` 次迭代，將節點座標轉為整數
    像素後交給 ``publish`` 回呼，並扣除剩餘迭代數；剩餘數小於 0 時
    視為完成。此類別不依賴任何 GUI 工具組，可由計時器、事件迴圈或
    測試直接驅動。
    """

    def __init__(
        self,
        calculator: LayoutCalculator,
        publish: Callable[[PositionMap], None],
        *,
        iterates: int,
        showInterval: int = 1,
        movementLimit: float,
        gravity: float,
        repulsionMultiplier: float,
    ):
        if showInterval <= 0:
            raise ValueError("showInterval 必須大於 0")
        self.calculator = calculator
        self.publish = publish
        self.showInterval = showInterval
        self.movementLimit = movementLimit
        self.gravity = gravity
        self.repulsionMultiplier = repulsionMultiplier
        self._remaining = iterates
        self._batches = 0
        self._stopped = False
        self._lastPositions: PositionMap = {}

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def lastPositions(self) -> PositionMap:
        """最近一次回報的座標"""
        return self._lastPositions

    @property
    def batches(self) -> int:
        """已完成的批次數"""
        return self._batches

    @property
    def isFinished(self) -> bool:
        return self._stopped or self._remaining < 0

    def advance(self) -> bool:
        """執行一個批次並回報座標。

        Returns:
            bool: 佈局是否已完成。

        Raises:
            LayoutStateError: 佈局已完成或已停止後仍被呼叫。
            LayoutNumericError: 批次結束後有節點座標不是有限值。
        """
        if self.isFinished:
            raise LayoutStateError("佈局已結束，無法繼續推進")

        self.calculator.layout(
            self.showInterval,
            self.movementLimit,
            self.gravity,
            self.repulsionMultiplier,
        )

        positions: PositionMap = {}
        for node in self.calculator.getNodes():
            if not (math.isfinite(node.x) and math.isfinite(node.y)):
                self._stopped = True
                raise LayoutNumericError(node.label, node.x, node.y)
            positions[node.label] = (int(node.x), int(node.y))
        self._lastPositions = positions
        self.publish(positions)

        self._batches += 1
        self._remaining -= self.showInterval
        if self._remaining < 0:
            logger.info("佈局完成，共 %d 個批次", self._batches)
            for node in self.calculator.getNodes():
                logger.debug("%s %s-%s", node.label, node.x, node.y)
        return self.isFinished

    def runToCompletion(self) -> int:
        """同步執行到結束，回傳執行的批次數"""
        while not self.isFinished:
            self.advance()
        return self._batches

    def stop(self) -> None:
        """停止後續批次，已計算的座標保持不變"""
        self._stopped = True
