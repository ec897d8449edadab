#!/usr/bin/env python3
"""
動畫布局系統 - 以計時器逐步推進力導向佈局，讓畫面能顯示中間狀態
"""

from typing import Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from ..errors import PipeViewError
from .graph_updater import GraphUpdater


class LayoutAnimator(QObject):
    """布局動畫控制器"""

    # 信號
    animationStarted = pyqtSignal()
    animationFinished = pyqtSignal()
    animationFailed = pyqtSignal(str)
    positionsUpdated = pyqtSignal(object)  # {label: (x, y)}

    def __init__(self, interval: int = 10, parent: Optional[QObject] = None):
        super().__init__(parent)

        self.timer = QTimer(self)
        self.timer.timeout.connect(self._update_animation)
        self.timer.setInterval(max(0, interval))

        # 動畫狀態
        self.is_animating = False
        self.updater: Optional[GraphUpdater] = None

    def start(self, updater: GraphUpdater) -> None:
        """
        開始逐步佈局

        Args:
            updater: 本次佈局的控制器，其 publish 回呼會在每個批次被呼叫
        """
        # 新的佈局會取代尚未結束的舊佈局
        if self.is_animating:
            self.stop_animation()

        self.updater = updater
        self.is_animating = True
        self.timer.start()
        self.animationStarted.emit()

    def _update_animation(self):
        """每次計時器觸發執行一個批次"""
        if self.updater is None or not self.is_animating:
            self.timer.stop()
            return

        # 先停止計時器，避免批次執行期間重入
        self.timer.stop()
        try:
            done = self.updater.advance()
        except PipeViewError as e:
            self.is_animating = False
            self.animationFailed.emit(str(e))
            return

        self.positionsUpdated.emit(dict(self.updater.lastPositions))

        if done:
            self.is_animating = False
            self.animationFinished.emit()
        else:
            self.timer.start()

    def stop_animation(self):
        """停止動畫，已計算的座標保持不變"""
        self.timer.stop()
        self.is_animating = False
        if self.updater is not None and not self.updater.isFinished:
            self.updater.stop()

    def set_interval(self, interval: int):
        """設定計時器間隔（毫秒）"""
        self.timer.setInterval(max(0, interval))
