"""佈局引擎使用的節點、邊線與網格座標資料結構"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


@dataclass
class Node:
    """單一佈局節點的模擬狀態。

    Attributes:
        label: 節點名稱，在同一次佈局中唯一。
        x: 目前 x 座標。
        y: 目前 y 座標。
        dx: 累積的 x 位移，每次迭代結束時減半。
        dy: 累積的 y 位移，每次迭代結束時減半。
        fixed: 為 True 時引擎不會移動此節點。
    """

    label: str
    x: float = 0.0
    y: float = 0.0
    dx: float = 0.0
    dy: float = 0.0
    fixed: bool = False


@dataclass(frozen=True)
class Edge:
    """彈簧邊線，``source``/``target`` 為節點索引"""

    source: int
    target: int
    restLength: float


class Dyad(NamedTuple):
    """初始配置用的離散網格座標 (column, row)"""

    x: int
    y: int
