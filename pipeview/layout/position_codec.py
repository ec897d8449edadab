"""
節點座標編解碼模組
Position Codec Module

手動調整後的佈局以「節點名稱 -> "x y 寬 高"」的字串字典保存；
讀回時只取前兩個數值作為初始座標。
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Tuple

from ..errors import PositionFormatError
from .graph_types import Dyad

logger = logging.getLogger(__name__)

Bounds = Tuple[int, int, int, int]


def encodeBounds(x: int, y: int, width: int, height: int) -> str:
    """將節點邊界轉為以空白分隔的四個整數"""
    return " ".join(str(int(v)) for v in (x, y, width, height))


def decodePosition(text: str) -> Dyad:
    """解析座標字串的前兩個整數。

    Args:
        text: 例如 ``"120 40 90 25"`` 的字串。

    Returns:
        Dyad: 解析出的 (x, y)。

    Raises:
        PositionFormatError: 少於兩個數值或數值不是整數。
    """
    if not isinstance(text, str):
        raise PositionFormatError(str(text), f"座標必須為字串：{text!r}")
    tokens = text.split()
    if len(tokens) < 2:
        raise PositionFormatError(
            text, f"座標字串 {text!r} 少於兩個數值")
    try:
        return Dyad(int(tokens[0]), int(tokens[1]))
    except ValueError as e:
        raise PositionFormatError(
            text, f"座標字串 {text!r} 含有非整數值") from e


def encodePositions(bounds: Mapping[str, Bounds]) -> Dict[str, str]:
    """將 {節點: (x, y, 寬, 高)} 轉為可保存的字串字典"""
    return {label: encodeBounds(*b) for label, b in bounds.items()}


def decodePositions(
    properties: Mapping[str, str],
) -> Tuple[Dict[str, Dyad], Dict[str, str]]:
    """逐筆解析保存的座標。

    格式錯誤的項目不會中斷整體流程，而是記錄在第二個回傳值中，
    由呼叫者改用計算出的網格座標。

    Args:
        properties: 節點名稱對應座標字串。

    Returns:
        Tuple[Dict[str, Dyad], Dict[str, str]]:
            成功解析的座標，以及解析失敗的項目與錯誤訊息。
    """
    positions: Dict[str, Dyad] = {}
    failures: Dict[str, str] = {}
    for label, text in properties.items():
        try:
            positions[label] = decodePosition(text)
        except PositionFormatError as e:
            logger.warning("節點 %s 的座標無法解析，改用網格座標：%s", label, e)
            failures[label] = str(e)
    return positions, failures


def readPositionFile(path: str | Path) -> Dict[str, str]:
    """讀取 JSON 格式的座標檔"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise PositionFormatError(str(path), f"座標檔 {path} 必須為物件")
    return {str(k): v for k, v in data.items()}


def writePositionFile(path: str | Path, properties: Mapping[str, str]) -> None:
    """將座標字典寫入 JSON 檔"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(dict(properties), f, indent=2, ensure_ascii=False)
