"""
佈局參數模組
Layout Configuration Module

佈局參數來自 config.json 的 ``layout_params`` 區段，若另有歷史檔
（上次在設定對話框輸入的值）則以歷史值優先。所有參數在一次佈局
執行期間不可變。
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Mapping, Optional

from .errors import LayoutConfigError

logger = logging.getLogger(__name__)

SECTION = "layout_params"

BOUNDARY_REFLECT_DELTA = "reflect_delta"
BOUNDARY_CLAMP = "clamp"
BOUNDARY_MODES = (BOUNDARY_REFLECT_DELTA, BOUNDARY_CLAMP)

# 設定檔鍵值 -> 資料類別欄位
_REQUIRED_INT_KEYS = {
    "iterates": "iterates",
    "horizontal_spacing": "horizontalSpacing",
    "vertical_spacing": "verticalSpacing",
    "spring_natural_length": "springNaturalLength",
    "repulsion_multiplier": "repulsionMultiplier",
    "movement_limit": "movementLimit",
    "gravity": "gravity",
}
_OPTIONAL_INT_KEYS = {
    "canvas_height": "canvasHeight",
    "show_interval": "showInterval",
    "tick_interval": "tickInterval",
}


def _isBlank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _parseInt(key: str, value: Any) -> int:
    if _isBlank(value):
        raise LayoutConfigError(key, f"設定檔必須提供 {key} 的值")
    if isinstance(value, bool):
        raise LayoutConfigError(key, f"佈局參數 {key} 為 {value}，不是有效的整數")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise LayoutConfigError(
            key, f"佈局參數 {key} 為 {value}，不是有效的整數") from e


def _parseBool(key: str, value: Any) -> bool:
    if _isBlank(value):
        raise LayoutConfigError(key, f"設定檔必須提供 {key} 的值")
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text not in ("true", "false"):
        raise LayoutConfigError(key, f"{key} 的值 {value} 無法解析為布林值")
    return text == "true"


@dataclass(frozen=True)
class LayoutConfiguration:
    """一次佈局執行所需的全部參數"""

    iterates: int
    horizontalSpacing: int
    verticalSpacing: int
    springNaturalLength: int
    repulsionMultiplier: int
    movementLimit: int
    gravity: int
    fixRoots: bool
    canvasHeight: int = 1000
    showInterval: int = 1
    tickInterval: int = 10
    boundaryMode: str = BOUNDARY_REFLECT_DELTA

    @classmethod
    def fromMapping(cls, values: Mapping[str, Any]) -> "LayoutConfiguration":
        """由設定檔字典建立並驗證參數。

        Args:
            values: ``layout_params`` 區段內容，值可為字串或數字。

        Returns:
            LayoutConfiguration: 驗證後的參數。

        Raises:
            LayoutConfigError: 缺少必要參數或格式錯誤。
        """
        kwargs: dict[str, Any] = {}
        for key, field in _REQUIRED_INT_KEYS.items():
            kwargs[field] = _parseInt(key, values.get(key))
        kwargs["fixRoots"] = _parseBool("fix_roots", values.get("fix_roots"))
        for key, field in _OPTIONAL_INT_KEYS.items():
            if not _isBlank(values.get(key)):
                kwargs[field] = _parseInt(key, values[key])

        mode = values.get("boundary_mode")
        if not _isBlank(mode):
            mode = str(mode).strip().lower()
            if mode not in BOUNDARY_MODES:
                raise LayoutConfigError(
                    "boundary_mode",
                    f"boundary_mode 必須為 {' 或 '.join(BOUNDARY_MODES)}，目前為 {mode}")
            kwargs["boundaryMode"] = mode

        config = cls(**kwargs)
        config.validate()
        return config

    def validate(self) -> None:
        """檢查數值範圍"""
        if self.iterates <= 0:
            raise LayoutConfigError("iterates", "iterates 必須大於 0")
        if self.showInterval <= 0:
            raise LayoutConfigError("show_interval", "show_interval 必須大於 0")
        if self.tickInterval < 0:
            raise LayoutConfigError("tick_interval", "tick_interval 不可為負數")
        if self.movementLimit < 0:
            raise LayoutConfigError("movement_limit", "movement_limit 不可為負數")
        if self.horizontalSpacing <= 0 or self.verticalSpacing <= 0:
            raise LayoutConfigError(
                "horizontal_spacing", "節點間距必須大於 0")
        if self.canvasHeight <= 0:
            raise LayoutConfigError("canvas_height", "canvas_height 必須大於 0")

    def toMapping(self) -> dict[str, Any]:
        """轉回設定檔格式的字典"""
        fields = asdict(self)
        result: dict[str, Any] = {}
        for key, field in {**_REQUIRED_INT_KEYS, **_OPTIONAL_INT_KEYS}.items():
            result[key] = fields[field]
        result["fix_roots"] = self.fixRoots
        result["boundary_mode"] = self.boundaryMode
        return result


def _readSection(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    section = data.get(SECTION, {})
    if not isinstance(section, dict):
        raise LayoutConfigError(SECTION, f"{path} 的 {SECTION} 區段必須為物件")
    return section


def loadLayoutConfiguration(
    configPath: str | Path = "config.json",
    historyPath: Optional[str | Path] = None,
) -> LayoutConfiguration:
    """讀取設定檔與歷史檔並建立佈局參數。

    歷史檔中的值優先於設定檔；歷史檔不存在時僅使用設定檔。

    Args:
        configPath: 設定檔路徑。
        historyPath: 歷史檔路徑，可省略。

    Returns:
        LayoutConfiguration: 驗證後的佈局參數。
    """
    values = _readSection(configPath)
    if historyPath is not None and Path(historyPath).exists():
        try:
            history = _readSection(historyPath)
        except json.JSONDecodeError as e:
            logger.warning("歷史檔 %s 格式錯誤，改用設定檔：%s", historyPath, e)
        else:
            values = {**values, **{k: v for k, v in history.items() if not _isBlank(v)}}
    return LayoutConfiguration.fromMapping(values)


def saveLayoutHistory(path: str | Path, config: LayoutConfiguration) -> None:
    """將目前的佈局參數寫入歷史檔，保留檔案中的其他區段"""
    data: dict[str, Any] = {}
    if Path(path).exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("覆寫格式錯誤的歷史檔 %s：%s", path, e)
            data = {}
    data[SECTION] = config.toMapping()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
