"""佈局流程使用的例外類別"""

from __future__ import annotations


class PipeViewError(Exception):
    """所有佈局相關錯誤的基類"""


class LayoutConfigError(PipeViewError, ValueError):
    """佈局參數缺漏或格式錯誤，佈局不得開始"""

    def __init__(self, key: str, message: str):
        super().__init__(message)
        self.key = key


class PositionFormatError(PipeViewError, ValueError):
    """儲存的節點座標字串無法解析"""

    def __init__(self, text: str, message: str | None = None):
        super().__init__(message or f"無法解析座標字串：{text!r}")
        self.text = text


class UnknownNodeError(PipeViewError, KeyError):
    """邊線端點不在節點集合中，代表依賴圖已損毀"""

    def __init__(self, label: str, message: str | None = None):
        super().__init__(message or f"找不到節點：{label}")
        self.label = label

    def __str__(self) -> str:
        # KeyError 預設會在訊息外加上引號
        return str(self.args[0])


class LayoutNumericError(PipeViewError, ArithmeticError):
    """模擬產生非有限值座標"""

    def __init__(self, label: str, x: float, y: float):
        super().__init__(f"節點 {label} 的座標不是有限值：({x}, {y})")
        self.label = label


class LayoutStateError(PipeViewError, RuntimeError):
    """在錯誤的狀態下操作佈局控制器"""


class PipelineDataError(PipeViewError, ValueError):
    """分析或依賴資料表格式錯誤，無法建立依賴圖"""
