"""
管線依賴圖佈局套件
Pipeline Dependency Graph Layout Package

以力導向模擬為分析管線的依賴圖計算節點座標：
- pipeline_model: 由分析與依賴資料表建立依賴圖
- config: 佈局參數讀取與驗證
- layout: 連通分析、力導向引擎、逐步更新控制器與座標編解碼
"""

from .errors import (
    PipeViewError,
    LayoutConfigError,
    PositionFormatError,
    UnknownNodeError,
    LayoutNumericError,
    LayoutStateError,
    PipelineDataError,
)
from .config import LayoutConfiguration, loadLayoutConfiguration
from .pipeline_model import PANEL_ROOT, buildPipelineGraph, listRoots

__all__ = [
    # 例外
    'PipeViewError', 'LayoutConfigError', 'PositionFormatError',
    'UnknownNodeError', 'LayoutNumericError', 'LayoutStateError',
    'PipelineDataError',

    # 設定
    'LayoutConfiguration', 'loadLayoutConfiguration',

    # 依賴圖
    'PANEL_ROOT', 'buildPipelineGraph', 'listRoots',
]
