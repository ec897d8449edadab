import argparse
import logging
from pathlib import Path

from pipeview.config import loadLayoutConfiguration, saveLayoutHistory
from pipeview.errors import PipeViewError
from pipeview.layout.layout_run import buildLayoutRun
from pipeview.layout.position_codec import readPositionFile, writePositionFile
from pipeview.pipeline_model import (
    buildPipelineGraph,
    readAnalyses,
    readDependencies,
)


def parse_arguments(argv=None):
    """解析命令列參數"""
    parser = argparse.ArgumentParser(description="管線依賴圖力導向佈局工具")
    parser.add_argument("--analyses", required=True, help="分析清單 CSV 路徑")
    parser.add_argument("--dependencies", help="依賴關係 CSV 路徑")
    parser.add_argument("--config", default="config.json", help="設定檔路徑")
    parser.add_argument(
        "--history", metavar="PATH", help="歷史檔路徑，其中的佈局參數優先於設定檔")
    parser.add_argument(
        "--positions", metavar="PATH", help="已保存的節點座標 (JSON)")
    parser.add_argument(
        "--output", default="graph_layout.json", help="輸出座標檔路徑")
    parser.add_argument(
        "--seed", type=int, default=None, help="重疊節點擾動的亂數種子")
    parser.add_argument(
        "--save-history", action="store_true", help="將本次佈局參數寫入歷史檔")
    parser.add_argument(
        "--verbose", action="store_true", help="輸出詳細的除錯訊息")
    return parser.parse_args(argv)


def load_data(args):
    """載入依賴圖、佈局參數與保存的座標"""
    analyses = readAnalyses(args.analyses)
    dependencies = readDependencies(args.dependencies) if args.dependencies else None
    graph = buildPipelineGraph(analyses, dependencies)
    config = loadLayoutConfiguration(args.config, args.history)
    saved = readPositionFile(args.positions) if args.positions else None
    return graph, config, saved


def run_layout(args, graph, config, saved):
    """執行佈局並輸出座標檔"""
    run = buildLayoutRun(graph, config, saved, seed=args.seed)
    for label, message in run.positionFailures.items():
        print(f"警告：{label} 的保存座標無效，改用網格座標（{message}）")

    updater = run.createUpdater(lambda positions: None)
    print(f"開始佈局：{len(run.nodes)} 個節點，{len(run.edges)} 條邊")
    batches = updater.runToCompletion()

    out_path = Path(args.output)
    writePositionFile(out_path, run.savePositions())
    print(f"已執行 {batches} 個批次，輸出 {out_path.name}")

    if args.save_history and args.history:
        saveLayoutHistory(args.history, config)
        print(f"已更新歷史檔 {args.history}")
    return run


def main(argv=None):
    """主執行流程"""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        graph, config, saved = load_data(args)
        run_layout(args, graph, config, saved)
    except (PipeViewError, ValueError, OSError) as e:
        # 檔案缺漏、JSON 或 CSV 格式錯誤同樣以訊息回報
        print(f"佈局失敗：{e}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
