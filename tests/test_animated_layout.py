import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))  # noqa: E402

from PyQt5.QtCore import QCoreApplication  # noqa: E402

from pipeview.layout.animated_layout import LayoutAnimator  # noqa: E402
from pipeview.layout.force_layout import LayoutCalculator  # noqa: E402
from pipeview.layout.graph_types import Edge, Node  # noqa: E402
from pipeview.layout.graph_updater import GraphUpdater  # noqa: E402

app = QCoreApplication.instance() or QCoreApplication(sys.argv)


def build_updater(iterates=2, nodes=None):
    nodes = nodes or [Node("a", 100.0, 100.0), Node("b", 250.0, 200.0)]
    calc = LayoutCalculator(nodes, [Edge(0, 1, 100.0)], 1000, 1000)
    published = []
    updater = GraphUpdater(
        calc, published.append, iterates=iterates,
        movementLimit=20, gravity=0, repulsionMultiplier=5)
    return updater, published


def connect_signals(animator):
    events = {"started": 0, "finished": 0, "failed": [], "positions": []}
    animator.animationStarted.connect(
        lambda: events.__setitem__("started", events["started"] + 1))
    animator.animationFinished.connect(
        lambda: events.__setitem__("finished", events["finished"] + 1))
    animator.animationFailed.connect(events["failed"].append)
    animator.positionsUpdated.connect(events["positions"].append)
    return events


def test_timer_ticks_drive_updater_to_completion():
    """每次計時器觸發推進一個批次，完成後停止計時器"""
    animator = LayoutAnimator(interval=10)
    events = connect_signals(animator)
    updater, published = build_updater(iterates=2)

    animator.start(updater)
    assert animator.is_animating
    assert animator.timer.isActive()
    assert events["started"] == 1

    ticks = 0
    while animator.is_animating:
        animator._update_animation()
        ticks += 1

    assert ticks == 3
    assert not animator.timer.isActive()
    assert events["finished"] == 1
    assert events["positions"] == published
    assert updater.isFinished


def test_stop_animation_cancels_run():
    animator = LayoutAnimator()
    updater, published = build_updater(iterates=50)
    animator.start(updater)
    animator._update_animation()
    animator.stop_animation()

    assert not animator.is_animating
    assert not animator.timer.isActive()
    assert updater.isFinished
    assert len(published) == 1


def test_new_run_replaces_running_one():
    animator = LayoutAnimator()
    first, _ = build_updater(iterates=50)
    second, _ = build_updater(iterates=50)
    animator.start(first)
    animator.start(second)
    assert first.isFinished
    assert animator.updater is second
    assert animator.is_animating


def test_numeric_failure_is_reported():
    animator = LayoutAnimator()
    events = connect_signals(animator)
    nodes = [Node("bad", float("inf"), 0.0), Node("b", 10.0, 10.0)]
    updater, _ = build_updater(nodes=nodes)
    animator.start(updater)
    animator._update_animation()

    assert not animator.is_animating
    assert not animator.timer.isActive()
    assert len(events["failed"]) == 1
    assert "bad" in events["failed"][0]
    assert events["finished"] == 0
