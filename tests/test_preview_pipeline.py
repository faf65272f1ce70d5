"""Preview worker ordering and the stale-result check on ``Status``."""

from __future__ import annotations

import tempfile
import threading
import time
import unittest
from pathlib import Path

from twinpane.events import EventChannel
from twinpane.integrations.trash import Trash
from twinpane.jobs.copy_move import CopyMoveQueue
from twinpane.model.lists import Marks, Shortcuts
from twinpane.model.menu import MenuHolder
from twinpane.model.session import Session
from twinpane.model.tab import Tab
from twinpane.modes import DisplayMode, MenuMode, Navigate
from twinpane.preview.artifact import Preview
from twinpane.preview.pipeline import PreviewPipeline, PreviewRequest, PreviewResult
from twinpane.preview.renderers import RenderOptions
from twinpane.status import Status


def _fake_build(path: Path, options: RenderOptions) -> Preview:
    return Preview.text(path, [path.name])


def _wait_results(pipeline: PreviewPipeline, count: int, timeout: float = 5.0) -> list[PreviewResult]:
    results: list[PreviewResult] = []
    deadline = time.monotonic() + timeout
    while len(results) < count and time.monotonic() < deadline:
        results.extend(pipeline.drain_results())
        time.sleep(0.01)
    return results


def _result(path: Path, pane_index: int) -> PreviewResult:
    request = PreviewRequest(request_id=1, path=path, pane_index=pane_index, options=RenderOptions())
    return PreviewResult(request=request, preview=Preview.text(path, ["x"]))


class _StubPipeline:
    def __init__(self) -> None:
        self.results: list[PreviewResult] = []
        self.requests: list[tuple[Path, int]] = []

    def request(self, path: Path, pane_index: int, options: RenderOptions | None = None) -> int:
        self.requests.append((path, pane_index))
        return len(self.requests)

    def drain_results(self) -> list[PreviewResult]:
        out, self.results = self.results, []
        return out

    def close(self) -> None:
        return None


def _make_status(root: Path, pipeline, *, show_preview: bool = False) -> Status:
    menu = MenuHolder(marks=Marks(), shortcuts=Shortcuts(), trash=Trash(root=root / ".trash"))
    return Status(
        tabs=(Tab(root), Tab(root)),
        menu=menu,
        session=Session(dual_pane=True, show_preview=show_preview),
        pipeline=pipeline,
        jobs=CopyMoveQueue(EventChannel().send),
        username="test",
    )


class PreviewPipelineTests(unittest.TestCase):
    def test_results_carry_pane_index(self) -> None:
        pipeline = PreviewPipeline(build=_fake_build)
        pipeline.request(Path("/tmp/a.txt"), 0)
        results = _wait_results(pipeline, 1)
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].pane_index, 0)
        self.assertEqual(results[0].preview.lines, ("a.txt",))

    def test_pending_request_is_replaced_by_newer_one(self) -> None:
        started = threading.Event()
        release = threading.Event()

        def build(path: Path, options: RenderOptions) -> Preview:
            if path.name == "first":
                started.set()
                release.wait(5)
            return Preview.text(path, [path.name])

        pipeline = PreviewPipeline(build=build)
        pipeline.request(Path("/x/first"), 0)
        self.assertTrue(started.wait(5))
        pipeline.request(Path("/x/second"), 0)
        pipeline.request(Path("/x/third"), 0)
        release.set()

        results = _wait_results(pipeline, 2)
        self.assertEqual([result.path.name for result in results], ["first", "third"])

    def test_requests_for_both_panes_are_kept(self) -> None:
        started = threading.Event()
        release = threading.Event()

        def build(path: Path, options: RenderOptions) -> Preview:
            if path.name == "first":
                started.set()
                release.wait(5)
            return Preview.text(path, [path.name])

        pipeline = PreviewPipeline(build=build)
        pipeline.request(Path("/x/first"), 0)
        self.assertTrue(started.wait(5))
        pipeline.request(Path("/x/left"), 0)
        pipeline.request(Path("/x/right"), 1)
        release.set()

        results = _wait_results(pipeline, 3)
        self.assertEqual([(r.path.name, r.pane_index) for r in results], [("first", 0), ("left", 0), ("right", 1)])

    def test_build_failure_yields_unreadable_preview(self) -> None:
        def build(path: Path, options: RenderOptions) -> Preview:
            raise ValueError("boom")

        pipeline = PreviewPipeline(build=build)
        pipeline.request(Path("/x/broken"), 0)
        results = _wait_results(pipeline, 1)
        self.assertTrue(results[0].preview.is_empty)
        self.assertIn("boom", results[0].preview.lines[0])

    def test_closed_pipeline_ignores_requests(self) -> None:
        pipeline = PreviewPipeline(build=_fake_build)
        pipeline.close()
        self.assertEqual(pipeline.request(Path("/x/a"), 0), 0)


class StalePreviewTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        for name in ("a.txt", "b.txt"):
            (self.root / name).write_text(name, encoding="utf-8")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_result_for_previous_selection_is_discarded(self) -> None:
        pipeline = _StubPipeline()
        status = _make_status(self.root, pipeline)
        tab = status.tabs[0]
        tab.display_mode = DisplayMode.PREVIEW
        tab.previewed_path = self.root / "b.txt"

        pipeline.results = [_result(self.root / "a.txt", 0), _result(self.root / "b.txt", 0)]
        self.assertEqual(status.check_preview(), 1)
        self.assertEqual(tab.preview.path, self.root / "b.txt")

    def test_pane_not_in_preview_mode_rejects_results(self) -> None:
        status = _make_status(self.root, _StubPipeline())
        self.assertFalse(status.accepts_preview(_result(self.root / "a.txt", 0)))
        self.assertFalse(status.accepts_preview(_result(self.root / "a.txt", 5)))

    def test_mirror_pane_follows_left_selection(self) -> None:
        pipeline = _StubPipeline()
        status = _make_status(self.root, pipeline, show_preview=True)
        left = status.tabs[0]
        left.select_path(self.root / "a.txt")
        status.after_event()

        self.assertIs(status.tabs[1].display_mode, DisplayMode.PREVIEW)
        self.assertEqual(pipeline.requests[-1], (self.root / "a.txt", 1))
        self.assertTrue(status.accepts_preview(_result(self.root / "a.txt", 1)))

        left.select_path(self.root / "b.txt")
        self.assertFalse(status.accepts_preview(_result(self.root / "a.txt", 1)))

    def test_navigable_menu_accepts_any_result(self) -> None:
        status = _make_status(self.root, _StubPipeline(), show_preview=True)
        status.tabs[1].display_mode = DisplayMode.PREVIEW
        status.tabs[0].menu_mode = MenuMode(Navigate.HISTORY)
        self.assertTrue(status.accepts_preview(_result(Path("/anything"), 1)))


if __name__ == "__main__":
    unittest.main()
