import threading
import time
from pathlib import Path

import pytest

from hexaudio.domain.entities.processing import ProcessingResult
from hexaudio.domain.errors import TranscodeFailed, ValidationFailed
from hexaudio.services.pipeline.batch import BatchOrchestrator
from hexaudio.services.schemas.options import ProcessingOptions


class _Tracker:
    """process_fn double: tracks peak concurrency and fails on chosen names."""

    def __init__(self, fail=(), delay=0.05):
        self.fail = set(fail)
        self.delay = delay
        self.active = 0
        self.peak = 0
        self.seen = []
        self._lock = threading.Lock()

    def __call__(self, path: Path, options: ProcessingOptions) -> ProcessingResult:
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
            self.seen.append(path.name)
        try:
            time.sleep(self.delay)
            if path.name in self.fail:
                raise TranscodeFailed(f"No audio stream in {path.name}")
            return ProcessingResult(id=path.stem, source_path=path, processing_time=self.delay)
        finally:
            with self._lock:
                self.active -= 1


def test_three_files_at_concurrency_two_run_in_two_waves():
    fn = _Tracker()
    rep = BatchOrchestrator(fn).run(["a.wav", "b.wav", "c.wav"], ProcessingOptions(), concurrency=2)

    assert rep.wave_sizes == [2, 1]
    assert fn.peak <= 2
    assert rep.total == 3 and rep.succeeded == 3 and rep.failed == 0
    assert [i.source for i in rep.items] == ["a.wav", "b.wav", "c.wav"]
    assert [r.id for r in rep.results] == ["a", "b", "c"]


@pytest.mark.parametrize("bad_index", [0, 2, 4])
def test_one_failure_never_cascades(bad_index):
    names = [f"f{i}.wav" for i in range(5)]
    fn = _Tracker(fail={names[bad_index]}, delay=0.01)

    rep = BatchOrchestrator(fn, default_concurrency=2).run(names, ProcessingOptions())

    assert rep.total == 5
    assert rep.failed == 1
    assert sorted(fn.seen) == names
    bad = rep.items[bad_index]
    assert bad.success is False
    assert bad.error_type == "TranscodeFailed"
    assert "No audio stream" in bad.error
    assert all(i.success for j, i in enumerate(rep.items) if j != bad_index)
    assert rep.error_details == [(names[bad_index], bad.error)]


def test_summary_returned_even_if_everything_fails():
    names = ["x.mp4", "y.mp4"]
    rep = BatchOrchestrator(_Tracker(fail=set(names), delay=0)).run(names, ProcessingOptions())
    assert rep.summary()["total"] == 2
    assert rep.summary()["failed"] == 2
    assert rep.results == []
    assert rep.finished_at is not None


def test_default_concurrency_and_empty_input():
    orch = BatchOrchestrator(_Tracker(delay=0), default_concurrency=3)
    rep = orch.run([f"{i}.wav" for i in range(7)], ProcessingOptions())
    assert rep.wave_sizes == [3, 3, 1]

    empty = orch.run([], ProcessingOptions())
    assert empty.total == 0 and empty.wave_sizes == []


@pytest.mark.parametrize("bad", [0, -2])
def test_concurrency_must_be_positive(bad):
    with pytest.raises(ValidationFailed):
        BatchOrchestrator(_Tracker()).run(["a.wav"], ProcessingOptions(), concurrency=bad)
    with pytest.raises(ValidationFailed):
        BatchOrchestrator(_Tracker(), default_concurrency=bad)
