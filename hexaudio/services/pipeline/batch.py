# hexaudio/services/pipeline/batch.py
from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from hexaudio.common.iter import chunked
from hexaudio.common.logging import get_logger
from hexaudio.domain.dataclasses.reports import BatchItemResult, BatchReport
from hexaudio.domain.entities.processing import ProcessingResult
from hexaudio.domain.errors import ValidationFailed
from hexaudio.services.schemas.options import ProcessingOptions

logger = get_logger(__name__)

ProcessFn = Callable[[Path, ProcessingOptions], ProcessingResult]


class BatchOrchestrator:
    """
    Runs `process_fn` over many files in fixed-size waves.

    Wave k+1 starts only after every file of wave k finished, so one slow
    file holds back the next wave. Results keep input order.
    """

    def __init__(self, process_fn: ProcessFn, default_concurrency: int = 3):
        if default_concurrency < 1:
            raise ValidationFailed(f"concurrency must be >= 1, got {default_concurrency}")
        self.process_fn = process_fn
        self.default_concurrency = default_concurrency

    def run(
        self,
        paths: Sequence[Path | str],
        options: ProcessingOptions,
        concurrency: Optional[int] = None,
    ) -> BatchReport:
        n = self.default_concurrency if concurrency is None else int(concurrency)
        if n < 1:
            raise ValidationFailed(f"concurrency must be >= 1, got {concurrency}")

        rep = BatchReport()
        rep.start()
        items = list(paths)
        logger.info("Batch started: %d files, concurrency=%d", len(items), n)

        for wave_no, wave in enumerate(chunked(items, n), start=1):
            rep.wave_sizes.append(len(wave))
            with ThreadPoolExecutor(max_workers=len(wave), thread_name_prefix=f"batch-w{wave_no}") as pool:
                futures = [pool.submit(self._run_one, p, options) for p in wave]
                # collect in submission order so results follow input order
                results: List[BatchItemResult] = [f.result() for f in futures]
            for item in results:
                rep.record(item)
            logger.debug("Batch wave %d done (%d files)", wave_no, len(wave))

        rep.stop()
        logger.info(
            "Batch finished: %d succeeded, %d failed, %.2fs",
            rep.succeeded, rep.failed, rep.elapsed_sec or 0.0,
        )
        return rep

    def _run_one(self, path: Path | str, options: ProcessingOptions) -> BatchItemResult:
        t0 = time.perf_counter()
        try:
            result = self.process_fn(Path(path), options)
        except Exception as e:  # per-file boundary: siblings must keep running
            logger.error("Batch item failed: %s: %s", path, e)
            return BatchItemResult(
                source=str(path),
                success=False,
                error=str(e),
                error_type=type(e).__name__,
                processing_time=time.perf_counter() - t0,
            )
        return BatchItemResult(
            source=str(path),
            success=True,
            result=result,
            processing_time=result.processing_time or (time.perf_counter() - t0),
        )
