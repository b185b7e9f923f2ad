# hexaudio/services/analysis/quality_analyzer.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from hexaudio.common.logging import get_logger
from hexaudio.common.settings import AnalysisConfig, Settings, get_settings
from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.errors import AnalysisFailed, ValidationFailed
from hexaudio.domain.policies.quality_scorer import analysis_failed, assess
from hexaudio.domain.ports.analyzer import QualityAnalyzerPort
from hexaudio.domain.ports.probe import MediaProbePort
from hexaudio.services.analysis import parsers
from hexaudio.services.probe.ffprobe_adapter import FFprobeAdapter
from hexaudio.services.transcode.ffmpeg_runner import FFmpegError, FFmpegRun, run_ffmpeg

logger = get_logger(__name__)

Metrics = Dict[str, object]


class QualityAnalyzer(QualityAnalyzerPort):
    """
    Measures an audio file with three independent ffmpeg passes:

    - levels:   astats                          -> peak, RMS, dynamic range, SNR, clipping
    - spectral: aspectralstats + astats          -> centroid, rolloff, zero-crossing rate
    - silence:  silencedetect                    -> silence ratio

    The passes run on a small thread pool. A pass that fails is logged and
    contributes nothing; only when every pass comes back empty is the result
    the zero-score "analysis failed" assessment.
    """

    def __init__(
        self,
        ffmpeg_bin: Optional[str] = None,
        timeout_sec: Optional[int] = None,
        *,
        prober: Optional[MediaProbePort] = None,
        settings: Optional[Settings] = None,
    ):
        cfg = settings or get_settings()
        self.ffmpeg_bin = ffmpeg_bin or cfg.ffmpeg_bin
        self.timeout_sec = timeout_sec if timeout_sec is not None else cfg.ffmpeg_timeout_sec
        self.workers = cfg.concurrency.analysis_workers
        self.acfg: AnalysisConfig = cfg.analysis
        self.prober: MediaProbePort = prober or FFprobeAdapter(settings=cfg)

    # ---- Port API -------------------------------------------------------------
    def analyze(self, audio_path: Path) -> AudioQualityInfo:
        audio_path = Path(audio_path)
        if not audio_path.is_file():
            raise ValidationFailed(f"Audio file not found: {audio_path}")

        duration = self.prober.probe(audio_path).duration or None
        passes: List[Tuple[str, Callable[[], Metrics]]] = [
            ("levels", lambda: self.measure_levels(audio_path)),
            ("spectral", lambda: self.measure_spectral(audio_path)),
            ("silence", lambda: self.measure_silence(audio_path, duration)),
        ]

        logger.info("Quality analysis started: %s", audio_path.name)
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="analysis") as pool:
            futures = [pool.submit(self._guarded, name, fn, audio_path) for name, fn in passes]
            metrics: Metrics = {}
            for fut in futures:
                metrics.update(fut.result())

        if not metrics:
            logger.error("Quality analysis failed for %s: no pass produced metrics", audio_path.name)
            return analysis_failed()

        info = assess(AudioQualityInfo().merged(metrics))
        logger.info("Quality analysis finished: %s score=%s", audio_path.name, info.quality_score)
        return info

    # ---- Passes -----------------------------------------------------------------
    def measure_levels(self, path: Path) -> Metrics:
        run = self._run_pass(path, "astats")
        out: Metrics = dict(parsers.parse_level_metrics(run.stderr))
        clipping = parsers.parse_clipping(run.stderr, self.acfg.clip_peak_db)
        if clipping is not None:
            out["clipping"] = clipping
        return out

    def measure_spectral(self, path: Path) -> Metrics:
        graph = ",".join([
            f"aresample={self.acfg.spectral_sample_rate}",
            f"aspectralstats=win_size={self.acfg.spectral_window}",
            "ametadata=mode=print:file=-",
            "astats",
        ])
        run = self._run_pass(path, graph)
        return dict(parsers.parse_spectral_metrics(run.stdout + "\n" + run.stderr))

    def measure_silence(self, path: Path, duration: Optional[float] = None) -> Metrics:
        graph = f"silencedetect=noise={self.acfg.silence_noise_db:g}dB:d={self.acfg.silence_min_duration:g}"
        # keep the stats line: its final time= is the duration fallback
        run = self._run_pass(path, graph, stats=True)
        ratio = parsers.parse_silence_ratio(run.stderr, duration)
        return {"silence_ratio": ratio} if ratio is not None else {}

    # ---- internals ----------------------------------------------------------------
    def build_pass_command(self, path: Path, graph: str, *, stats: bool = False) -> List[str]:
        cmd = [self.ffmpeg_bin, "-hide_banner", "-nostdin"]
        if not stats:
            cmd.append("-nostats")
        cmd += ["-i", str(path), "-map", "0:a:0", "-af", graph, "-f", "null", "-"]
        return cmd

    def _run_pass(self, path: Path, graph: str, *, stats: bool = False) -> FFmpegRun:
        cmd = self.build_pass_command(path, graph, stats=stats)
        try:
            return run_ffmpeg(cmd, timeout_sec=self.timeout_sec)
        except FFmpegError as e:
            raise AnalysisFailed(f"ffmpeg analysis pass failed ({graph.split('=')[0]})", stderr=e.stderr, rc=e.rc) from e

    @staticmethod
    def _guarded(name: str, fn: Callable[[], Metrics], path: Path) -> Metrics:
        try:
            return fn()
        except AnalysisFailed as e:
            logger.warning("Analysis pass %r failed for %s: %s", name, path.name, e)
            return {}
