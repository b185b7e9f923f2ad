# hexaudio/services/pipeline/service.py
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence

from hexaudio.common.logging import get_logger
from hexaudio.common.naming.output_names import new_unique_id, output_filename
from hexaudio.common.path.safe import safe_join
from hexaudio.common.settings import Settings, get_settings
from hexaudio.domain.dataclasses.reports import BatchReport
from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.entities.enhancement import EnhancementResult
from hexaudio.domain.entities.media_metadata import MediaMetadata
from hexaudio.domain.entities.processing import ProcessingResult
from hexaudio.domain.enums.audio_format import AudioFormat
from hexaudio.domain.errors import ValidationFailed
from hexaudio.domain.ports.analyzer import QualityAnalyzerPort
from hexaudio.domain.ports.probe import MediaProbePort
from hexaudio.domain.ports.transcoder import AudioTranscoderPort, ProgressCallback
from hexaudio.services.analysis.quality_analyzer import QualityAnalyzer
from hexaudio.services.enhance.executor import EnhancementExecutor
from hexaudio.services.pipeline.batch import BatchOrchestrator
from hexaudio.services.probe.ffprobe_adapter import FFprobeAdapter
from hexaudio.services.schemas.options import (
    EnhancementOptions,
    ExtractionOptions,
    ProcessingOptions,
    coerce_options,
)
from hexaudio.services.transcode.ffmpeg_transcoder import FFmpegTranscoder

logger = get_logger(__name__)

ENHANCEMENT_NAMES = (
    "noise_reduction",
    "volume_normalization",
    "compressor",
    "equalizer",
    "speech_enhancement",
    "enhance_audio",
)


class MediaPipelineService:
    """
    Caller-facing surface of the pipeline:

        probe -> extract/convert audio -> analyze -> enhance

    plus batch processing over many inputs. Adapters default to the ffmpeg
    implementations and can be swapped for anything honouring the ports.
    The configured directories are created once, here.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        prober: Optional[MediaProbePort] = None,
        transcoder: Optional[AudioTranscoderPort] = None,
        analyzer: Optional[QualityAnalyzerPort] = None,
    ):
        self.cfg = settings or get_settings()
        get_logger("hexaudio", self.cfg.log_level.upper())
        for d in (self.cfg.upload_root, self.cfg.audio_root, self.cfg.temp_root):
            Path(d).mkdir(parents=True, exist_ok=True)

        self.prober: MediaProbePort = prober or FFprobeAdapter(settings=self.cfg)
        self.transcoder: AudioTranscoderPort = transcoder or FFmpegTranscoder(prober=self.prober, settings=self.cfg)
        self.analyzer: QualityAnalyzerPort = analyzer or QualityAnalyzer(prober=self.prober, settings=self.cfg)
        self.executor = EnhancementExecutor(self.transcoder, self.analyzer, audio_root=self.cfg.audio_root)
        self.batch = BatchOrchestrator(self.process_media, self.cfg.concurrency.batch_concurrency)

    # ---- single operations -------------------------------------------------------
    def probe(self, path: Path | str) -> MediaMetadata:
        return self.prober.probe(Path(path))

    def extract_audio(
        self,
        path: Path | str,
        options: ExtractionOptions | dict | None = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
        unique_id: Optional[str] = None,
        purpose: str = "audio",
    ) -> Path:
        opts = coerce_options(ExtractionOptions, options)
        out = self.cfg.audio_root / output_filename(unique_id or new_unique_id(), purpose, str(opts.output_format))
        return self.transcoder.extract_audio(Path(path), opts, out, on_progress=on_progress)

    def analyze_quality(self, audio_path: Path | str) -> AudioQualityInfo:
        return self.analyzer.analyze(Path(audio_path))

    def enhance(
        self,
        audio_path: Path | str,
        options: EnhancementOptions | dict | None = None,
        *,
        output_path: Optional[Path] = None,
        quality_before: Optional[AudioQualityInfo] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> EnhancementResult:
        return self.executor.enhance(
            Path(audio_path),
            options,
            output_path=output_path,
            quality_before=quality_before,
            on_progress=on_progress,
        )

    # ---- full pipeline ---------------------------------------------------------------
    def process_media(
        self,
        path: Path | str,
        options: ProcessingOptions | dict | None = None,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ProcessingResult:
        opts = coerce_options(ProcessingOptions, options)
        source = self.validate_file(self.resolve_input(path))
        t0 = time.perf_counter()
        uid = new_unique_id()
        logger.info("Media processing started: %s (%s)", source.name, uid)

        result = ProcessingResult(id=uid, source_path=source)
        result.metadata = self.probe(source)

        if opts.extract_audio:
            result.audio_path = self._prepare_audio(source, result.metadata, opts, uid, on_progress)

            if opts.analyze_quality:
                result.quality = self.analyze_quality(result.audio_path)

            if opts.wants_enhancement:
                enh = self.executor.enhance(
                    result.audio_path,
                    opts.enhancement(),
                    quality_before=result.quality,
                    unique_id=uid,
                )
                result.enhancement = enh
                result.audio_path = enh.enhanced_path
                result.enhancements = enh.plan.stage_names if enh.plan is not None else []
                if enh.quality_after is not None:
                    result.quality = enh.quality_after

        result.processing_time = time.perf_counter() - t0
        logger.info("Media processing finished: %s in %.2fs", uid, result.processing_time)
        return result

    def batch_process(
        self,
        paths: Sequence[Path | str],
        options: ProcessingOptions | dict | None = None,
        concurrency: Optional[int] = None,
    ) -> BatchReport:
        opts = coerce_options(ProcessingOptions, options)
        return self.batch.run(paths, opts, concurrency)

    def _prepare_audio(
        self,
        source: Path,
        md: MediaMetadata,
        opts: ProcessingOptions,
        uid: str,
        on_progress: Optional[ProgressCallback],
    ) -> Path:
        """Reuse an audio source that already matches the target, else extract/convert it."""
        if self._reusable_audio(source, md, opts):
            logger.debug("Reusing source as audio: %s", source.name)
            return source
        purpose = "converted" if md.has_audio and not md.has_video else "audio"
        return self.extract_audio(source, opts.extraction(), on_progress=on_progress, unique_id=uid, purpose=purpose)

    @staticmethod
    def _reusable_audio(source: Path, md: MediaMetadata, opts: ProcessingOptions) -> bool:
        if md.has_video or source.suffix.lstrip(".").lower() != str(opts.audio_format):
            return False
        untouched = (
            opts.sample_rate is None
            and opts.channels is None
            and opts.bitrate is None
            and opts.max_duration is None
            and not opts.hifi
            and not opts.normalize_audio
        )
        return untouched

    # ---- inputs ----------------------------------------------------------------------
    def resolve_input(self, ref: Path | str) -> Path:
        """
        An existing path is used as-is. A bare identifier is looked up in
        upload_root: exact name first, then the first file whose name
        starts with it (uploads are stored as `{id}_...`).
        """
        p = Path(ref)
        if p.is_file():
            return p
        if len(p.parts) == 1:
            root = Path(self.cfg.upload_root)
            try:
                direct = safe_join(root, p.name)
            except ValueError as e:
                raise ValidationFailed(str(e)) from e
            if direct.is_file():
                return direct
            if root.is_dir():
                for cand in sorted(root.iterdir()):
                    if cand.is_file() and cand.name.startswith(p.name):
                        return cand
        raise ValidationFailed(f"Input not found: {ref}")

    def validate_file(self, path: Path | str) -> Path:
        p = Path(path)
        if not p.is_file():
            raise ValidationFailed(f"Input not found: {p}")
        ext = p.suffix.lstrip(".").lower()
        if ext not in self.cfg.supported_input_exts:
            raise ValidationFailed(f"Unsupported file type: .{ext}")
        size = p.stat().st_size
        if size > self.cfg.max_file_size_bytes:
            raise ValidationFailed(
                f"File too large: {size} bytes (limit {self.cfg.max_file_size_mb} MB)"
            )
        return p

    # ---- housekeeping -------------------------------------------------------------------
    def cleanup_old_files(self, max_age: Optional[float] = None) -> int:
        """
        Delete files older than `max_age` seconds (default: retention setting)
        from the upload, audio and temp directories. Returns the count removed.
        """
        age = max_age if max_age is not None else self.cfg.retention.max_age_hours * 3600
        cutoff = time.time() - age
        removed = 0
        for root in self._managed_dirs():
            for f in root.iterdir():
                try:
                    if f.is_file() and f.stat().st_mtime < cutoff:
                        f.unlink()
                        removed += 1
                except OSError as e:
                    logger.warning("Cleanup could not remove %s: %s", f, e)
        logger.info("File cleanup completed: %d removed", removed)
        return removed

    def _managed_dirs(self) -> Iterable[Path]:
        seen = set()
        for d in (self.cfg.upload_root, self.cfg.audio_root, self.cfg.temp_root):
            d = Path(d).resolve()
            if d not in seen and d.is_dir():
                seen.add(d)
                yield d

    def get_capabilities(self) -> Dict[str, Any]:
        return {
            "supported_input_formats": list(self.cfg.supported_input_exts),
            "supported_output_formats": [f.value for f in AudioFormat],
            "enhancements": list(ENHANCEMENT_NAMES),
            "quality_metrics": list(AudioQualityInfo.metric_names()) + ["quality_score"],
            "max_file_size": self.cfg.max_file_size_bytes,
        }
