# hexaudio/services/enhance/executor.py
from __future__ import annotations

import os
import time
from pathlib import Path
from typing import Optional

from hexaudio.common.logging import get_logger
from hexaudio.common.naming.output_names import new_unique_id, output_filename, partial_path_for
from hexaudio.common.settings import Settings, get_settings
from hexaudio.domain.entities.audio_quality import AudioQualityInfo
from hexaudio.domain.entities.enhancement import EnhancementPlan, EnhancementResult
from hexaudio.domain.errors import ValidationFailed
from hexaudio.domain.policies.enhancement_planner import plan_enhancement
from hexaudio.domain.ports.analyzer import QualityAnalyzerPort
from hexaudio.domain.ports.transcoder import AudioTranscoderPort, ProgressCallback
from hexaudio.services.schemas.options import EnhancementOptions, ExtractionOptions, coerce_options

logger = get_logger(__name__)


class EnhancementExecutor:
    """
    analyze input (optional) -> plan -> transcode with the plan's chain
    -> analyze output (optional) -> EnhancementResult.

    When the destination is the input file itself, the render goes to a
    sibling temp file that replaces the input only after every step,
    including the after-analysis, succeeded.
    """

    def __init__(
        self,
        transcoder: AudioTranscoderPort,
        analyzer: QualityAnalyzerPort,
        *,
        settings: Optional[Settings] = None,
        audio_root: Optional[Path] = None,
    ):
        self.transcoder = transcoder
        self.analyzer = analyzer
        self.audio_root = Path(audio_root) if audio_root is not None else (settings or get_settings()).audio_root

    def enhance(
        self,
        audio_path: Path,
        options: EnhancementOptions | dict | None = None,
        *,
        output_path: Optional[Path] = None,
        quality_before: Optional[AudioQualityInfo] = None,
        unique_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> EnhancementResult:
        opts = coerce_options(EnhancementOptions, options)
        audio_path = Path(audio_path)
        if not audio_path.is_file():
            raise ValidationFailed(f"Audio file not found: {audio_path}")

        t0 = time.perf_counter()
        if output_path is None:
            uid = unique_id or new_unique_id()
            output_path = self.audio_root / output_filename(uid, "enhanced", str(opts.output_format))
        output_path = Path(output_path)

        in_place = output_path.resolve() == audio_path.resolve()
        target = partial_path_for(output_path) if in_place else output_path
        # partial_path_for keeps the suffix, so the transcoder's format check still holds

        if quality_before is None and (opts.analyze_quality or opts.enhance_audio):
            quality_before = self.analyzer.analyze(audio_path)

        plan = plan_enhancement(opts, quality_before)
        logger.info("Enhancement started: %s stages=%s", audio_path.name, plan.stage_names)

        done = False
        try:
            self.transcoder.extract_audio(audio_path, self.extraction_options(plan), target, on_progress=on_progress)
            quality_after = self.analyzer.analyze(target) if opts.analyze_quality else None
            if in_place:
                os.replace(target, output_path)
            done = True
        finally:
            if in_place and not done:
                target.unlink(missing_ok=True)

        result = EnhancementResult(
            original_path=audio_path,
            enhanced_path=output_path,
            improvements=tuple(plan.descriptions),
            quality_before=quality_before,
            quality_after=quality_after,
            processing_time=time.perf_counter() - t0,
            plan=plan,
        )
        logger.info(
            "Enhancement finished: %s -> %s in %.2fs (improvement=%s)",
            audio_path.name, output_path.name, result.processing_time, result.quality_improvement,
        )
        return result

    @staticmethod
    def extraction_options(plan: EnhancementPlan) -> ExtractionOptions:
        return ExtractionOptions(
            output_format=plan.output_format,
            sample_rate=plan.sample_rate,
            channels=plan.channels,
            bitrate=plan.bitrate,
            filters=plan.stages,
        )
