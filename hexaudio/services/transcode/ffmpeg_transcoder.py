# hexaudio/services/transcode/ffmpeg_transcoder.py
from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from hexaudio.common.logging import get_logger
from hexaudio.common.naming.output_names import partial_path_for
from hexaudio.common.settings import Settings, get_settings
from hexaudio.domain.entities.filter_stage import FilterStage
from hexaudio.domain.entities.media_metadata import MediaMetadata
from hexaudio.domain.enums.filter_kind import FilterKind
from hexaudio.domain.errors import TranscodeFailed, ValidationFailed
from hexaudio.domain.policies.filter_chain import FilterChainBuilder
from hexaudio.domain.ports.probe import MediaProbePort
from hexaudio.domain.ports.transcoder import AudioTranscoderPort, ProgressCallback
from hexaudio.services.probe.ffprobe_adapter import FFprobeAdapter
from hexaudio.services.schemas.options import ExtractionOptions, coerce_options
from hexaudio.services.transcode.ffmpeg_runner import FFmpegError, run_ffmpeg
from hexaudio.services.transcode.filter_graph import render_chain

logger = get_logger(__name__)


class FFmpegTranscoder(AudioTranscoderPort):
    """
    Produces audio-only files with ffmpeg, optionally applying a filter chain
    in the same pass.

    The engine writes to a hidden `.partial` sibling which is renamed onto
    the destination only after a clean exit, so a failed run never leaves a
    truncated file at `output_path`.
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
        self.prober: MediaProbePort = prober or FFprobeAdapter(settings=cfg)

    # ---- Port API -------------------------------------------------------------
    def extract_audio(
        self,
        source: Path,
        options: ExtractionOptions | dict | None,
        output_path: Path,
        *,
        on_progress: Optional[ProgressCallback] = None,
        metadata: Optional[MediaMetadata] = None,
    ) -> Path:
        opts = coerce_options(ExtractionOptions, options)
        source = Path(source)
        output_path = Path(output_path)

        if not source.is_file() or not os.access(source, os.R_OK):
            raise TranscodeFailed(f"Source file not found or unreadable: {source}")
        if output_path.suffix.lstrip(".").lower() != str(opts.output_format):
            raise ValidationFailed(
                f"Output name {output_path.name!r} does not match format {opts.output_format}"
            )
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValidationFailed(f"Cannot create output directory {output_path.parent}: {e}") from e

        md = metadata if metadata is not None else self.prober.probe(source)
        # Empty metadata means the probe failed; let the engine decide (-map 0:a:0 fails without audio).
        if md.streams and not md.has_audio:
            raise TranscodeFailed(f"No audio stream in {source.name}")

        partial = partial_path_for(output_path)
        cmd = self.build_command(source, opts, partial, progress=on_progress is not None)
        duration = md.duration
        if opts.max_duration is not None:
            duration = min(duration, opts.max_duration) if duration else opts.max_duration

        logger.info("Audio extraction started: %s -> %s", source.name, output_path.name)
        done = False
        try:
            run_ffmpeg(cmd, timeout_sec=self.timeout_sec, duration_sec=duration, on_progress=on_progress)
            if not partial.is_file() or partial.stat().st_size == 0:
                raise TranscodeFailed(f"ffmpeg produced no output for {source.name}")
            os.replace(partial, output_path)
            done = True
        except FFmpegError as e:
            logger.error("Audio extraction failed for %s: %s", source.name, e.message)
            raise TranscodeFailed(f"Audio extraction failed for {source.name}", stderr=e.stderr, rc=e.rc) from e
        finally:
            if not done:
                partial.unlink(missing_ok=True)

        logger.info("Audio extracted successfully: %s", output_path.name)
        return output_path

    # ---- Command construction ---------------------------------------------------
    def build_command(
        self,
        source: Path,
        options: ExtractionOptions,
        output_path: Path,
        *,
        progress: bool = False,
    ) -> List[str]:
        fmt = options.output_format
        cmd: List[str] = [
            self.ffmpeg_bin,
            "-hide_banner",
            "-nostdin",
            "-loglevel", "error",
            "-y",
            "-i", str(source),
            "-map", "0:a:0",
            "-vn", "-sn", "-dn",
            "-c:a", fmt.codec,
            "-ar", str(options.sample_rate),
            "-ac", str(options.channels),
        ]
        if options.bitrate and fmt.is_lossy:
            cmd += ["-b:a", f"{options.bitrate}k"]
        if options.max_duration is not None:
            cmd += ["-t", f"{options.max_duration:g}"]

        chain = self.filter_stages(options)
        if chain:
            cmd += ["-af", render_chain(chain)]

        if progress:
            cmd += ["-progress", "pipe:1", "-nostats"]
        cmd += ["-f", fmt.muxer, str(output_path)]
        return cmd

    @staticmethod
    def filter_stages(options: ExtractionOptions) -> tuple[FilterStage, ...]:
        builder = FilterChainBuilder().extend(options.filters)
        has_loudness = any(s.kind == FilterKind.loudness_normalize for s in options.filters)
        if options.normalize_audio and not has_loudness:
            builder.add(FilterStage.loudness_normalize())
        return builder.build()
