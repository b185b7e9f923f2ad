# hexaudio/common/naming/output_names.py
from __future__ import annotations

import re
import uuid
from pathlib import Path

_purpose_re = re.compile(r"[^a-z0-9]+")


def new_unique_id() -> str:
    """Fresh identifier for one pipeline run (32 lowercase hex chars)."""
    return uuid.uuid4().hex


def output_filename(unique_id: str, purpose: str, ext: str) -> str:
    """
    Canonical output name: `{unique_id}_{purpose}.{ext}`.

    Examples:
      ("ab12", "audio", "wav")      -> "ab12_audio.wav"
      ("ab12", "Enhanced Mix", ".mp3") -> "ab12_enhanced-mix.mp3"
    """
    if not unique_id:
        raise ValueError("unique_id must not be empty")
    slug = _purpose_re.sub("-", (purpose or "").strip().lower()).strip("-")
    if not slug:
        raise ValueError(f"purpose {purpose!r} produces an empty name")
    ext = (ext or "").lstrip(".").lower()
    return f"{unique_id}_{slug}.{ext}" if ext else f"{unique_id}_{slug}"


def partial_path_for(final_path: Path) -> Path:
    """Hidden sibling used while an engine is still writing `final_path`."""
    final_path = Path(final_path)
    return final_path.with_name(f".{final_path.stem}.{uuid.uuid4().hex[:8]}.partial{final_path.suffix}")
