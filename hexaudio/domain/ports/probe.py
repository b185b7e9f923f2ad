from __future__ import annotations
from pathlib import Path
from typing import Protocol
from hexaudio.domain.entities.media_metadata import MediaMetadata


class MediaProbePort(Protocol):
    def probe(self, path: Path) -> MediaMetadata: ...
