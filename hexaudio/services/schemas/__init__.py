from hexaudio.services.schemas.options import (
    EnhancementOptions,
    EqualizerSettings,
    ExtractionOptions,
    ProcessingOptions,
    coerce_options,
)

__all__ = [
    "EnhancementOptions",
    "EqualizerSettings",
    "ExtractionOptions",
    "ProcessingOptions",
    "coerce_options",
]
