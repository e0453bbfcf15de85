from maneframe.mask.synthesizer import (
    EditMaskSynthesizer,
    MODE_FALLBACK,
    MODE_SEGMENTATION,
    find_person_bounds,
    fit_segmentation,
    normalize_canvas,
    submit_synthesis,
    synthesize,
)

__all__ = [
    "EditMaskSynthesizer",
    "MODE_FALLBACK",
    "MODE_SEGMENTATION",
    "find_person_bounds",
    "fit_segmentation",
    "normalize_canvas",
    "submit_synthesis",
    "synthesize",
]
