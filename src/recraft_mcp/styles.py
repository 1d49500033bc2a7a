"""Style, substyle and image size vocabularies accepted by the Recraft API.

The tuples here are the only copy of each vocabulary. Argument models in
``recraft_mcp.models`` turn them into ``Literal`` types, so membership is
checked by pydantic's literal lookup during validation.
"""

from typing import Dict, Tuple

MODEL_V2 = "recraftv2"
MODEL_V3 = "recraftv3"
MODELS: Tuple[str, ...] = (MODEL_V2, MODEL_V3)

STYLES: Tuple[str, ...] = (
    "any",
    "realistic_image",
    "digital_illustration",
    "vector_illustration",
    "icon",
    "logo_raster",
)

RESPONSE_FORMATS: Tuple[str, ...] = ("url", "b64_json")

IMAGE_SIZES: Tuple[str, ...] = (
    "1024x1024",
    "1365x1024",
    "1024x1365",
    "1536x1024",
    "1024x1536",
    "1820x1024",
    "1024x1820",
    "1024x2048",
    "2048x1024",
    "1434x1024",
    "1024x1434",
    "1024x1280",
    "1280x1024",
    "1024x1707",
    "1707x1024",
)

_SUBSTYLES_V3: Dict[str, Tuple[str, ...]] = {
    "realistic_image": (
        "b_and_w",
        "enterprise",
        "evening_light",
        "faded_nostalgia",
        "forest_life",
        "hard_flash",
        "hdr",
        "motion_blur",
        "mystic_naturalism",
        "natural_light",
        "natural_tones",
        "organic_calm",
        "real_life_glow",
        "retro_realism",
        "retro_snapshot",
        "studio_portrait",
        "urban_drama",
        "village_realism",
        "warm_folk",
    ),
    "digital_illustration": (
        "2d_art_poster",
        "2d_art_poster_2",
        "antiquarian",
        "bold_fantasy",
        "child_book",
        "child_books",
        "cover",
        "crosshatch",
        "digital_engraving",
        "engraving_color",
        "expressionism",
        "freehand_details",
        "grain",
        "grain_20",
        "graphic_intensity",
        "hand_drawn",
        "hand_drawn_outline",
        "handmade_3d",
        "hard_comics",
        "infantile_sketch",
        "long_shadow",
        "modern_folk",
        "multicolor",
        "neon_calm",
        "noir",
        "nostalgic_pastel",
        "outline_details",
        "pastel_gradient",
        "pastel_sketch",
        "pixel_art",
        "plastic",
        "pop_art",
        "pop_renaissance",
        "seamless",
        "street_art",
        "tablet_sketch",
        "urban_glow",
        "urban_sketching",
        "vanilla_dreams",
        "young_adult_book",
        "young_adult_book_2",
    ),
    "vector_illustration": (
        "bold_stroke",
        "chemistry",
        "colored_stencil",
        "contour_pop_art",
        "cosmics",
        "cutout",
        "depressive",
        "editorial",
        "emotional_flat",
        "engraving",
        "infographical",
        "line_art",
        "line_circuit",
        "linocut",
        "marker_outline",
        "mosaic",
        "naivector",
        "roundish_flat",
        "seamless",
        "segmented_colors",
        "sharp_contrast",
        "thin",
        "vector_photo",
        "vivid_shapes",
    ),
    "logo_raster": (
        "emblem_graffiti",
        "emblem_pop_art",
        "emblem_punk",
        "emblem_stamp",
        "emblem_vintage",
    ),
}

_SUBSTYLES_V2: Dict[str, Tuple[str, ...]] = {
    "realistic_image": (
        "b_and_w",
        "enterprise",
        "hard_flash",
        "hdr",
        "motion_blur",
        "natural_light",
        "studio_portrait",
    ),
    "digital_illustration": (
        "2d_art_poster",
        "2d_art_poster_2",
        "3d",
        "80s",
        "engraving_color",
        "glow",
        "grain",
        "hand_drawn",
        "hand_drawn_outline",
        "handmade_3d",
        "infantile_sketch",
        "kawaii",
        "pixel_art",
        "plastic",
        "psychedelic",
        "seamless",
        "voxel",
        "watercolor",
    ),
    "vector_illustration": (
        "cartoon",
        "doodle_line_art",
        "engraving",
        "flat_2",
        "kawaii",
        "line_art",
        "line_circuit",
        "linocut",
        "seamless",
    ),
    "icon": (
        "broken_line",
        "colored_outline",
        "colored_shapes",
        "colored_shapes_gradient",
        "doodle_fill",
        "doodle_offset_fill",
        "offset_fill",
        "outline",
        "outline_gradient",
        "uneven_fill",
    ),
}

_ORDERED_SUBSTYLES: Dict[str, Dict[str, Tuple[str, ...]]] = {
    MODEL_V2: _SUBSTYLES_V2,
    MODEL_V3: _SUBSTYLES_V3,
}


def _flatten(by_style: Dict[str, Tuple[str, ...]]) -> Tuple[str, ...]:
    # "seamless" and a few others appear under several styles; keep first occurrence.
    return tuple(dict.fromkeys(s for style in STYLES for s in by_style.get(style, ())))


# Every substyle of a model version, regardless of style, in declaration order.
ALL_SUBSTYLES_V2: Tuple[str, ...] = _flatten(_SUBSTYLES_V2)
ALL_SUBSTYLES_V3: Tuple[str, ...] = _flatten(_SUBSTYLES_V3)


def substyles_for(model: str, style: str) -> Tuple[str, ...]:
    """Return the substyles of ``style`` under ``model`` in a stable order.

    Unknown models raise ``KeyError``; styles without substyles (``any``,
    ``icon`` on v3, ``logo_raster`` on v2) return an empty tuple.
    """
    return _ORDERED_SUBSTYLES[model].get(style, ())
