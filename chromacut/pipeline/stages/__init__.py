"""
Pipeline Stages
"""

from .s1_key_color import choose_key_color
from .s2_chroma_key import chroma_key
from .s3_morphology import clean_alpha, dilate, erode
from .s4_region_filter import filter_regions

__all__ = [
    "choose_key_color",
    "chroma_key",
    "clean_alpha",
    "erode",
    "dilate",
    "filter_regions",
]
