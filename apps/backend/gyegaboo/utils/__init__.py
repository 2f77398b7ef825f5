"""
Utils 패키지
"""

from .normalization import collapse_whitespace, normalize_input_text, normalize_label

__all__ = [
    "collapse_whitespace",
    "normalize_input_text",
    "normalize_label",
]
