"""
ChromaSense Colors Module

Provides color space conversion, harmony-rule palette generation, palette
import/export formats and swatch rendering. All functions operate on
``#RRGGBB`` hex strings and are free of session state.
"""

__version__ = "1.0.0"
