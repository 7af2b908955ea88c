"""
Colorit color analysis engine.

Palette extraction, color conversions, catalog matching and contrast
evaluation, plus a small FastAPI surface over them.
"""

__version__ = "1.0.0"
