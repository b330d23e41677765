"""MultiMart catalog engine.

Variant resolution, faceted product queries and flash-sale pricing over
an immutable snapshot of a multi-vendor marketplace catalog.
"""

__version__ = "0.1.0"
