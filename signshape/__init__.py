"""Colour segmentation, contour processing and radial symmetry centre detection for traffic signs."""

__version__ = "0.1.0"