"""Raster rendering of the mural."""

from mural.render.painter import MuralPainter
from mural.render.surface import RasterSurface

__all__ = ["MuralPainter", "RasterSurface"]
