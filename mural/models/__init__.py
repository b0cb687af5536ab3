"""Pydantic wire models."""

from mural.models.entry import Entry, IncomingResonance, Resonance, SimilarMoment

__all__ = ["Entry", "IncomingResonance", "Resonance", "SimilarMoment"]
