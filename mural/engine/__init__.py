"""Echo mural spatial engine: layout, animation, interaction, orchestration."""

from mural.engine.config import MuralConfig
from mural.engine.controller import MuralController
from mural.engine.state import Blob, MuralState

__all__ = [
    "MuralConfig",
    "MuralController",
    "Blob",
    "MuralState",
]
