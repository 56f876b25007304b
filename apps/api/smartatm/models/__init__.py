"""Expose ORM models."""
from .call import Call
from .callback import Callback
from .lead import Lead
from .pca import PCA

__all__ = [
    "Call",
    "Callback",
    "Lead",
    "PCA",
]
