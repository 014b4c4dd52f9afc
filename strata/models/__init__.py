"""
Strata Models — engine-neutral schema description.

Exports:
    Model, ModelKind, Column, PrimitiveType, Constraint, ForeignKey,
    IndexKind, ConstraintKind, ModelCache, build_model
"""

from .column import Column, PrimitiveType
from .constraint import Constraint, ConstraintKind, ForeignKey, IndexKind
from .model import Model, ModelKind, ai_name, pk_name
from .mapping import ORM_KEY, build_model, table_name_of
from .cache import ModelCache

__all__ = [
    "Column",
    "PrimitiveType",
    "Constraint",
    "ConstraintKind",
    "ForeignKey",
    "IndexKind",
    "Model",
    "ModelKind",
    "ai_name",
    "pk_name",
    "ORM_KEY",
    "build_model",
    "table_name_of",
    "ModelCache",
]
