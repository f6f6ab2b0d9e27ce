"""Mapping layer - model metadata, typed extraction and row-to-model mapping."""

from __future__ import annotations

from row_lite.mapping.extraction import (
    Float32,
    Int16,
    Int32,
    Int64,
    db_type_of,
    extractor_for,
)
from row_lite.mapping.metadata import (
    FieldDefinition,
    ModelDefinition,
    ModelRegistry,
    column_names_of,
    definition_of,
    mapped_field,
)
from row_lite.mapping.model import ModelMapper, RowPlan

__all__ = [
    "ModelMapper",
    "RowPlan",
    "ModelDefinition",
    "FieldDefinition",
    "ModelRegistry",
    "definition_of",
    "column_names_of",
    "mapped_field",
    "extractor_for",
    "db_type_of",
    "Int16",
    "Int32",
    "Int64",
    "Float32",
]
