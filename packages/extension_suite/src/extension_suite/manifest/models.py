"""Pydantic models describing installable extensions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ExportConvention(str, Enum):
    """Advisory hint for how a unit announces its entry point."""

    STANDARD = "standard"
    SELF_EXECUTING = "self-executing"
    UNKNOWN = "unknown"


class ExtensionDescriptor(BaseModel, frozen=True):
    """Immutable description of one installable unit."""

    id: str = Field(min_length=1)
    name: str
    description: str = ""
    source_location: str = Field(alias="url", min_length=1)
    critical: bool = False
    export_convention: ExportConvention = ExportConvention.UNKNOWN

    model_config = {"populate_by_name": True}
