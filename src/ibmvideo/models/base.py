"""Shared base model definitions for IBM Video domain objects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class IbmVideoBaseModel(BaseModel):
    """Base model configured for package-wide defaults."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


__all__ = ["IbmVideoBaseModel"]
