"""Geometric primitives for node coordinates."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# Decimals kept when node coordinates are turned into comparison keys.
COORDINATE_PRECISION = 3


class Point3D(BaseModel):
    """3D node position (mm, model coordinates)."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    z: float
