"""Pydantic schemas for position endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from icebreaker.domain.proximity.models import Coordinates, GeoPoint, Offset


class PositionPayload(BaseModel):
	"""Location broadcast; either lat/lon or a planar x/y offset."""

	lat: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
	lon: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
	x: Optional[float] = None
	y: Optional[float] = None
	# Bounds are enforced by the store so out-of-range values surface as invalid_radius.
	radius: float
	handle: Optional[str] = Field(default=None, min_length=1, max_length=64)
	ts: Optional[float] = Field(default=None, ge=0, description="Epoch seconds of the broadcast")

	@model_validator(mode="after")
	def _one_representation(self) -> "PositionPayload":
		geo = self.lat is not None or self.lon is not None
		planar = self.x is not None or self.y is not None
		if geo == planar:
			raise ValueError("provide either lat/lon or x/y")
		if geo and (self.lat is None or self.lon is None):
			raise ValueError("lat and lon are both required")
		if planar and (self.x is None or self.y is None):
			raise ValueError("x and y are both required")
		return self

	def coordinates(self) -> Coordinates:
		if self.lat is not None and self.lon is not None:
			return GeoPoint(lat=self.lat, lon=self.lon)
		return Offset(x=float(self.x or 0.0), y=float(self.y or 0.0))


class PositionResponse(BaseModel):
	accepted: bool
	visible: bool
	radius: float
	last_seen: float


class VisibilityPayload(BaseModel):
	visible: bool
