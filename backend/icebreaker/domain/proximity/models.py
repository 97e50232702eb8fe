"""Domain models used by the position store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class GeoPoint:
	"""Geographic coordinates in decimal degrees."""

	lat: float
	lon: float

	def __post_init__(self) -> None:
		if not -90.0 <= self.lat <= 90.0:
			raise ValueError("lat must be within [-90, 90]")
		if not -180.0 <= self.lon <= 180.0:
			raise ValueError("lon must be within [-180, 180]")


@dataclass(frozen=True, slots=True)
class Offset:
	"""Planar offset in metres from a shared local origin (venue mode)."""

	x: float
	y: float


Coordinates = Union[GeoPoint, Offset]


@dataclass(slots=True)
class User:
	"""Radar presence record for one broadcasting user."""

	user_id: str
	handle: str
	coordinates: Coordinates
	radius: float
	last_seen: float
	discoverable: bool = True
	expired: bool = False

	@property
	def visible(self) -> bool:
		return self.discoverable and not self.expired


__all__ = ["GeoPoint", "Offset", "Coordinates", "User"]
