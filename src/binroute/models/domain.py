"""Domain models for bins, collectors and their routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional


class Role(str, Enum):
    USER = "user"
    SUPERVISOR = "supervisor"
    COLLECTOR = "collector"


class WasteType(str, Enum):
    ORGANIC = "organic"
    PLASTIC = "plastic"
    PAPER = "paper"
    METAL = "metal"
    GLASS = "glass"
    ELECTRONIC = "electronic"
    MIXED = "mixed"


class BinStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    FULL = "full"
    DAMAGED = "damaged"
    OFFLINE = "offline"


class RouteItemStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class BinLocation:
    """A bin identifier paired with its coordinates; the optimizer's input unit."""

    bin_id: str
    location: GeoPoint


@dataclass(slots=True)
class Bin:
    """Represents a waste bin with its sensor-reported fill level and schedule."""

    bin_id: str
    location: GeoPoint
    waste_type: WasteType
    address: str = ""
    zone: str = ""
    capacity: float = 0.0
    fill_level: float = 0.0
    status: BinStatus = BinStatus.ACTIVE
    last_collected: Optional[datetime] = None
    collection_frequency_days: int = 7
    next_collection_date: Optional[datetime] = None

    @property
    def fill_color(self) -> str:
        if self.fill_level >= 90:
            return "red"
        if self.fill_level >= 75:
            return "orange"
        if self.fill_level >= 50:
            return "yellow"
        return "green"

    def as_location(self) -> BinLocation:
        return BinLocation(bin_id=self.bin_id, location=self.location)

    def mark_collected(self, now: datetime) -> None:
        self.fill_level = 0.0
        self.last_collected = now
        self.next_collection_date = now + timedelta(days=self.collection_frequency_days)


@dataclass(slots=True)
class RouteItem:
    bin_id: str
    order: int
    status: RouteItemStatus = RouteItemStatus.PENDING


@dataclass(slots=True)
class Collector:
    """A collector account with its assigned bins and the route it is working."""

    collector_id: str
    name: str
    assigned_bin_ids: List[str] = field(default_factory=list)
    current_route: List[RouteItem] = field(default_factory=list)

    def find_route_item(self, bin_id: str) -> RouteItem | None:
        for item in self.current_route:
            if item.bin_id == bin_id:
                return item
        return None
