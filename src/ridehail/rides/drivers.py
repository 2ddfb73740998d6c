import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from ridehail.geo.distance import haversine_distance_miles, validate_coordinates


@dataclass
class DriverLocation:
    driver_id: str
    lat: float
    lng: float
    heading: float = 0.0
    is_online: bool = True
    last_updated: datetime | None = None


class DriverDirectory:
    """Last known position and availability of every driver.

    Thread-safe: all methods are protected by a lock.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._lock = threading.Lock()
        self._drivers: dict[str, DriverLocation] = {}
        self._clock = clock or (lambda: datetime.now(UTC))

    def update_location(
        self,
        driver_id: str,
        lat: float,
        lng: float,
        heading: float | None = None,
    ) -> DriverLocation:
        """Record a position fix. Unknown drivers are added as online."""
        validate_coordinates(lat, lng, "driver_location")
        with self._lock:
            record = self._drivers.get(driver_id)
            if record is None:
                record = DriverLocation(
                    driver_id=driver_id,
                    lat=lat,
                    lng=lng,
                    heading=heading or 0.0,
                    is_online=True,
                )
                self._drivers[driver_id] = record
            else:
                record.lat = lat
                record.lng = lng
                if heading is not None:
                    record.heading = heading
            record.last_updated = self._clock()
            return replace(record)

    def set_online(self, driver_id: str, online: bool) -> bool:
        with self._lock:
            record = self._drivers.get(driver_id)
            if record is None:
                return False
            record.is_online = online
            record.last_updated = self._clock()
            return True

    def get(self, driver_id: str) -> DriverLocation | None:
        with self._lock:
            record = self._drivers.get(driver_id)
            return replace(record) if record else None

    def online_drivers(self) -> list[DriverLocation]:
        with self._lock:
            return [replace(d) for d in self._drivers.values() if d.is_online]

    def nearby(
        self, lat: float, lng: float, radius_miles: float = 5.0
    ) -> list[tuple[DriverLocation, float]]:
        """Online drivers within ``radius_miles`` of a point, nearest first."""
        validate_coordinates(lat, lng, "search_center")
        results = []
        for driver in self.online_drivers():
            distance = haversine_distance_miles(lat, lng, driver.lat, driver.lng)
            if distance <= radius_miles:
                results.append((driver, distance))
        results.sort(key=lambda item: item[1])
        return results

    def clear(self) -> None:
        with self._lock:
            self._drivers.clear()
