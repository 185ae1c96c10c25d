"""One-to-one relation between wallboxes and the cars plugged into them."""

from typing import Iterator, Optional


class ChargingLinks:
    """
    Relation table linking a wallbox to at most one car and vice versa.

    Both directions are stored and always updated together, so a lookup
    from either side agrees with the other.
    """

    def __init__(self, pairs: Optional[dict[str, str]] = None):
        self._car_by_wallbox: dict[str, str] = {}
        self._wallbox_by_car: dict[str, str] = {}
        for wallbox_id, car_id in (pairs or {}).items():
            self.connect(wallbox_id, car_id)

    def connect(self, wallbox_id: str, car_id: str) -> None:
        """
        Link ``car_id`` to ``wallbox_id``.

        Raises:
            ValueError: If either side is already linked to something else
        """
        if self._car_by_wallbox.get(wallbox_id, car_id) != car_id:
            raise ValueError(f"Wallbox {wallbox_id} already has a car connected")
        if self._wallbox_by_car.get(car_id, wallbox_id) != wallbox_id:
            raise ValueError(f"Car {car_id} is already connected to a wallbox")
        self._car_by_wallbox[wallbox_id] = car_id
        self._wallbox_by_car[car_id] = wallbox_id

    def disconnect_car(self, car_id: str) -> Optional[str]:
        """Remove the link of ``car_id``. Returns the wallbox it was linked to."""
        wallbox_id = self._wallbox_by_car.pop(car_id, None)
        if wallbox_id is not None:
            del self._car_by_wallbox[wallbox_id]
        return wallbox_id

    def disconnect_wallbox(self, wallbox_id: str) -> Optional[str]:
        """Remove the link of ``wallbox_id``. Returns the car it was linked to."""
        car_id = self._car_by_wallbox.pop(wallbox_id, None)
        if car_id is not None:
            del self._wallbox_by_car[car_id]
        return car_id

    def car_for(self, wallbox_id: str) -> Optional[str]:
        return self._car_by_wallbox.get(wallbox_id)

    def wallbox_for(self, car_id: str) -> Optional[str]:
        return self._wallbox_by_car.get(car_id)

    def is_free(self, wallbox_id: str) -> bool:
        return wallbox_id not in self._car_by_wallbox

    def copy(self) -> "ChargingLinks":
        return ChargingLinks(dict(self._car_by_wallbox))

    def to_dict(self) -> dict[str, str]:
        """Mapping of wallbox id to car id."""
        return dict(self._car_by_wallbox)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._car_by_wallbox.items())

    def __len__(self) -> int:
        return len(self._car_by_wallbox)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChargingLinks):
            return NotImplemented
        return self._car_by_wallbox == other._car_by_wallbox
