"""Geographic point model."""

from pydantic import BaseModel, ConfigDict


class GeoPoint(BaseModel):
    """A point in signed decimal degrees.

    ``x`` is the longitude and ``y`` the latitude. ``spatial_reference_id``
    is never set by the extractors; storage layers may assign one.
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    spatial_reference_id: int | None = None

    @property
    def longitude(self) -> float:
        return self.x

    @property
    def latitude(self) -> float:
        return self.y

    @property
    def coordinates(self) -> str:
        """Return coordinates as a "lat, lon" string."""
        return f"{self.y:.6f}, {self.x:.6f}"
