# app/adapters/centroids.py
from __future__ import annotations

from ..domain.address import region_key

# (lat, lon) city centroids used as the last-resort location fix.
CITY_CENTROIDS: dict[str, tuple[float, float]] = {
    "mumbai": (19.0760, 72.8777),
    "delhi": (28.7041, 77.1025),
    "new delhi": (28.6139, 77.2090),
    "bengaluru": (12.9716, 77.5946),
    "bangalore": (12.9716, 77.5946),
    "hyderabad": (17.3850, 78.4867),
    "chennai": (13.0827, 80.2707),
    "kolkata": (22.5726, 88.3639),
    "pune": (18.5204, 73.8567),
    "ahmedabad": (23.0225, 72.5714),
    "jaipur": (26.9124, 75.7873),
    "lucknow": (26.8467, 80.9462),
    "chandigarh": (30.7333, 76.7794),
    "kochi": (9.9312, 76.2673),
    "gurugram": (28.4595, 77.0266),
    "gurgaon": (28.4595, 77.0266),
    "noida": (28.5355, 77.3910),
    "indore": (22.7196, 75.8577),
    "bhopal": (23.2599, 77.4126),
    "coimbatore": (11.0168, 76.9558),
}


class CentroidDirectory:
    def __init__(self, table: dict[str, tuple[float, float]] | None = None) -> None:
        src = CITY_CENTROIDS if table is None else table
        self._table = {region_key(k): v for k, v in src.items() if region_key(k)}

    def lookup(self, region: str | None) -> tuple[float, float] | None:
        """
        'Pune' / 'pune, maharashtra' -> (lat, lon). First comma-separated part
        that names a known city wins.
        """
        if not region:
            return None
        key = region_key(region)
        if key in self._table:
            return self._table[key]
        for part in str(region).split(","):
            k = region_key(part)
            if k and k in self._table:
                return self._table[k]
        return None
