# nav_config.py
# All tuneable settings in one place.
# Pass a RoutingOptions instance to every module that needs settings.

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from .models import Entrance

# Pick up MAPBOX_ACCESS_TOKEN etc. from a local .env file
load_dotenv()


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_SNAP_M: float = 200.0
DEFAULT_DIRECTIONS_URL: str = "https://api.mapbox.com/directions/v5"
DEFAULT_PROFILE: str = "driving"


def _env_token() -> str:
    return os.getenv("MAPBOX_ACCESS_TOKEN", "")


def _env_directions_url() -> str:
    return os.getenv("MAPBOX_DIRECTIONS_URL", DEFAULT_DIRECTIONS_URL)


# ---------------------------------------------------------------------------
# Main config
# ---------------------------------------------------------------------------

@dataclass
class RoutingOptions:
    # Snapping
    max_snap: float = DEFAULT_MAX_SNAP_M        # metres; further away → public roads
    entrances: List[Entrance] = field(default_factory=list)

    # Directions provider
    mapbox_access_token: str = field(default_factory=_env_token)
    directions_base_url: str = field(default_factory=_env_directions_url)
    profile: str = DEFAULT_PROFILE
    request_timeout_s: float = 10.0

    # Execution
    max_workers: int = 1

    # Logging
    log_dir: str = "."                          # directory for saved routes
    route_filename: str = "route.geojson"

    def __post_init__(self) -> None:
        if self.max_snap < 0:
            raise ValueError("max_snap must be non-negative.")
        self.entrances = [
            e if isinstance(e, Entrance) else Entrance.from_dict(e)
            for e in self.entrances
        ]

    @property
    def active_entrance(self):
        """Only the first entrance is ever used."""
        return self.entrances[0] if self.entrances else None

    @property
    def route_filepath(self) -> str:
        return os.path.join(self.log_dir, self.route_filename)

    @staticmethod
    def from_dict(d: dict) -> "RoutingOptions":
        """Build options from a plain dict; camelCase keys are accepted too."""
        kwargs = {}
        if "max_snap" in d or "maxSnap" in d:
            kwargs["max_snap"] = float(d.get("max_snap", d.get("maxSnap")))
        if "entrances" in d:
            kwargs["entrances"] = list(d["entrances"])
        if "mapbox_access_token" in d or "mapboxAccessToken" in d:
            kwargs["mapbox_access_token"] = d.get("mapbox_access_token", d.get("mapboxAccessToken"))
        for key in ("directions_base_url", "profile", "request_timeout_s",
                    "max_workers", "log_dir", "route_filename"):
            if key in d:
                kwargs[key] = d[key]
        return RoutingOptions(**kwargs)
