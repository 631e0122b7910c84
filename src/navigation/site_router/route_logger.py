# route_logger.py
# Handles file I/O for computed routes.
# Saves and loads a RouteResult as a GeoJSON Feature.

import json
import logging
import os
from datetime import datetime
from typing import Optional

from .models import RouteResult
from .nav_config import RoutingOptions

logger = logging.getLogger(__name__)


class RouteLogger:
    """
    Persists routes to GeoJSON files that map tools (geojson.io etc.) can open.

    Args:
        config: RoutingOptions instance for file paths and directories.
    """

    def __init__(self, config: Optional[RoutingOptions] = None) -> None:
        self.config = config or RoutingOptions()
        os.makedirs(self.config.log_dir, exist_ok=True)

    def save_route(self, result: RouteResult, filepath: Optional[str] = None) -> bool:
        """
        Serialize a route to a GeoJSON Feature.

        Args:
            result:   RouteResult to save.
            filepath: Path override; uses config default if omitted.

        Returns:
            True on success, False on failure.
        """
        path = filepath or self.config.route_filepath
        feature = {
            "type": "Feature",
            "properties": {
                "saved_at": datetime.now().isoformat(),
                "maneuvers": [m.to_dict() for m in result.maneuvers],
            },
            "geometry": result.to_geojson(),
        }
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(feature, f, ensure_ascii=False, indent=2)
            logger.info(f"Route saved to {path} ({len(result.maneuvers)} maneuvers).")
            return True
        except OSError as e:
            logger.error(f"Failed to save route to {path}: {e}")
            return False

    def load_route(self, filepath: Optional[str] = None) -> Optional[RouteResult]:
        """
        Load a previously saved route.

        Args:
            filepath: Path override; uses config default if omitted.

        Returns:
            RouteResult, or None if loading failed.
        """
        path = filepath or self.config.route_filepath
        try:
            with open(path, "r", encoding="utf-8") as f:
                feature = json.load(f)
            result = RouteResult.from_dict({
                "geometry": feature["geometry"],
                "maneuvers": feature["properties"].get("maneuvers", []),
            })
            logger.info(f"Route loaded from {path} ({len(result.maneuvers)} maneuvers).")
            return result
        except (OSError, KeyError, ValueError) as e:
            logger.error(f"Failed to load route from {path}: {e}")
            return None
