"""
Geometry session adapters.
"""

import logging
from typing import Any, Optional

from core.interfaces import IGeometrySession


logger = logging.getLogger(__name__)


class AppletApiSession(IGeometrySession):
    """
    Adapts a GeoGebra applet API object (``evalCommand``/``reset``).

    The API handle arrives asynchronously once the applet has loaded; until
    then the session reports not ready.
    """

    def __init__(self, api: Optional[Any] = None):
        self.api = api

    def on_api_ready(self, api: Any) -> None:
        """Readiness signal from whatever hosts the applet."""
        self.api = api
        logger.info("GeoGebra applet API ready")

    def is_ready(self) -> bool:
        return self.api is not None

    def evaluate(self, command: str) -> bool:
        return bool(self.api.evalCommand(command))

    def reset(self) -> None:
        if self.api is not None:
            self.api.reset()
