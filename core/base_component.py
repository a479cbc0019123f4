"""
Base component class for long-lived service components.

Provides a common lifecycle (initialize, start, stop, health check) with
logging, so the web layer can start and health-check components uniformly.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from datetime import datetime


class BaseComponent(ABC):
    """Base class for service components."""

    def __init__(self, component_name: str, config: Optional[Dict[str, Any]] = None):
        """Initialize the base component.

        Args:
            component_name: Name of the component for logging
            config: Configuration dictionary for the component
        """
        self.component_name = component_name
        self.config = config or {}
        self.logger = logging.getLogger(f"geogebra_nl.{component_name}")
        self.is_initialized = False
        self.is_running = False
        self.start_time: Optional[datetime] = None

    @abstractmethod
    async def initialize(self) -> bool:
        """Prepare resources. Returns True on success."""
        pass

    @abstractmethod
    async def start(self) -> bool:
        """Begin serving. Returns True on success."""
        pass

    @abstractmethod
    async def stop(self) -> bool:
        """Release resources. Returns True on success."""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Report component health."""
        pass

    async def __aenter__(self):
        await self.ensure_started()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    def get_uptime(self) -> float:
        """Get component uptime in seconds, or 0 if not started."""
        if self.start_time is None:
            return 0.0
        return (datetime.now() - self.start_time).total_seconds()

    def get_status(self) -> Dict[str, Any]:
        """Get current component status."""
        return {
            'component_name': self.component_name,
            'is_initialized': self.is_initialized,
            'is_running': self.is_running,
            'uptime_seconds': self.get_uptime(),
            'start_time': self.start_time.isoformat() if self.start_time else None
        }

    async def ensure_started(self) -> bool:
        """Initialize if needed, then start.

        Returns:
            True if the component is running afterwards
        """
        if self.is_running:
            return True

        if not self.is_initialized:
            self.is_initialized = await self.initialize()
            if not self.is_initialized:
                self.logger.error(f"Component {self.component_name} initialization failed")
                return False

        if not await self.start():
            self.logger.error(f"Component {self.component_name} start failed")
            return False

        self.is_running = True
        self.start_time = datetime.now()
        self.logger.info(f"Component {self.component_name} started")
        return True

    async def shutdown(self) -> bool:
        """Stop the component if it is running."""
        if not self.is_running and not self.is_initialized:
            return True

        result = await self.stop()
        if result:
            self.is_running = False
            self.is_initialized = False
            self.logger.info(f"Component {self.component_name} stopped")
        else:
            self.logger.error(f"Component {self.component_name} stop failed")
        return result
