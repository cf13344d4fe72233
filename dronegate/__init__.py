"""Gateway relaying drone telemetry and waypoint instructions over WebSocket, HTTP and Redis."""

__version__ = "0.1.0"