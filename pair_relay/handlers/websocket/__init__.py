"""WebSocket relay handlers."""

__all__: list[str] = []
