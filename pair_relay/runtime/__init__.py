"""Runtime package: settings loading, logging and dependency wiring."""

__all__: list[str] = []
