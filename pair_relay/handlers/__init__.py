"""Connection handlers."""

__all__: list[str] = []
