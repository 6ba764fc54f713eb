"""Runtime package: logging setup, env-driven settings and dependency wiring."""

__all__: list[str] = []
