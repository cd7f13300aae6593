"""Error types raised by the map generation engine."""

from typing import List, Optional


class MapGenerationError(Exception):
    """Base class for all map generation failures."""


class InsufficientPoints(MapGenerationError):
    """Triangulation was requested with fewer than three points."""

    def __init__(self, count: int):
        self.count = count
        super().__init__(f"Triangulation needs at least 3 points, got {count}")


class TriangulationCollapsed(MapGenerationError):
    """A rebuild produced no triangles."""

    def __init__(self, stage: str, point_count: Optional[int] = None):
        self.stage = stage
        self.point_count = point_count
        super().__init__(
            f"Triangulation collapsed during {stage} ({point_count} points)"
        )


class ValidationFailed(MapGenerationError):
    """A generated map violates one or more structural invariants."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            "Map validation failed:\n" + "\n".join(self.errors)
        )


class GenerationExhausted(MapGenerationError):
    """The primary generator and its fallback both failed."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            f"Map generation exhausted all generators ({len(self.errors)} errors)"
        )
