"""
Explicit success/failure value for a generation attempt.

Generation stages raise; the generation boundary captures the outcome in a
MapResult so the fallback between generators reads as a value combinator
instead of nested try/except blocks.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..errors import GenerationExhausted, MapGenerationError
from ..models import MapData


@dataclass
class MapResult:
    """Either a validated map or the error that prevented one."""

    map_data: Optional[MapData] = None
    error: Optional[MapGenerationError] = None
    generator: str = ""
    attempts: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, map_data: MapData, generator: str) -> "MapResult":
        return cls(map_data=map_data, generator=generator, attempts=[generator])

    @classmethod
    def failure(cls, error: MapGenerationError, generator: str) -> "MapResult":
        return cls(error=error, generator=generator, attempts=[generator])

    @classmethod
    def capture(cls, generator: str, build: Callable[[], MapData]) -> "MapResult":
        """Run ``build`` and wrap its outcome; only engine errors are captured."""
        try:
            return cls.success(build(), generator)
        except MapGenerationError as e:
            return cls.failure(e, generator)

    @property
    def ok(self) -> bool:
        return self.error is None and self.map_data is not None

    def or_else(self, fallback: Callable[[MapGenerationError], "MapResult"]) -> "MapResult":
        """
        Return self on success, otherwise the result of ``fallback(error)``.

        The returned result records every generator attempted.
        """
        if self.ok:
            return self
        result = fallback(self.error)
        result.attempts = self.attempts + result.attempts
        return result

    def unwrap(self) -> MapData:
        """Return the map or raise the carried error."""
        if self.ok:
            return self.map_data
        if self.error is None:
            raise GenerationExhausted(["No map was produced"])
        raise self.error

    def errors(self) -> List[str]:
        if self.error is None:
            return []
        return list(getattr(self.error, "errors", None) or [str(self.error)])
