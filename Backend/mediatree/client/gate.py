import logging
from typing import Any, Awaitable, Callable, Hashable

logger = logging.getLogger(__name__)


class RequestGate:
    """
    Coordinates asynchronous requests per operation name ("browse", "search"...).

    - Issuing the same target while it is still in flight is a no-op.
    - A newer request supersedes older ones of the same operation: their
      results (or errors) are discarded, whatever order they complete in.

    ``submit`` returns None for requests whose result must not be rendered.
    Nothing is cancelled; a stuck request simply stops mattering.
    """

    def __init__(self):
        self._in_flight: dict[str, Hashable] = {}
        self._latest: dict[str, int] = {}

    def is_busy(self, operation: str) -> bool:
        return operation in self._in_flight

    async def submit(
        self,
        operation: str,
        target: Hashable,
        call: Callable[[], Awaitable[Any]],
    ) -> Any | None:
        if operation in self._in_flight and self._in_flight[operation] == target:
            logger.debug("Ignoring duplicate %s request for %r", operation, target)
            return None

        generation = self._latest.get(operation, 0) + 1
        self._latest[operation] = generation
        self._in_flight[operation] = target

        try:
            result = await call()
        except Exception as e:
            if self._latest[operation] != generation:
                logger.debug("Discarding error from superseded %s request: %s", operation, e)
                return None
            raise
        finally:
            if self._latest[operation] == generation:
                del self._in_flight[operation]

        if self._latest[operation] != generation:
            logger.debug("Discarding superseded %s result for %r", operation, target)
            return None
        return result
