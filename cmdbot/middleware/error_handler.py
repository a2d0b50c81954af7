import logging
from typing import Any

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware:
    def __init__(self) -> None:
        self.error_count = 0

    async def __call__(self, event_context: dict[str, Any], phase: str) -> None:
        if phase != "post":
            return

        error = event_context.get("error")
        if error is None:
            return

        self.error_count += 1
        event_name = event_context.get("event_name", "unknown")
        logger.error(
            f"Error in event {event_name}: {error}",
            exc_info=(type(error), error, error.__traceback__),
        )
