"""
Command handler boundary

Concrete handlers implement ``_handle``; ``handle`` logs the command,
converts raised application errors into failed results and turns any
unexpected exception into a generic ``internal_error`` failure.
"""

import logging

from shared.application.exceptions import ApplicationError
from shared.application.result import ErrorCode, ResultDto

logger = logging.getLogger(__name__)


class CommandHandler:
    internal_error_message = "An unexpected error occurred while processing the request"

    def handle(self, command, current_user) -> ResultDto:
        name = type(command).__name__
        logger.info(f"Handling {name} for user {current_user.user_id}")
        try:
            result = self._handle(command, current_user)
        except ApplicationError as exc:
            logger.warning(f"{name} rejected ({exc.error_code}): {exc.message}")
            return ResultDto.from_error(exc)
        except Exception as exc:
            logger.error(f"Unexpected error while handling {name}: {exc}", exc_info=True)
            return ResultDto.failure(self.internal_error_message, ErrorCode.INTERNAL)

        if result.success:
            logger.info(f"{name} succeeded: {result.message}")
        else:
            logger.warning(f"{name} failed ({result.error_code}): {'; '.join(result.errors)}")
        return result

    def _handle(self, command, current_user) -> ResultDto:
        raise NotImplementedError
