"""Turning handler results into DRF responses."""

from __future__ import annotations

from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.application.result import ErrorCode, ResultDto

ERROR_STATUS = {
    ErrorCode.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.BUSINESS_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_status(result: ResultDto) -> int:
    return ERROR_STATUS.get(result.error_code, status.HTTP_400_BAD_REQUEST)


def result_response(result: ResultDto, success_status: int = status.HTTP_200_OK) -> Response:
    if result.success:
        return Response(result.to_dict(), status=success_status)
    return Response(result.to_dict(), status=error_status(result))
