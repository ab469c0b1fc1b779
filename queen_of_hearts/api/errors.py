from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import HTTPException, status

from queen_of_hearts.domain import DomainValidationError
from queen_of_hearts.service import GameCompletedError, GameNotFoundError, WeekNotFoundError


def api_error(
    *,
    code: str,
    message: str,
    details: Any | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "code": code,
            "message": message,
            "details": details,
        },
    )


@contextmanager
def ledger_errors(**details: Any) -> Iterator[None]:
    """Translate service exceptions into the API error shape."""
    try:
        yield
    except GameNotFoundError as exc:
        raise api_error(
            code="game_not_found", message=str(exc), details=details, status_code=status.HTTP_404_NOT_FOUND
        ) from exc
    except WeekNotFoundError as exc:
        raise api_error(
            code="week_not_found", message=str(exc), details=details, status_code=status.HTTP_404_NOT_FOUND
        ) from exc
    except GameCompletedError as exc:
        raise api_error(
            code="game_already_completed", message=str(exc), details=details, status_code=status.HTTP_409_CONFLICT
        ) from exc
    except DomainValidationError as exc:
        raise api_error(code="validation_error", message=str(exc), details=details) from exc
