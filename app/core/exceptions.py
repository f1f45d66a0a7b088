from typing import Any, Dict, Optional

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def detail(self) -> Any:
        return self.message


class ValidationError(ServiceError):
    """Outing request failed intake validation. errors maps field name -> message."""

    def __init__(self, errors: Dict[str, str], message: str = "Invalid outing request") -> None:
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.errors = dict(errors)

    @property
    def detail(self) -> Any:
        return {"message": self.message, "errors": self.errors}


class WorkflowError(ServiceError):
    """Base for errors raised while applying an approval decision."""


class UnauthorizedTransition(WorkflowError):
    def __init__(self, actor_role: str, stage: str) -> None:
        super().__init__(
            f"Role '{actor_role}' cannot act on a request at stage '{stage}'",
            status.HTTP_403_FORBIDDEN,
        )
        self.actor_role = actor_role
        self.stage = stage


class InvalidStateTransition(WorkflowError):
    def __init__(self, message: str = "Request is no longer pending") -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class RequestNotFound(ServiceError):
    def __init__(self, message: str = "Outing request not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ProfileIncomplete(ServiceError):
    def __init__(self, message: str, completion: Optional[int] = None) -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)
        self.completion = completion


class BackendUnavailable(ServiceError):
    """Database could not be reached. Nothing was committed; the caller may retry."""

    def __init__(self, message: str = "Database is temporarily unavailable. Please retry.") -> None:
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE)
