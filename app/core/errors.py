"""
Application error taxonomy.

Services raise these synchronously; the handler registered in main.py turns
them into structured JSON responses:

    {"code": "VALIDATION_ERROR", "message": "Validation failed",
     "details": {"targetStageId": ["Target stage not found in this job pipeline"]}}
"""

import logging
from typing import Dict, List, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying an HTTP status, a machine code and optional field details."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_payload(self) -> dict:
        payload = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    """Malformed or missing input. `details` maps field name -> messages."""

    status_code = 422
    code = "VALIDATION_ERROR"

    def __init__(self, details: Dict[str, List[str]]):
        super().__init__("Validation failed", details)


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class AuthorizationError(AppError):
    """Cross-tenant access or role violation."""

    status_code = 403
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class AuthenticationError(AppError):
    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)
