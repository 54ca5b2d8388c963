"""
Domain errors and the handlers that turn them into JSON responses.

Every error response has the shape ``{"error": "<message>"}``, optionally with
a ``details`` field.
"""
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)


class CodeMentorError(Exception):
    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class InvalidRequest(CodeMentorError):
    status_code = HTTP_400_BAD_REQUEST
    message = "Invalid request"


class InvalidProjectId(CodeMentorError):
    status_code = HTTP_400_BAD_REQUEST
    message = "Invalid project ID format"


class ProjectNotFound(CodeMentorError):
    status_code = HTTP_404_NOT_FOUND
    message = "Project not found"


class FileNotFoundInProject(CodeMentorError):
    status_code = HTTP_404_NOT_FOUND
    message = "File not found"


class PathIsDirectory(CodeMentorError):
    status_code = HTTP_400_BAD_REQUEST
    message = "Path is a directory, not a file"


class PathOutsideProject(CodeMentorError):
    status_code = HTTP_400_BAD_REQUEST
    message = "Path resolves outside the project"


class InvalidArchive(CodeMentorError):
    status_code = HTTP_400_BAD_REQUEST
    message = "Invalid ZIP archive"


class UploadTooLarge(CodeMentorError):
    status_code = HTTP_413_REQUEST_ENTITY_TOO_LARGE
    message = "Upload too large"


class InvalidRepositoryUrl(CodeMentorError):
    status_code = HTTP_400_BAD_REQUEST
    message = "Invalid repository URL"


class CloneError(CodeMentorError):
    message = "Failed to clone repository"


class LLMError(CodeMentorError):
    message = "LLM request failed"


class LLMRateLimitError(LLMError):
    message = "LLM rate limit exceeded"


class ResponseParseError(CodeMentorError):
    message = "Could not parse the model response"


class SpeechError(CodeMentorError):
    message = "Failed to convert text to speech"


def error_body(message: str, details: Any = None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CodeMentorError)
    async def code_mentor_error_handler(request: Request, exc: CodeMentorError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.details))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = []
        for err in exc.errors():
            details.append({
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
            })
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content=error_body("Invalid request", details),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Internal server error"),
        )
