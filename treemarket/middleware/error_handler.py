"""
Global error handling middleware.
"""
import logging
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

import httpx
from pymongo.errors import PyMongoError

from treemarket.domain.errors import MarketError
from treemarket.infrastructure.species_client import SpeciesAPIError


logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the JSON body every failed request returns."""
    return JSONResponse(status_code=status_code, content={"error": message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report malformed bodies and query strings as 400s.

    FastAPI answers these with 422 by default; clients of this API expect
    the same 400 + ``error`` shape as every other validation failure.
    """
    problems = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"] if item != "body")
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])
    logger.warning(
        f"Request validation failed: {problems}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(problems) or "Invalid request")


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches domain and unhandled exceptions and returns consistent error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Process the request and handle any exceptions.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        try:
            response = await call_next(request)
            return response

        except MarketError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(
                f"{type(e).__name__}: {e.message}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "status_code": e.status_code,
                }
            )
            return error_response(e.status_code, e.message)

        except (SpeciesAPIError, httpx.HTTPError) as e:
            logger.error(
                f"Species API error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Species lookup failed")

        except PyMongoError as e:
            logger.exception(
                f"Database error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

        except Exception as e:
            # Log unexpected errors
            logger.exception(
                f"Unhandled exception: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
