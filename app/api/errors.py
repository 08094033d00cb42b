# app/api/errors.py
import logging
from typing import Callable, Coroutine, Any

from fastapi import HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    """Requested product id does not exist (or is not a valid id)."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")


class ErrorTranslatingRoute(APIRoute):
    """
    Route class wrapping every handler of a router:
      ProductNotFoundError -> 404, empty body
      HTTPException / request validation -> FastAPI's own handlers
      anything else -> 500, empty body (traceback logged server-side only)
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def translating_handler(request: Request) -> Response:
            try:
                return await handler(request)
            except (HTTPException, RequestValidationError):
                raise
            except ProductNotFoundError as e:
                logger.info("%s %s -> 404 (%s)", request.method, request.url.path, e.product_id)
                return Response(status_code=404)
            except Exception:
                logger.exception("%s %s -> 500", request.method, request.url.path)
                return Response(status_code=500)

        return translating_handler
