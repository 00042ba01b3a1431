from typing import Iterator
from fastapi import Request
from sqlalchemy.orm.session import Session

from app.src import schemas
from app.src.db import sessionMaker


def requestInfo(request: Request) -> schemas.RequestInfo:
    """
    Extract metadata about the incoming request.

    Args:
        request (Request): FastAPI request object.

    Returns:
        schemas.RequestInfo: Pydantic model containing:
            - method (str): HTTP method (GET, POST, etc.).
            - path (str): Path portion of the request URL.
            - app_id (int): Application ID from app state.
    """
    return schemas.RequestInfo(
        method=request.method,
        path=request.url.path,
        app_id=request.scope["app"].state.id,
    )


def dbSession() -> Iterator[Session]:
    """
    Provide a store session scoped to one request.

    The session borrows a pooled connection when it first touches the store
    and always gives it back when the request finishes, whatever the outcome.
    """
    session = sessionMaker()
    try:
        yield session
    finally:
        session.close()
