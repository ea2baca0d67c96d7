"""FastAPI dependencies."""

from fastapi import Request

from editorstore.storage import LocalStorage


def get_storage(request: Request) -> LocalStorage:
    """The store opened by the app lifespan."""
    return request.app.state.storage
