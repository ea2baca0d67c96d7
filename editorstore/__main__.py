"""Run the local API: python -m editorstore."""

import uvicorn

from editorstore.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("editorstore.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
