"""Smoke tests: package and main modules import without error."""


def test_package_imports() -> None:
    """Package can be imported and exposes a version."""
    import editorstore

    assert editorstore.__file__ is not None
    assert editorstore.__version__


def test_app_has_routes() -> None:
    """The FastAPI app registers every router."""
    from editorstore.main import app

    paths = {route.path for route in app.routes}
    assert {"/health", "/api/projects", "/api/files", "/api/settings", "/api/changes", "/api/sync/apply"} <= paths
