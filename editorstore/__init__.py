"""Local-first storage for the editor: projects, files, settings and the pending-change log."""

__version__ = "0.1.0"
