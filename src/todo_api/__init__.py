"""
Todo API package.

FastAPI service exposing create, cursor-paginated read, update and delete of
todos stored in SQLite. Build the ASGI app with ``todo_api.main.create_app``
or use the module-level ``todo_api.main.app``.
"""

__version__ = "0.1.0"
