"""
Default application instance, configured from the environment.

Serve with `uvicorn hydrominder.main:app`. Importing this module opens the
configured reminder store; use `hydrominder.application.create_app` to build
an app without side effects at import.
"""
from .application import create_app

app = create_app()
