"""
HydroMinder backend package.

The FastAPI factory lives in `hydrominder.application` (`create_app` builds a
fresh instance); `hydrominder.main.app` is the default one configured from
the environment.
"""
