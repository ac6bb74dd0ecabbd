"""
This is the main package for AppSync.

- ``auth`` - account creation, log in and the session.
- ``notes`` - streaming and mutating notes and folders.
- ``store`` - the document store boundary and its backends.
- ``gui`` - the AppSync GUI.
- ``cli`` - the AppSync command line interface.
- ``config.py`` - deployment and user settings.
- ``context.py`` - the application context which owns the services.
- ``errors.py`` - the exception hierarchy.
- ``helpers`` - helpers used throughout AppSync.

"""

from . import helpers

__all__ = ['helpers', ]
