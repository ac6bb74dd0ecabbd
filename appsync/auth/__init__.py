"""
This is the authentication part of AppSync. Here, you'll find the following:

- ``session.py`` - Contains the ``SessionHandle`` class which identifies a signed in user.
- ``provider.py`` - Contains the ``IdentityProvider`` interface and the Firebase and in-memory providers.
- ``controller.py`` - Contains the ``AuthController`` class which holds the current session and the last error.

"""

from . import session
from . import provider
from . import controller

__all__ = ['session', 'provider', 'controller', ]
