"""
This is the note-syncing part of AppSync. Here, you'll find the following:

- ``model`` - Contains the ``Note`` and ``Folder`` entities and the results of parsing backend documents.
- ``subscription.py`` - Contains the ``Subscription`` handle returned when a list is opened.
- ``controller.py`` - Contains the ``NoteController`` class which streams and mutates notes and folders.

"""

from . import model
from . import subscription
from . import controller

__all__ = ['model', 'subscription', 'controller', ]
