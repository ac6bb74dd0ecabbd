"""
This is the model of the note-syncing part of AppSync. Here, you'll find the following:

- ``note.py`` - Contains the ``Note`` class that represents a note.
- ``folder.py`` - Contains the ``Folder`` class which represents a user's folder of notes.
- ``record.py`` - Contains the ``Ok`` and ``Skipped`` parse results used when reading documents from the backend.

"""

from . import note, folder, record

__all__ = ['note', 'folder', 'record', ]
