"""
The document store boundary. Here, you'll find the following:

- ``base.py`` - Contains the ``DocumentStore`` interface and collection path helpers.
- ``memory.py`` - Contains ``MemoryDocumentStore``, an in-process store with live queries.
- ``firestore.py`` - Contains ``FirestoreDocumentStore``, backed by Cloud Firestore. Not imported here so the
  Firestore client is only loaded when it is used.

"""

from . import base, memory

__all__ = ['base', 'memory', ]
