"""
Contains the ``Folder`` class, which represents a folder of notes belonging to a user.
"""

from __future__ import annotations

from appsync.notes.model.record import Ok, Skipped


class Folder:
    """
    Represents a folder. The owning user's id is only stored in the backend document (``uid``); folders are fetched
    filtered by it.
    """

    def __init__(self, id: str, name: str):
        """
        Create a folder.

        :param id: the document id.
        :param name: the name of the folder.
        """
        self.id: str = id
        self.name: str = name

    @staticmethod
    def from_document(document_id: str, data: dict) -> Ok | Skipped:
        """
        Creates a Folder from a backend document.

        :param document_id: the id of the document.
        :param data: the document's fields.
        :return: ``Ok`` wrapping the folder, or ``Skipped`` if the name is missing.
        """
        name = data.get('name')
        if not isinstance(name, str):
            return Skipped(document_id, 'missing or invalid name')
        return Ok(Folder(id=document_id, name=name))

    def to_document(self, owner_uid: str | None = None) -> dict:
        """
        Converts this folder to the fields stored in the backend.

        :param owner_uid: the id of the user owning this folder, if it should be written.
        """
        data = {'name': self.name}
        if owner_uid is not None:
            data['uid'] = owner_uid
        return data

    def __eq__(self, other):
        if not isinstance(other, Folder):
            return NotImplemented
        return self.id == other.id and self.name == other.name

    def __hash__(self):
        return hash((self.id, self.name))

    def __repr__(self):
        return 'Folder(id={!r}, name={!r})'.format(self.id, self.name)

    def __str__(self):
        return self.name
