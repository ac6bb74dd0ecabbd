"""
Contains the ``Note`` class, which represents a note stored in the document store.
"""

from __future__ import annotations

from datetime import datetime

from appsync.helpers import DateUtil
from appsync.notes.model.record import Ok, Skipped


class Note:
    """
    Represents a note. A note is never changed in place; editing a note produces a new ``Note`` with the same id which
    replaces the stored document.
    """

    def __init__(self,
                 id: str = '',
                 title: str = '',
                 content: str = '',
                 timestamp: datetime | None = None):
        """
        Create a new note.

        :param id: the document id. Empty until the note has been persisted.
        :param title: the title of the note.
        :param content: the body of the note.
        :param timestamp: when the note was created. Defaults to now.
        """
        self.id: str = id
        self.title: str = title
        self.content: str = content
        self.timestamp: datetime = DateUtil.now() if timestamp is None else DateUtil.to_utc(timestamp)

    @property
    def persisted(self) -> bool:
        """
        True once the backend has assigned this note an id.
        """
        return self.id != ''

    @staticmethod
    def from_document(document_id: str, data: dict) -> Ok | Skipped:
        """
        Creates a Note from a backend document.

        :param document_id: the id of the document.
        :param data: the document's fields.
        :return: ``Ok`` wrapping the note, or ``Skipped`` if a required field is missing or malformed.
        """
        title = data.get('title')
        content = data.get('content')
        if not isinstance(title, str):
            return Skipped(document_id, 'missing or invalid title')
        if not isinstance(content, str):
            return Skipped(document_id, 'missing or invalid content')
        if 'timestamp' not in data:
            return Skipped(document_id, 'missing timestamp')
        timestamp = DateUtil.resolve(data['timestamp'])
        if timestamp is None:
            return Skipped(document_id, 'timestamp is not a point in time: {!r}'.format(data['timestamp']))
        return Ok(Note(id=document_id, title=title, content=content, timestamp=timestamp))

    def to_document(self) -> dict:
        """
        Converts this note to the fields stored in the backend. All fields are always present, since updates overwrite
        the whole document.
        """
        return {
            'title': self.title,
            'content': self.content,
            'timestamp': self.timestamp
        }

    def edited(self, title: str, content: str) -> Note:
        """
        Returns the replacement value for this note after an edit. The id and timestamp are kept.
        """
        return Note(id=self.id, title=title, content=content, timestamp=self.timestamp)

    def __eq__(self, other):
        if not isinstance(other, Note):
            return NotImplemented
        return (self.id, self.title, self.content, self.timestamp) == (
            other.id, other.title, other.content, other.timestamp)

    def __hash__(self):
        return hash((self.id, self.title, self.content, self.timestamp))

    def __repr__(self):
        return 'Note(id={!r}, title={!r}, timestamp={})'.format(self.id, self.title, self.timestamp.isoformat())

    def __str__(self):
        return self.title
