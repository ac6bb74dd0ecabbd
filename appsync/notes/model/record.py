"""
Contains the ``Ok`` and ``Skipped`` classes, the result of parsing a single backend document into an entity.
"""

from __future__ import annotations

from typing import Iterable, List


class Ok:
    """
    A document which was successfully parsed.
    """

    ok: bool = True

    def __init__(self, record):
        self.record = record

    def __repr__(self):
        return 'Ok({!r})'.format(self.record)


class Skipped:
    """
    A document which could not be parsed and was left out of the snapshot list.
    """

    ok: bool = False

    def __init__(self, document_id: str, reason: str):
        """
        :param document_id: the id of the malformed document.
        :param reason: why the document was skipped.
        """
        self.document_id: str = document_id
        self.reason: str = reason

    def __repr__(self):
        return 'Skipped({!r}, {!r})'.format(self.document_id, self.reason)


def partition(results: Iterable[Ok | Skipped]) -> tuple[List, List[Skipped]]:
    """
    Split parse results into records and skipped documents, preserving order.

    :param results: the parse results.

    :returns:

        - records (:py:class:`List`) - the parsed entities.
        - skipped (:py:class:`List[Skipped]`) - the documents which were left out.

    """
    records = []
    skipped = []
    for result in results:
        if result.ok:
            records.append(result.record)
        else:
            skipped.append(result)
    return records, skipped
