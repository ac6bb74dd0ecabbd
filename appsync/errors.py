"""
Exceptions raised or reported by AppSync.
"""

from __future__ import annotations


class AppSyncError(Exception):
    """
    Base class for all AppSync errors.
    """

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message: str = message

    def __str__(self):
        return self.message


class ValidationError(AppSyncError):
    """
    A local precondition failed (e.g. the password is too short). Never reaches the backend.
    """


class AuthError(AppSyncError):
    """
    The identity provider rejected a sign up, log in or log out request.
    """


class SyncDeliveryError(AppSyncError):
    """
    A subscription failed to deliver a snapshot. Logged only; the subscription stays open.
    """


class SubscriptionError(AppSyncError):
    """
    A subscription was opened for a list which already has an open subscription.
    """


class MutationError(AppSyncError):
    """
    A create, update or delete request failed.

    :param operation: the operation which failed, e.g. ``add_note``.
    :param collection: the collection the operation was issued against.
    :param document_id: the id of the document, if known.
    :param cause: the exception raised by the document store.
    """

    def __init__(self, operation: str, collection: str, document_id: str = '', cause: Exception | None = None):
        message = 'Error during {} on {}{}: {}'.format(
            operation, collection, '/' + document_id if document_id else '', cause)
        super().__init__(message)
        self.operation: str = operation
        self.collection: str = collection
        self.document_id: str = document_id
        self.cause: Exception | None = cause
