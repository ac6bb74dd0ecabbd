"""
Contains the ``SessionHandle`` class.
"""

from __future__ import annotations


class SessionHandle:
    """
    Proof of a signed in user, issued by the identity provider.
    """

    def __init__(self, uid: str, email: str = '', id_token: str = '', refresh_token: str = ''):
        """
        :param uid: the user's stable id.
        :param email: the user's email address.
        :param id_token: short-lived token used to talk to the document store as this user.
        :param refresh_token: long-lived token used to restore the session on the next start.
        """
        self.uid: str = uid
        self.email: str = email
        self.id_token: str = id_token
        self.refresh_token: str = refresh_token

    def __eq__(self, other):
        if not isinstance(other, SessionHandle):
            return NotImplemented
        return self.uid == other.uid

    def __hash__(self):
        return hash(self.uid)

    def __repr__(self):
        return 'SessionHandle(uid={!r}, email={!r})'.format(self.uid, self.email)
