"""
svcrotate.security.secrets
==========================

Implements the SecretValue class, a scoped wrapper for sensitive values such as passphrases,
account names and passwords.
"""


import contextlib
import threading


from ..exceptions import SecretScrubbedError, verify_type
from . import encryption


__author__ = 'Aaron Hosford'
__all__ = [
    'SecretValue',
]


# The session key is generated on first use and never leaves process memory.
_session_key = None
_SESSION_KEY_LOCK = threading.Lock()


def _get_session_key():
    global _session_key
    with _SESSION_KEY_LOCK:
        if _session_key is None:
            _session_key = encryption.new_session_key()
        return _session_key


class SecretValue:
    """
    A SecretValue holds a sensitive value in encrypted form. The plaintext is only ever exposed
    through reveal(), which yields a mutable buffer that is overwritten with zeros when the with
    block exits, whether normally or due to an error:

        with secret.reveal() as buffer:
            use(buffer)

    Once scrub() has been called, the secret is destroyed and any further attempt to reveal it
    raises SecretScrubbedError. A SecretValue can also be used as a context manager itself, in
    which case it is scrubbed when the with block exits.
    """

    __slots__ = ('_token',)

    @classmethod
    def from_buffer(cls, buffer):
        """
        Create a new SecretValue from a mutable buffer, scrubbing the buffer afterward.

        :param buffer: A bytearray containing the plaintext.
        :return: A new SecretValue.
        """
        verify_type(buffer, bytearray)
        try:
            return cls(buffer)
        finally:
            encryption.zero_buffer(buffer)

    def __init__(self, value):
        verify_type(value, (str, bytes, bytearray))
        self._token = encryption.protect(value, _get_session_key())
        del value

    def __del__(self):
        self._token = None

    @property
    def is_scrubbed(self):
        """Whether the secret has been destroyed."""
        return self._token is None

    @contextlib.contextmanager
    def reveal(self):
        """
        Temporarily expose the plaintext as a bytearray, which is zeroed when the with block exits.
        """
        token = self._token
        if token is None:
            raise SecretScrubbedError("The secret has already been scrubbed.")
        buffer = encryption.unprotect(token, _get_session_key())
        try:
            yield buffer
        finally:
            encryption.zero_buffer(buffer)
            del buffer

    def copy(self):
        """
        Return an independent SecretValue holding the same plaintext. Scrubbing one does not affect
        the other.

        :return: A new SecretValue.
        """
        with self.reveal() as buffer:
            return type(self)(buffer)

    def scrub(self):
        """Destroy the secret. Calling this more than once has no further effect."""
        self._token = None

    def __enter__(self):
        return self

    # noinspection PyUnusedLocal
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.scrub()
        return False  # Do not suppress errors

    def __str__(self):
        # We hide the value on purpose, to prevent accidentally displaying it.
        return '********'

    def __repr__(self):
        if self._token is None:
            return type(self).__name__ + "(<scrubbed>)"
        return type(self).__name__ + "('********')"

    def __reduce__(self):
        raise TypeError("SecretValue instances cannot be pickled.")
