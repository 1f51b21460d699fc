"""
svcrotate.vault
===============

Manages the unlocked window of the credential vault.

The VaultSession owns the only handle to the decrypted vault. It is opened once with the master
passphrase, searched for the account names discovered on the fleet, and closed as soon as the
entries it returned have been correlated. Closing the session also scrubs every entry it handed
out, so anything that needs a password past that point must take its own copy first.
"""


import logging


from .abc.prompts import SecretProvider
from .abc.vaults import SecretStore
from .accounts import leaf_name
from .exceptions import (OperationCancelledError, VaultClosedError, VaultNotOpenError, VaultOpenError,
                         WrongPassphraseError, verify_type)
from .security.encryption import from_bytes
from .security.secrets import SecretValue


__author__ = 'Aaron Hosford'
__all__ = [
    'VaultEntry',
    'VaultSession',
    'search_terms',
]


log = logging.getLogger(__name__)


class VaultEntry:
    """
    A single record from the vault. All three fields are sensitive and are held as SecretValues.
    """

    __slots__ = ('_title', '_account_name', '_password', '_key')

    def __init__(self, title, account_name, password, key=None):
        for value in (title, account_name, password):
            verify_type(value, SecretValue)
        self._title = title
        self._account_name = account_name
        self._password = password
        self._key = key

    @classmethod
    def from_plaintext(cls, title, account_name, password, key=None):
        """
        Create a new entry from plaintext field values, wrapping each in a SecretValue.

        :param title: The entry's title.
        :param account_name: The entry's user name.
        :param password: The entry's password.
        :param key: The store's identifier for the record, e.g. a KeePass entry UUID.
        :return: A new VaultEntry.
        """
        return cls(SecretValue(title or ''), SecretValue(account_name or ''), SecretValue(password or ''), key)

    @property
    def key(self):
        """
        The store's identifier for the record, or None if the store has none. Two entries with the
        same key were read from the same record, e.g. by two overlapping searches.
        """
        return self._key

    @property
    def title(self):
        return self._title

    @property
    def account_name(self):
        return self._account_name

    @property
    def password(self):
        return self._password

    @property
    def leaf(self):
        """
        The leaf name of the entry's account. This is the one derived value that leaves the entry
        in plaintext, since it is what discovered accounts are matched on.
        """
        with self._account_name.reveal() as buffer:
            return leaf_name(from_bytes(buffer))

    @property
    def is_scrubbed(self):
        """Whether the entry's fields have been destroyed."""
        return self._password.is_scrubbed

    def scrub(self):
        """Destroy all three fields."""
        self._title.scrub()
        self._account_name.scrub()
        self._password.scrub()

    def __repr__(self):
        # We hide the fields on purpose, to prevent accidentally displaying them.
        return type(self).__name__ + "('********', '********', '********')"


def search_terms(records):
    """
    Return the distinct leaf account names of the records, in the order they were first seen.
    These are the terms the vault is searched with. Spellings that differ only in case are all
    kept, since vault searches may be case-sensitive.

    :param records: An iterable of ServiceAccountRecords.
    :return: A list of leaf names.
    """
    seen = set()
    results = []
    for record in records:
        leaf = record.leaf
        if leaf and leaf not in seen:
            seen.add(leaf)
            results.append(leaf)
    return results


class VaultSession:
    """
    A VaultSession manages the lifecycle of one unlocked vault. It can be opened once and closed
    once; it cannot be reopened. The typical usage looks like this:

        with VaultSession(store, path) as session:
            session.unlock(provider)
            entries = session.search('svc-alpha')

    Leaving the with block closes the session if it was opened.
    """

    def __init__(self, store, path):
        verify_type(store, SecretStore)
        verify_type(path, str, non_empty=True)
        self._store = store
        self._path = path
        self._handle = None
        self._closed = False
        self._entries = []

    @property
    def path(self):
        """The path to the vault file."""
        return self._path

    @property
    def is_open(self):
        """Whether the vault is currently unlocked."""
        return self._handle is not None

    @property
    def is_closed(self):
        """Whether the session has been closed."""
        return self._closed

    def verify_open(self):
        """
        Raise an exception if the session is not open.
        """
        if self._handle is None:
            raise VaultNotOpenError("The vault session is not currently open.")

    def open(self, passphrase):
        """
        Unlock the vault with the given passphrase. The passphrase is scrubbed before this method
        returns, whether or not it was accepted. Raises WrongPassphraseError if the passphrase is
        rejected, in which case open() may be called again with another passphrase. Raises
        VaultFormatError if the file is not a readable vault, which is not retryable.

        :param passphrase: The master passphrase, as a SecretValue.
        :return: None
        """
        verify_type(passphrase, SecretValue)
        try:
            if self._closed:
                raise VaultClosedError("The vault session has been closed and cannot be reopened.")
            if self._handle is not None:
                raise VaultOpenError("The vault session is already open.")
            self._handle = self._store.open(self._path, passphrase)
        finally:
            passphrase.scrub()
        log.info("Vault %s unlocked.", self._path)

    def unlock(self, provider):
        """
        Prompt for the passphrase and open the vault, re-prompting for as long as the passphrase is
        rejected. There is no limit on the number of attempts. Raises OperationCancelledError if
        the provider returns no passphrase.

        :param provider: A SecretProvider.
        :return: The number of attempts it took.
        """
        verify_type(provider, SecretProvider)
        attempt = 0
        while True:
            attempt += 1
            passphrase = provider.get_passphrase(attempt)
            if passphrase is None:
                raise OperationCancelledError("No passphrase was provided; the run was cancelled.")
            try:
                self.open(passphrase)
            except WrongPassphraseError:
                log.warning("The vault rejected the passphrase (attempt %s).", attempt)
                provider.notify_wrong_passphrase(attempt)
            else:
                return attempt
            finally:
                del passphrase

    def search(self, term):
        """
        Return every entry whose user name contains the search term. Matching is case-sensitive or
        not according to the underlying store.

        :param term: The search term.
        :return: A tuple of VaultEntry instances.
        """
        verify_type(term, str, non_empty=True)
        self.verify_open()
        entries = tuple(self._store.search_by_username(self._handle, term))
        self._entries.extend(entries)
        log.debug("Vault search for %r returned %s entry(s).", term, len(entries))
        return entries

    def close(self):
        """
        Release the decrypted vault and scrub every entry returned by search(). Must be called
        exactly once, after the session has been opened.
        """
        if self._closed:
            raise VaultClosedError("The vault session has already been closed.")
        self.verify_open()
        handle = self._handle
        self._handle = None
        self._closed = True
        try:
            self._store.close(handle)
        finally:
            del handle
            while self._entries:
                self._entries.pop().scrub()
            log.info("Vault %s closed.", self._path)

    def close_quietly(self):
        """Close the session if it is open; otherwise do nothing."""
        if self._handle is not None:
            self.close()

    def __enter__(self):
        return self

    # noinspection PyUnusedLocal
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_quietly()
        return False  # Do not suppress errors
