"""
svcrotate.keepass
=================

A SecretStore backed by a KeePass (.kdbx) database file.
"""


import logging
import os


# For documentation on the pykeepass library, visit:
#   https://github.com/libkeepass/pykeepass
# To install with pip:
#   pip install pykeepass
from pykeepass import PyKeePass
from pykeepass.exceptions import CredentialsError

from .abc.vaults import SecretStore
from .exceptions import VaultFormatError, WrongPassphraseError, verify_type
from .security.encryption import from_bytes
from .security.secrets import SecretValue
from .vault import VaultEntry


__author__ = 'Aaron Hosford'
__all__ = [
    'VAULT_FILE_EXTENSION',
    'KeePassStore',
]


log = logging.getLogger(__name__)


VAULT_FILE_EXTENSION = '.kdbx'


class KeePassStore(SecretStore):
    """
    Opens KeePass 2.x databases protected by a master passphrase. Key files and Windows user
    account keys are not supported.
    """

    file_extension = VAULT_FILE_EXTENSION

    def open(self, path, passphrase):
        """
        Decrypt the database file with the passphrase.

        :param path: The path to the .kdbx file.
        :param passphrase: The master passphrase, as a SecretValue.
        :return: The open PyKeePass instance.
        """
        verify_type(path, str, non_empty=True)
        verify_type(passphrase, SecretValue)

        if not os.path.isfile(path):
            raise VaultFormatError("Vault file not found: %s" % path)

        with passphrase.reveal() as buffer:
            # noinspection PyBroadException
            try:
                return PyKeePass(path, password=from_bytes(buffer))
            except CredentialsError as exc:
                raise WrongPassphraseError("The vault passphrase is incorrect.") from exc
            except Exception as exc:
                log.debug("Vault %s could not be parsed.", path, exc_info=True)
                raise VaultFormatError("Not a valid %s vault: %s" % (VAULT_FILE_EXTENSION, path)) from exc

    def search_by_username(self, handle, term):
        """
        Return every entry whose user name contains the term. Matching is case-sensitive. Entries
        with no user name are never returned. Each returned field is wrapped in a SecretValue as
        soon as it is read.

        :param handle: The PyKeePass instance returned by open().
        :param term: The search term.
        :return: A list of VaultEntry instances, in database order.
        """
        verify_type(handle, PyKeePass)
        verify_type(term, str, non_empty=True)

        results = []
        for entry in handle.entries:
            username = entry.username
            if not username or term not in username:
                continue
            results.append(VaultEntry.from_plaintext(entry.title, username, entry.password, str(entry.uuid)))
            del username
        return results

    def close(self, handle):
        """
        Release the database. PyKeePass keeps no file handle open after loading, so this drops the
        decrypted tree.

        :param handle: The PyKeePass instance returned by open().
        """
        verify_type(handle, PyKeePass)
        del handle
