"""
svcrotate.abc.vaults
====================

Interface definition for encrypted secret stores.
"""


from abc import ABCMeta, abstractmethod


__author__ = 'Aaron Hosford'
__all__ = [
    "SecretStore",
]


class SecretStore(metaclass=ABCMeta):
    """
    The SecretStore class is an abstract base class for encrypted credential stores. A store is
    opened with a master passphrase, producing an opaque handle through which entries can be
    searched until the handle is closed. Handles are not safe for concurrent use.
    """

    #: The file name extension used by vault files of this store, e.g. '.kdbx'.
    file_extension = None

    @abstractmethod
    def open(self, path, passphrase):
        """
        Decrypt the vault file. Raises WrongPassphraseError if the passphrase is rejected, or
        VaultFormatError if the file is missing, unreadable, or not a vault of this type.

        :param path: The path to the vault file.
        :param passphrase: The master passphrase, as a SecretValue.
        :return: An opaque handle to the decrypted vault.
        """
        raise NotImplementedError()

    @abstractmethod
    def search_by_username(self, handle, term):
        """
        Return every entry whose user name contains the search term.

        :param handle: A handle returned by open().
        :param term: The search term.
        :return: A sequence of svcrotate.vault.VaultEntry instances.
        """
        raise NotImplementedError()

    @abstractmethod
    def close(self, handle):
        """
        Release the decrypted vault.

        :param handle: A handle returned by open().
        :return: None
        """
        raise NotImplementedError()
