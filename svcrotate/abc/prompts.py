"""
svcrotate.abc.prompts
=====================

Interface definition for the interactive prompts a rotation run depends on.
"""


from abc import ABCMeta, abstractmethod


__author__ = 'Aaron Hosford'
__all__ = [
    "SecretProvider",
]


class SecretProvider(metaclass=ABCMeta):
    """
    The SecretProvider class is an abstract base class for the source of the vault file path and
    the master passphrase, which in production is the operator.
    """

    @abstractmethod
    def select_vault_path(self, file_extension, initial_dir=None):
        """
        Ask for the vault file to use.

        :param file_extension: The extension vault files are restricted to, e.g. '.kdbx'.
        :param initial_dir: The directory to start browsing in, if any.
        :return: The selected path, or None if no file was selected.
        """
        raise NotImplementedError()

    @abstractmethod
    def get_passphrase(self, attempt):
        """
        Ask for the master passphrase. Returning None cancels the run.

        :param attempt: The 1-based number of this attempt.
        :return: A SecretValue holding the passphrase, or None.
        """
        raise NotImplementedError()

    def notify_wrong_passphrase(self, attempt):
        """
        Called after the vault rejects a passphrase, before the next prompt.

        :param attempt: The 1-based number of the rejected attempt.
        :return: None
        """
