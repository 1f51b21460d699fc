"""
Implements the Credential class, for password-based service logon credentials.
"""


from ..accounts import split_account
from ..exceptions import verify_type
from .secrets import SecretValue


__author__ = 'Aaron Hosford'
__all__ = [
    'Credential',
]


class Credential:
    """
    A Credential is an account/password pair. The account is the fully qualified name a service
    runs under, e.g. DOMAIN\\svc-account. The password is always held as a SecretValue, and is
    scrubbed when the credential is scrubbed:

        with Credential(account, password) as credential:
            ...
    """

    def __init__(self, account, password):
        verify_type(account, str, non_empty=True)
        verify_type(password, SecretValue)

        self._account = account
        self._password = password

    @property
    def account(self):
        """The fully qualified account name."""
        return self._account

    @property
    def domain(self):
        """The domain or host qualifier of the account, or None if it is unqualified."""
        return split_account(self._account)[0] or None

    @property
    def user(self):
        """The leaf name of the account."""
        return split_account(self._account)[1]

    @property
    def password(self):
        return self._password

    @property
    def is_scrubbed(self):
        """Whether the password has been destroyed."""
        return self._password.is_scrubbed

    def scrub(self):
        """Destroy the password."""
        self._password.scrub()

    def __enter__(self):
        return self

    # noinspection PyUnusedLocal
    def __exit__(self, exc_type, exc_val, exc_tb):
        self.scrub()
        return False  # Do not suppress errors

    def __str__(self):
        # We hide the password on purpose, to prevent accidentally displaying it.
        return 'password for account ' + self._account

    def __repr__(self):
        # We hide the password on purpose, to prevent accidentally displaying it.
        return type(self).__name__ + "(" + repr(self._account) + ", '********')"

    def __iter__(self):
        yield self._account
        yield self._password

    def __len__(self):
        return 2
