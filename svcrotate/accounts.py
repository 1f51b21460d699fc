"""
svcrotate.accounts
==================

Service account identities and the records describing which services run under them.
"""


import collections
import enum


from .exceptions import verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    'RESERVED_IDENTITIES',
    'RESERVED_AUTHORITIES',
    'split_account',
    'leaf_name',
    'is_reserved_identity',
    'StartMode',
    'ServiceAccountRecord',
]


# Built-in identities that services can run under. These are never rotated. Comparison is
# case-insensitive.
RESERVED_IDENTITIES = frozenset(identity.casefold() for identity in (
    'LocalSystem',
    '.\\LocalSystem',
    'LocalService',
    'NetworkService',
    'Local Service',
    'Network Service',
    'NT AUTHORITY\\SYSTEM',
    'NT AUTHORITY\\LocalSystem',
    'NT AUTHORITY\\LocalService',
    'NT AUTHORITY\\Local Service',
    'NT AUTHORITY\\NetworkService',
    'NT AUTHORITY\\Network Service',
))

# Every account qualified by one of these authorities is a built-in identity, regardless of the
# leaf name. NT SERVICE holds the per-service virtual accounts; the others are the localized
# spellings of NT AUTHORITY.
RESERVED_AUTHORITIES = frozenset(authority.casefold() for authority in (
    'NT AUTHORITY',
    'NT SERVICE',
    'NT-AUTORITÄT',
    'AUTORITE NT',
    'AUTORITÉ NT',
    'ENTIDAD NT',
    'AUTORITÀ NT',
))


def split_account(account):
    """
    Split a qualified account name into its qualifier (domain or host) and its leaf name.
    Down-level names (DOMAIN\\user, .\\user) and user principal names (user@domain) are both
    recognized. An unqualified name has an empty qualifier.

    :param account: The account name.
    :return: A tuple, (qualifier, leaf).
    """
    verify_type(account, str)
    account = account.strip()
    if '\\' in account:
        qualifier, _, leaf = account.rpartition('\\')
    elif '@' in account:
        leaf, _, qualifier = account.partition('@')
    else:
        qualifier, leaf = '', account
    return qualifier.strip(), leaf.strip()


def leaf_name(account):
    """
    Return the short name of the account, i.e. the portion after any domain or host qualifier.

    :param account: The account name.
    :return: The leaf name.
    """
    return split_account(account)[1]


def is_reserved_identity(account):
    """
    Return whether the account is one of the built-in system identities that are excluded from
    rotation.

    :param account: The account name.
    :return: Whether the account is reserved.
    """
    verify_type(account, str)
    normalized = account.strip().casefold()
    if normalized in RESERVED_IDENTITIES:
        return True
    qualifier, _ = split_account(account)
    return '\\' in account and qualifier.casefold() in RESERVED_AUTHORITIES


class StartMode(enum.Enum):
    """How a service is configured to start."""

    AUTOMATIC = 'Automatic'
    MANUAL = 'Manual'
    DISABLED = 'Disabled'
    OTHER = 'Other'

    @classmethod
    def parse(cls, value):
        """
        Interpret a start mode as reported by the inventory provider.

        :param value: The start mode string, e.g. 'Auto'.
        :return: The corresponding StartMode.
        """
        if isinstance(value, cls):
            return value
        normalized = (value or '').strip().lower()
        if normalized in ('auto', 'automatic'):
            return cls.AUTOMATIC
        elif normalized in ('manual', 'demand'):
            return cls.MANUAL
        elif normalized == 'disabled':
            return cls.DISABLED
        else:
            return cls.OTHER


class ServiceAccountRecord(collections.namedtuple('ServiceAccountRecord',
                                                  'host_name service_id display_name start_mode '
                                                  'run_as_account')):
    """
    One service, discovered on one host, running under a non-system account.
    """

    __slots__ = ()

    def __new__(cls, host_name, service_id, display_name, start_mode, run_as_account):
        verify_type(host_name, str, non_empty=True)
        verify_type(service_id, str, non_empty=True)
        verify_type(run_as_account, str)
        run_as_account = run_as_account.strip()
        if not run_as_account:
            raise ValueError("Service %s on %s has no run-as account." % (service_id, host_name))
        if is_reserved_identity(run_as_account):
            raise ValueError("Service %s on %s runs as reserved identity %s." %
                             (service_id, host_name, run_as_account))
        return super().__new__(
            cls,
            host_name,
            service_id,
            display_name or service_id,
            StartMode.parse(start_mode),
            run_as_account
        )

    @property
    def leaf(self):
        """The leaf name of the run-as account."""
        return leaf_name(self.run_as_account)

    @property
    def key(self):
        """A case-insensitive (host, service) identity for the record."""
        return self.host_name.casefold(), self.service_id.casefold()

    def __str__(self):
        return '%s on %s (%s)' % (self.service_id, self.host_name, self.run_as_account)
