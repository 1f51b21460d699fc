"""
svcrotate.exceptions
====================

Exception definitions for svcrotate.
"""


class RotationException(Exception):
    """Base class for all exceptions defined by svcrotate."""


class ConfigurationError(RotationException):
    """Error in configuration."""


class InvalidConfigurationError(ConfigurationError):
    """The configuration is invalid."""


class OperationCancelledError(RotationException):
    """The operator cancelled an interactive prompt."""


class SecurityError(RotationException):
    """Security-related error."""


class CryptographyError(SecurityError):
    """Error during in-memory protection of a secret."""


class SecretScrubbedError(ValueError, SecurityError):
    """The secret has already been scrubbed and can no longer be accessed."""


class VaultError(SecurityError):
    """Base class for credential vault errors."""


class WrongPassphraseError(ValueError, VaultError):
    """The master passphrase was rejected by the vault."""


class VaultFormatError(VaultError):
    """The vault file could not be read, or is not a valid vault."""


class VaultNotSelectedError(VaultError):
    """No vault file was selected."""


class VaultStateError(VaultError):
    """Base class for vault session state errors."""


class VaultOpenError(VaultStateError):
    """The vault session is already open."""


class VaultNotOpenError(VaultStateError):
    """The vault session is not open."""


class VaultClosedError(VaultStateError):
    """The vault session has already been closed and cannot be reopened."""


class InventoryError(RotationException):
    """Base class for service inventory errors."""


class HostUnreachableError(ConnectionError, InventoryError):
    """The host did not respond to the liveness check."""


class InventoryQueryError(InventoryError):
    """The host responded, but its services could not be queried."""


class InventoryUnavailableError(InventoryError):
    """The service inventory mechanism itself is not available on this machine."""


class ServiceControlError(RotationException):
    """Error while changing or controlling a remote service."""


class RestartError(ServiceControlError):
    """The service could not be restarted."""


def verify_type(obj, typ, *, non_empty=False, allow_none=False):
    """
    Verify that the object has the given type. If not, raise an appropriate exception.

    :param obj: The object to check.
    :param typ: The expected type (or a tuple of types).
    :param non_empty: If True, require the object to evaluate as True in a boolean context. (Default
        False)
    :param allow_none: If True, allow the object to be None. (Default False)
    """
    if allow_none and obj is None:
        return
    if not isinstance(obj, typ):
        raise TypeError(type(obj), typ)
    if non_empty and not obj:
        raise ValueError(obj)


def verify_callable(obj, *, allow_none=False):
    """
    Verify that the object is callable. If not, raise an appropriate exception.
    :param obj: The object to check.
    :param allow_none: If True, allow the object to be None. (Default False)
    """
    if allow_none and obj is None:
        return
    if not callable(obj):
        raise TypeError(callable, obj)
