"""
In-memory stand-ins for svcrotate's external collaborators.
"""

import threading

from svcrotate.abc.inventory import FleetInventoryProvider, ServiceInfo
from svcrotate.abc.prompts import SecretProvider
from svcrotate.abc.services import ServiceController
from svcrotate.abc.vaults import SecretStore
from svcrotate.exceptions import RestartError, VaultFormatError, WrongPassphraseError
from svcrotate.security.encryption import from_bytes
from svcrotate.security.secrets import SecretValue
from svcrotate.vault import VaultEntry


def service(name, start_name, host='', display_name=None, start_mode='Auto'):
    """Build a ServiceInfo the way the WMI provider would report it."""
    return ServiceInfo(start_name, name, display_name or name, start_mode, host)


class FakeInventory(FleetInventoryProvider):
    """
    Reports a fixed set of services per host. Hosts missing from the map are unreachable. Hosts
    mapped to an exception raise it from query_services().
    """

    def __init__(self, hosts):
        self.hosts = dict(hosts)
        self.queried = []
        self._lock = threading.Lock()

    def is_reachable(self, host):
        return host in self.hosts

    def query_services(self, host):
        with self._lock:
            self.queried.append(host)
        value = self.hosts[host]
        if isinstance(value, BaseException):
            raise value
        return list(value)


class FakeVault:
    """The decrypted contents of a FakeStore vault."""

    def __init__(self, entries):
        self.entries = entries
        self.closed = False


class FakeStore(SecretStore):
    """
    A vault held in memory as (title, username, password) triples, unlocked by a single passphrase.
    Searches are case-sensitive substring matches, like the KeePass store.
    """

    file_extension = '.kdbx'

    def __init__(self, entries, passphrase='correct horse', corrupt=False):
        self.entries = list(entries)
        self.passphrase = passphrase
        self.corrupt = corrupt
        self.opened = []
        self.searches = []
        self.handles = []
        self.closed = 0
        self.returned = []

    @property
    def is_open(self):
        return any(not handle.closed for handle in self.handles)

    def open(self, path, passphrase):
        assert isinstance(passphrase, SecretValue)
        self.opened.append(path)
        if self.corrupt:
            raise VaultFormatError("Not a valid vault: %s" % path)
        with passphrase.reveal() as buffer:
            accepted = from_bytes(buffer) == self.passphrase
        if not accepted:
            raise WrongPassphraseError("The vault passphrase is incorrect.")
        handle = FakeVault(self.entries)
        self.handles.append(handle)
        return handle

    def search_by_username(self, handle, term):
        assert not handle.closed
        self.searches.append(term)
        results = [VaultEntry.from_plaintext(title, username, password, position)
                   for position, (title, username, password) in enumerate(handle.entries)
                   if username and term in username]
        self.returned.extend(results)
        return results

    def close(self, handle):
        handle.closed = True
        self.closed += 1


class FakeController(ServiceController):
    """
    Records every call. Result codes and errors can be configured per (host, service_id).
    """

    def __init__(self, codes=None, errors=None, restart_errors=None):
        self.codes = dict(codes or {})
        self.errors = dict(errors or {})
        self.restart_errors = dict(restart_errors or {})
        self.calls = []
        self.restarts = []

    def set_credentials(self, host, service_id, account, password):
        self.calls.append((host, service_id, account, password))
        if (host, service_id) in self.errors:
            raise self.errors[host, service_id]
        return self.codes.get((host, service_id), 0)

    def restart(self, host, service_id):
        self.restarts.append((host, service_id))
        if (host, service_id) in self.restart_errors:
            raise RestartError(self.restart_errors[host, service_id])


class FakeSecretProvider(SecretProvider):
    """
    Answers the vault picker with a fixed path and the passphrase prompt with each of the given
    passphrases in turn. None in the list, or running out of passphrases, cancels.
    """

    def __init__(self, passphrases=('correct horse',), vault_path='fleet.kdbx'):
        self.passphrases = list(passphrases)
        self.vault_path = vault_path
        self.picker_calls = []
        self.attempts = []
        self.rejections = []
        self.issued = []

    def select_vault_path(self, file_extension, initial_dir=None):
        self.picker_calls.append((file_extension, initial_dir))
        return self.vault_path

    def get_passphrase(self, attempt):
        self.attempts.append(attempt)
        if not self.passphrases:
            return None
        value = self.passphrases.pop(0)
        if value is None:
            return None
        secret = SecretValue(value)
        self.issued.append(secret)
        return secret

    def notify_wrong_passphrase(self, attempt):
        self.rejections.append(attempt)
