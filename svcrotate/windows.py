"""
svcrotate.windows
=================

Production collaborators for Windows: WMI-based service inventory and credential changes,
service restarts through the service control manager, and console/dialog prompts.
"""

import getpass
import logging
import socket
import sys


import pythoncom
import pywintypes
import win32con
import win32gui
import win32serviceutil
import wmi


from .abc.inventory import FleetInventoryProvider, ServiceInfo
from .abc.prompts import SecretProvider
from .abc.services import ServiceController
from .exceptions import HostUnreachableError, InventoryQueryError, RestartError, ServiceControlError
from .security.secrets import SecretValue


__author__ = 'Aaron Hosford'
__all__ = [
    'SERVICE_FIELDS',
    'com_initialized',
    'WMIInventoryProvider',
    'WMIServiceController',
    'ConsoleSecretProvider',
]


log = logging.getLogger(__name__)


SERVICE_FIELDS = ['StartName', 'Name', 'DisplayName', 'StartMode', 'SystemName']

# RPC_S_SERVER_UNAVAILABLE, as reported through DCOM when the host cannot be reached.
RPC_SERVER_UNAVAILABLE = -2147023174


class com_initialized:
    """
    Initialize COM for the current thread for the duration of a with block. WMI calls made from
    worker threads must be wrapped in one of these.
    """

    def __enter__(self):
        pythoncom.CoInitialize()
        return self

    # noinspection PyUnusedLocal
    def __exit__(self, exc_type, exc_val, exc_tb):
        pythoncom.CoUninitialize()
        return False  # Do not suppress errors


def _is_unreachable(exc):
    """Return whether a WMI or COM error indicates that the host could not be contacted."""
    com_error = getattr(exc, 'com_error', exc)
    return getattr(com_error, 'hresult', None) == RPC_SERVER_UNAVAILABLE


class WMIInventoryProvider(FleetInventoryProvider):
    """
    Lists the services on remote hosts through WMI's Win32_Service class, using the credentials of
    the account running the script. A host counts as reachable when its RPC endpoint mapper accepts
    a TCP connection.
    """

    def __init__(self, port=135, timeout=2):
        self._port = port
        self._timeout = timeout

    def is_reachable(self, host):
        try:
            with socket.create_connection((host, self._port), timeout=self._timeout):
                return True
        except OSError as exc:
            log.debug("Liveness check of %s:%s failed: %s", host, self._port, exc)
            return False

    def query_services(self, host):
        with com_initialized():
            try:
                connection = wmi.WMI(computer=host)
                services = connection.Win32_Service(SERVICE_FIELDS)
                return [
                    ServiceInfo(
                        service.StartName,
                        service.Name,
                        service.DisplayName,
                        service.StartMode,
                        service.SystemName
                    )
                    for service in services
                ]
            except (wmi.x_wmi, pywintypes.com_error) as exc:
                if _is_unreachable(exc):
                    raise HostUnreachableError("Host %s could not be contacted: %s" % (host, exc)) from exc
                raise InventoryQueryError("WMI query failed on %s: %s" % (host, exc)) from exc


class WMIServiceController(ServiceController):
    """
    Changes service logon credentials through Win32_Service.Change() and restarts services through
    the remote service control manager.
    """

    def __init__(self, restart_wait_seconds=30):
        self._restart_wait_seconds = int(restart_wait_seconds)

    def set_credentials(self, host, service_id, account, password):
        with com_initialized():
            try:
                services = wmi.WMI(computer=host).Win32_Service(Name=service_id)
                if not services:
                    raise ServiceControlError("Service %s was not found on %s." % (service_id, host))
                return_value, = services[0].Change(StartName=account, StartPassword=password)
            except (wmi.x_wmi, pywintypes.com_error) as exc:
                raise ServiceControlError("Could not change %s on %s: %s" % (service_id, host, exc)) from exc
            finally:
                del password
        return return_value

    def restart(self, host, service_id):
        try:
            win32serviceutil.RestartService(service_id, waitSeconds=self._restart_wait_seconds, machine=host)
        except pywintypes.error as exc:
            raise RestartError("%s (error %s)" % (exc.strerror, exc.winerror)) from exc


class ConsoleSecretProvider(SecretProvider):
    """
    Prompts the operator on the console for the master passphrase, and shows the standard Windows
    file dialog to pick the vault file.
    """

    def __init__(self, stream=None):
        self._stream = stream

    @property
    def stream(self):
        return sys.stderr if self._stream is None else self._stream

    def select_vault_path(self, file_extension, initial_dir=None):
        pattern = '*' + file_extension
        try:
            path, _, _ = win32gui.GetOpenFileNameW(
                InitialDir=initial_dir,
                Flags=win32con.OFN_EXPLORER | win32con.OFN_FILEMUSTEXIST | win32con.OFN_PATHMUSTEXIST,
                Title='Select the password vault',
                Filter='Password vault (%s)\0%s\0' % (pattern, pattern),
                DefExt=file_extension.lstrip('.'),
            )
        except win32gui.error as exc:
            if exc.winerror == 0:
                return None  # The dialog was cancelled.
            raise
        return path or None

    def get_passphrase(self, attempt):
        try:
            buffer = bytearray(getpass.getpass('Vault passphrase: ', stream=self.stream).encode())
        except EOFError:
            return None
        return SecretValue.from_buffer(buffer)

    def notify_wrong_passphrase(self, attempt):
        print("The passphrase was not accepted. Please try again.", file=self.stream)
