"""
svcrotate.abc.inventory
=======================

Interface definition for fleet inventory providers, which report the services installed on a host
and the accounts they run under.
"""


import collections
from abc import ABCMeta, abstractmethod


__author__ = 'Aaron Hosford'
__all__ = [
    "ServiceInfo",
    "FleetInventoryProvider",
]


# One service as reported by an inventory provider, before any filtering. The field names follow
# the Win32_Service properties they are read from: StartName, Name, DisplayName, StartMode and
# SystemName.
ServiceInfo = collections.namedtuple('ServiceInfo', 'start_name name display_name start_mode system_name')


class FleetInventoryProvider(metaclass=ABCMeta):
    """
    The FleetInventoryProvider class is an abstract base class for sources of remote service
    inventory. Implementations must be safe to call from several threads at once, one host per
    thread.
    """

    @abstractmethod
    def is_reachable(self, host):
        """
        Check whether the host is up and accepting remote management connections.

        :param host: The host name.
        :return: Whether the host is reachable.
        """
        raise NotImplementedError()

    @abstractmethod
    def query_services(self, host):
        """
        Return every service installed on the host, including those running as built-in system
        identities. Raises HostUnreachableError if the host cannot be contacted, or
        InventoryQueryError if it can be contacted but the query fails. Raises
        InventoryUnavailableError if the inventory mechanism itself is missing.

        :param host: The host name.
        :return: A sequence of ServiceInfo instances.
        """
        raise NotImplementedError()
