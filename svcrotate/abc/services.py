"""
svcrotate.abc.services
======================

Interface definition for remote service controllers.
"""


from abc import ABCMeta, abstractmethod


__author__ = 'Aaron Hosford'
__all__ = [
    "ServiceController",
]


class ServiceController(metaclass=ABCMeta):
    """
    The ServiceController class is an abstract base class for objects that change the logon
    credentials of services on remote hosts and restart them.
    """

    @abstractmethod
    def set_credentials(self, host, service_id, account, password):
        """
        Change the account and password the service logs on with. The return value is the raw
        numeric result code reported by the service control manager, where zero means success. It
        is interpreted by svcrotate.rotation.ResultCode.

        :param host: The host name.
        :param service_id: The short name of the service.
        :param account: The fully qualified account name.
        :param password: The password for the account.
        :return: The numeric result code.
        """
        raise NotImplementedError()

    @abstractmethod
    def restart(self, host, service_id):
        """
        Stop and start the service, raising RestartError if this fails.

        :param host: The host name.
        :param service_id: The short name of the service.
        :return: None
        """
        raise NotImplementedError()
