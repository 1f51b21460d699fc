"""
svcrotate.coordinator
=====================

Sequences a rotation run: scan the fleet, unlock the vault, correlate, close the vault, rotate,
and report.

The state of a run is carried in a RunContext. Each stage takes the context produced by the one
before it and returns a new one; nothing is shared between stages except through the context.
"""


import collections
import logging
import sys


from . import reporting
from .abc.inventory import FleetInventoryProvider
from .abc.prompts import SecretProvider
from .abc.services import ServiceController
from .abc.vaults import SecretStore
from .configurations import RotationSettings
from .correlation import correlate
from .exceptions import VaultNotSelectedError, verify_type
from .inventory import scan
from .rotation import RotationExecutor
from .vault import VaultSession, search_terms


__author__ = 'Aaron Hosford'
__all__ = [
    'RunContext',
    'RunCoordinator',
]


log = logging.getLogger(__name__)


class RunContext(collections.namedtuple('RunContext', 'hosts scan correlation results')):
    """
    The accumulated state of a rotation run.

    hosts: The target host names.
    scan: The svcrotate.inventory.ScanResult, once the fleet has been scanned.
    correlation: The svcrotate.correlation.CorrelationResult, once the vault has been searched.
    results: The svcrotate.rotation.RotationResults, once rotation is done.
    """

    __slots__ = ()

    @classmethod
    def start(cls, hosts):
        """Create the initial context for a run against the given hosts."""
        return cls(tuple(hosts), None, None, ())

    @property
    def tasks(self):
        return self.correlation.tasks if self.correlation else ()


class RunCoordinator:
    """
    Runs the rotation pipeline against a set of collaborators:

        coordinator = RunCoordinator(inventory, store, controller, secret_provider)
        summary = coordinator.run(['HostA', 'HostB'])

    The vault is always closed before run() returns or raises, once it has been opened.
    """

    def __init__(self, inventory, store, controller, secret_provider, settings=None, vault_path=None,
                 output=None):
        verify_type(inventory, FleetInventoryProvider)
        verify_type(store, SecretStore)
        verify_type(controller, ServiceController)
        verify_type(secret_provider, SecretProvider)
        verify_type(settings, RotationSettings, allow_none=True)
        verify_type(vault_path, str, non_empty=True, allow_none=True)

        self._inventory = inventory
        self._store = store
        self._executor = RotationExecutor(controller)
        self._secret_provider = secret_provider
        self._settings = RotationSettings.defaults() if settings is None else settings
        self._vault_path = vault_path
        self._output = output

    @property
    def settings(self):
        return self._settings

    @property
    def output(self):
        return sys.stdout if self._output is None else self._output

    def discover(self, context):
        """
        Scan the target hosts.

        :param context: A RunContext with hosts.
        :return: A new RunContext with the scan result.
        """
        settings = self._settings
        result = scan(
            context.hosts,
            self._inventory,
            max_workers=settings.max_workers,
            liveness_attempts=settings.liveness_attempts,
            liveness_interval=settings.liveness_interval
        )
        return context._replace(scan=result)

    def select_vault(self):
        """
        Determine which vault file to open, asking the secret provider if none was given. Raises
        VaultNotSelectedError if none is selected.

        :return: The path to the vault file.
        """
        if self._vault_path is not None:
            return self._vault_path
        path = self._secret_provider.select_vault_path(self._store.file_extension,
                                                       self._settings.vault_directory)
        if not path:
            raise VaultNotSelectedError("No vault file was selected.")
        return path

    def lookup(self, context, session):
        """
        Search the unlocked vault for every distinct leaf account name and correlate the results
        with the discovered records.

        :param context: A RunContext with a scan result.
        :param session: An open VaultSession.
        :return: A new RunContext with the correlation result.
        """
        entries = []
        for term in search_terms(context.scan.records):
            entries.extend(session.search(term))
        return context._replace(correlation=correlate(context.scan.records, entries))

    def rotate(self, context):
        """
        Apply the correlated credentials.

        :param context: A RunContext with a correlation result.
        :return: A new RunContext with the rotation results.
        """
        return context._replace(results=self._executor.execute(context.tasks))

    def run(self, hosts):
        """
        Perform a complete rotation run and print the report.

        :param hosts: The target host names.
        :return: A reporting.RunSummary.
        """
        output = self.output
        context = RunContext.start(hosts)

        context = self.discover(context)
        reporting.write_scan_report(context.scan, output)

        if not context.scan.records:
            log.info("No service accounts were discovered; nothing to rotate.")
            print('No service accounts were discovered on the target hosts. Nothing to do.', file=output)
            summary = reporting.summarize(context)
            reporting.write_summary(summary, output)
            return summary

        path = self.select_vault()
        try:
            with VaultSession(self._store, path) as session:
                session.unlock(self._secret_provider)
                context = self.lookup(context, session)
            # The session is closed and its entries scrubbed; the tasks hold their own copies.

            reporting.write_correlation_report(context.correlation, output)
            context = self.rotate(context)
        finally:
            for task in context.tasks:
                task.credential.scrub()

        reporting.write_rotation_report(context.results, output)
        summary = reporting.summarize(context)
        reporting.write_summary(summary, output)
        return summary
