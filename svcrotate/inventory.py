"""
svcrotate.inventory
===================

Discovers which services across a set of hosts run under non-system accounts.

Each host is scanned in its own worker thread. A host that fails its liveness check is recorded
as unreachable, and a host whose query fails is recorded as a failure; neither prevents the other
hosts from being scanned. Only the absence of the inventory mechanism itself is fatal.
"""


import collections
import enum
import logging


from .abc.inventory import FleetInventoryProvider
from .accounts import ServiceAccountRecord, is_reserved_identity
from .exceptions import HostUnreachableError, InventoryUnavailableError, verify_type
from .repetition import wait_for
from .threads import fan_out


__author__ = 'Aaron Hosford'
__all__ = [
    'HostStatus',
    'HostScan',
    'ScanResult',
    'normalize_hosts',
    'filter_services',
    'scan_host',
    'scan',
]


log = logging.getLogger(__name__)


class HostStatus(enum.Enum):
    """The outcome of scanning one host."""

    SCANNED = 'scanned'
    UNREACHABLE = 'unreachable'
    FAILED = 'failed'


HostScan = collections.namedtuple('HostScan', 'host status records error')


class ScanResult(collections.namedtuple('ScanResult', 'records unreachable failures hosts_scanned')):
    """
    The merged outcome of scanning every host.

    records: The ServiceAccountRecords discovered on the hosts that were scanned successfully.
    unreachable: The names of the hosts that failed their liveness check.
    failures: (host, message) pairs for the hosts whose query failed.
    hosts_scanned: The names of the hosts that were scanned successfully.
    """

    __slots__ = ()

    @classmethod
    def merge(cls, host_scans):
        """
        Combine per-host scan outcomes into a single result.

        :param host_scans: An iterable of HostScan instances.
        :return: A new ScanResult.
        """
        records = []
        unreachable = []
        failures = []
        scanned = []
        for host_scan in host_scans:
            if host_scan.status is HostStatus.SCANNED:
                scanned.append(host_scan.host)
                records.extend(host_scan.records)
            elif host_scan.status is HostStatus.UNREACHABLE:
                unreachable.append(host_scan.host)
            else:
                failures.append((host_scan.host, host_scan.error))
        return cls(tuple(records), tuple(unreachable), tuple(failures), tuple(scanned))


def normalize_hosts(hosts):
    """
    Strip, split and de-duplicate host names. Names may be given individually or as comma-separated
    lists. Duplicates are detected case-insensitively, and the first spelling is kept.

    :param hosts: An iterable of host name strings.
    :return: A list of distinct host names, in their original order.
    """
    seen = set()
    results = []
    for value in hosts:
        verify_type(value, str)
        for host in value.split(','):
            host = host.strip()
            if host and host.casefold() not in seen:
                seen.add(host.casefold())
                results.append(host)
    return results


def filter_services(host, services):
    """
    Convert the services reported for a host into ServiceAccountRecords, dropping those that run as
    a built-in system identity or have no run-as account.

    :param host: The host the services were reported by.
    :param services: An iterable of ServiceInfo instances.
    :return: A list of ServiceAccountRecords.
    """
    records = []
    for service in services:
        account = (service.start_name or '').strip()
        if not account or is_reserved_identity(account):
            continue
        if not service.name:
            log.debug("Skipping nameless service on %s running as %s.", host, account)
            continue
        records.append(
            ServiceAccountRecord(
                host,
                service.name,
                service.display_name,
                service.start_mode,
                account
            )
        )
    return records


def scan_host(host, provider, liveness_attempts=1, liveness_interval=1):
    """
    Scan a single host. Errors are caught and converted into the returned HostScan's status, except
    for InventoryUnavailableError, which is re-raised.

    :param host: The host name.
    :param provider: A FleetInventoryProvider.
    :param liveness_attempts: The number of liveness checks to make before giving up on the host.
    :param liveness_interval: The number of seconds between liveness checks.
    :return: A HostScan instance.
    """
    log.debug("Checking whether %s is reachable.", host)
    if not wait_for(provider.is_reachable, attempts=liveness_attempts, interval=liveness_interval, args=(host,)):
        log.warning("Host %s is unreachable; skipping it.", host)
        return HostScan(host, HostStatus.UNREACHABLE, (), None)

    try:
        services = provider.query_services(host)
        records = filter_services(host, services)
    except InventoryUnavailableError:
        raise
    except HostUnreachableError as exc:
        log.warning("Host %s became unreachable while being queried: %s", host, exc)
        return HostScan(host, HostStatus.UNREACHABLE, (), str(exc) or None)
    except Exception as exc:
        log.warning("Service query failed on %s: %s", host, exc)
        return HostScan(host, HostStatus.FAILED, (), str(exc) or type(exc).__name__)

    log.info("Found %s service(s) running under service accounts on %s.", len(records), host)
    return HostScan(host, HostStatus.SCANNED, tuple(records), None)


def scan(hosts, provider, max_workers=None, liveness_attempts=1, liveness_interval=1):
    """
    Scan every host concurrently, one worker per host, and merge the results once all of them are
    done. The order of the discovered records is not significant.

    :param hosts: An iterable of host names.
    :param provider: A FleetInventoryProvider.
    :param max_workers: The maximum number of hosts to scan at once, or None for no limit.
    :param liveness_attempts: The number of liveness checks to make before giving up on a host.
    :param liveness_interval: The number of seconds between liveness checks.
    :return: A ScanResult instance.
    """
    verify_type(provider, FleetInventoryProvider)

    hosts = normalize_hosts(hosts)
    log.info("Scanning %s host(s) for service accounts.", len(hosts))

    calls = fan_out(
        lambda host: scan_host(host, provider, liveness_attempts, liveness_interval),
        hosts,
        max_workers,
        name='scan'
    )

    host_scans = []
    for host, call in zip(hosts, calls):
        if call.exception is None:
            host_scans.append(call.return_value)
        elif isinstance(call.exception, InventoryUnavailableError):
            raise call.exception
        else:
            # Unexpected errors from the filter or the provider's liveness check still only cost
            # the one host.
            log.warning("Scanning %s failed: %s", host, call.exception)
            host_scans.append(HostScan(host, HostStatus.FAILED, (), str(call.exception) or
                                       type(call.exception).__name__))

    result = ScanResult.merge(host_scans)
    log.info("Scan complete: %s record(s) from %s host(s); %s unreachable, %s failed.",
             len(result.records), len(result.hosts_scanned), len(result.unreachable), len(result.failures))
    return result
