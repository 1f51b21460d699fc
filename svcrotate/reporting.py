"""
svcrotate.reporting
===================

Formats the per-item report and final summary of a rotation run. Nothing written here ever
includes a vault title or password.
"""


import collections
import sys


__author__ = 'Aaron Hosford'
__all__ = [
    'RunSummary',
    'summarize',
    'write_scan_report',
    'write_correlation_report',
    'write_rotation_report',
    'write_summary',
]


RULE = '=' * 72


class RunSummary(collections.namedtuple('RunSummary',
                                        'scanned matched rotated_ok rotated_failed restart_failed '
                                        'unreachable_hosts failed_hosts unmatched ambiguous')):
    """
    The counts reported at the end of a run.

    scanned: The number of service records discovered.
    matched: The number of rotation tasks produced by correlation.
    rotated_ok: The number of tasks whose credential change succeeded, including those whose
        restart then failed.
    rotated_failed: The number of tasks whose credential change failed.
    restart_failed: The number of tasks whose credential change succeeded but whose restart failed.
    unreachable_hosts: The number of hosts that failed their liveness check.
    failed_hosts: The number of hosts whose service query failed.
    unmatched: The number of service records with no vault match.
    ambiguous: The number of account names with more than one vault match.
    """

    __slots__ = ()


def summarize(context):
    """
    Compute the summary counts for a run.

    :param context: A svcrotate.coordinator.RunContext.
    :return: A RunSummary.
    """
    scan = context.scan
    correlation = context.correlation
    results = context.results
    return RunSummary(
        scanned=len(scan.records) if scan else 0,
        matched=len(correlation.tasks) if correlation else 0,
        rotated_ok=sum(1 for result in results if result.applied_ok),
        rotated_failed=sum(1 for result in results if not result.applied_ok),
        restart_failed=sum(1 for result in results if result.restart_failed),
        unreachable_hosts=len(scan.unreachable) if scan else 0,
        failed_hosts=len(scan.failures) if scan else 0,
        unmatched=len(correlation.unmatched) if correlation else 0,
        ambiguous=len(correlation.ambiguities) if correlation else 0,
    )


def write_scan_report(scan, stream=None):
    """
    Write a line for each host that could not be scanned.

    :param scan: A svcrotate.inventory.ScanResult.
    :param stream: The output stream. Defaults to sys.stdout.
    """
    stream = sys.stdout if stream is None else stream
    for host in scan.unreachable:
        print('UNREACHABLE: %s' % host, file=stream)
    for host, message in scan.failures:
        print('QUERY FAILED: %s: %s' % (host, message), file=stream)


def write_correlation_report(correlation, stream=None):
    """
    Write a line for each record with no vault match, and a warning for each ambiguous match.

    :param correlation: A svcrotate.correlation.CorrelationResult.
    :param stream: The output stream. Defaults to sys.stdout.
    """
    stream = sys.stdout if stream is None else stream
    for record in correlation.unmatched:
        print('NO VAULT MATCH: %s on %s (%s)' % (record.service_id, record.host_name, record.run_as_account),
              file=stream)
    for ambiguity in correlation.ambiguities:
        print('WARNING: %s vault entries match account %s; the first one was used.' %
              (ambiguity.count, ambiguity.leaf), file=stream)


def write_rotation_report(results, stream=None):
    """
    Write one line per rotation task describing its outcome.

    :param results: An iterable of svcrotate.rotation.RotationResults.
    :param stream: The output stream. Defaults to sys.stdout.
    """
    stream = sys.stdout if stream is None else stream
    for result in results:
        print(result.describe(), file=stream)


def write_summary(summary, stream=None):
    """
    Write the final summary block.

    :param summary: A RunSummary.
    :param stream: The output stream. Defaults to sys.stdout.
    """
    stream = sys.stdout if stream is None else stream
    rows = [
        ('Services scanned', summary.scanned),
        ('Matched in vault', summary.matched),
        ('Rotated OK', summary.rotated_ok),
        ('Rotation failed', summary.rotated_failed),
        ('Restart failed', summary.restart_failed),
        ('Unreachable hosts', summary.unreachable_hosts),
    ]
    if summary.failed_hosts:
        rows.append(('Failed hosts', summary.failed_hosts))
    if summary.unmatched:
        rows.append(('No vault match', summary.unmatched))
    if summary.ambiguous:
        rows.append(('Ambiguous accounts', summary.ambiguous))
    width = max(len(label) for label, _ in rows)
    print(RULE, file=stream)
    print('Summary', file=stream)
    print(RULE, file=stream)
    for label, count in rows:
        print('%s: %s' % (label.ljust(width), count), file=stream)
