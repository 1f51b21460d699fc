"""
svcrotate.correlation
=====================

Matches discovered services to vault entries by leaf account name.
"""


import collections
import logging


from .rotation import RotationTask


__author__ = 'Aaron Hosford'
__all__ = [
    'Ambiguity',
    'CorrelationResult',
    'index_entries',
    'correlate',
]


log = logging.getLogger(__name__)


# More than one vault entry matched the same leaf account name. The first one was used.
Ambiguity = collections.namedtuple('Ambiguity', 'leaf count')

CorrelationResult = collections.namedtuple('CorrelationResult', 'tasks unmatched ambiguities')


def index_entries(entries):
    """
    Group vault entries by the case-folded leaf name of their account, preserving the order in
    which they were found. Entries with an empty leaf name are ignored. A vault record returned
    more than once (e.g. because it matched two overlapping search terms) is only counted once;
    records are identified by their store key, or by object identity if they have none.

    :param entries: An iterable of VaultEntry instances.
    :return: An OrderedDict mapping case-folded leaf names to lists of entries.
    """
    index = collections.OrderedDict()
    seen = set()
    for entry in entries:
        identity = ('id', id(entry)) if entry.key is None else ('key', entry.key)
        if identity in seen:
            continue
        seen.add(identity)
        leaf = entry.leaf
        if not leaf:
            continue
        index.setdefault(leaf.casefold(), []).append(entry)
    return index


def correlate(records, entries):
    """
    Produce one RotationTask per discovered (host, service) pair whose run-as account's leaf name
    matches the leaf name of a vault entry's account, compared case-insensitively. When several
    entries share a leaf name, the first one found is used and the ambiguity is reported. Records
    with no matching entry produce no task and are reported as unmatched.

    Each task takes its own copy of the entry's password, so the vault entries can be scrubbed as
    soon as correlation is done.

    :param records: An iterable of ServiceAccountRecords.
    :param entries: An iterable of VaultEntry instances, in the order they were found.
    :return: A CorrelationResult.
    """
    index = index_entries(entries)

    tasks = []
    unmatched = []
    ambiguities = collections.OrderedDict()
    seen = set()

    for record in records:
        if record.key in seen:
            log.debug("Ignoring duplicate record for %s.", record)
            continue
        seen.add(record.key)

        leaf = record.leaf.casefold()
        candidates = index.get(leaf)
        if not candidates:
            log.info("No vault entry matches %s.", record)
            unmatched.append(record)
            continue

        if len(candidates) > 1 and leaf not in ambiguities:
            log.warning("%s vault entries match account %s; using the first one.", len(candidates), record.leaf)
            ambiguities[leaf] = Ambiguity(record.leaf, len(candidates))

        tasks.append(RotationTask.create(record, candidates[0]))

    log.info("Correlated %s task(s); %s record(s) had no vault match.", len(tasks), len(unmatched))
    return CorrelationResult(tuple(tasks), tuple(unmatched), tuple(ambiguities.values()))
