import io
import unittest

from svcrotate.accounts import ServiceAccountRecord
from svcrotate.correlation import Ambiguity, CorrelationResult
from svcrotate.inventory import ScanResult
from svcrotate.reporting import RunSummary, write_correlation_report, write_scan_report, write_summary


class TestWriteScanReport(unittest.TestCase):

    def testHostLines(self):
        stream = io.StringIO()
        scan = ScanResult((), ('HostB',), (('HostC', 'Access is denied.'),), ('HostA',))
        write_scan_report(scan, stream)
        self.assertEqual(stream.getvalue().splitlines(), [
            'UNREACHABLE: HostB',
            'QUERY FAILED: HostC: Access is denied.',
        ])


class TestWriteCorrelationReport(unittest.TestCase):

    def testUnmatchedAndAmbiguous(self):
        stream = io.StringIO()
        record = ServiceAccountRecord('HostA', 'Svc3', None, 'Auto', 'DOMAIN\\svc-gamma')
        correlation = CorrelationResult((), (record,), (Ambiguity('svc-alpha', 2),))
        write_correlation_report(correlation, stream)
        lines = stream.getvalue().splitlines()
        self.assertEqual(lines[0], 'NO VAULT MATCH: Svc3 on HostA (DOMAIN\\svc-gamma)')
        self.assertTrue(lines[1].startswith('WARNING: 2 vault entries match account svc-alpha'))
        self.assertEqual(len(lines), 2)

    def testNothingToReport(self):
        stream = io.StringIO()
        write_correlation_report(CorrelationResult((), (), ()), stream)
        self.assertEqual(stream.getvalue(), '')


class TestWriteSummary(unittest.TestCase):

    def testRequiredCounts(self):
        stream = io.StringIO()
        write_summary(RunSummary(3, 2, 1, 1, 1, 1, 0, 1, 0), stream)
        text = stream.getvalue()
        for label in ('Services scanned', 'Matched in vault', 'Rotated OK', 'Rotation failed', 'Restart failed',
                      'Unreachable hosts', 'No vault match'):
            self.assertIn(label, text)
        self.assertNotIn('Failed hosts', text)
        self.assertNotIn('Ambiguous accounts', text)

    def testOptionalCounts(self):
        stream = io.StringIO()
        write_summary(RunSummary(3, 2, 2, 0, 0, 0, 1, 0, 1), stream)
        text = stream.getvalue()
        self.assertIn('Failed hosts', text)
        self.assertIn('Ambiguous accounts', text)
        self.assertNotIn('No vault match', text)


if __name__ == '__main__':
    unittest.main()
