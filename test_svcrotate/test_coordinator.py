import io
import unittest

from svcrotate.coordinator import RunCoordinator
from svcrotate.exceptions import OperationCancelledError, VaultFormatError, VaultNotSelectedError

from test_svcrotate.fakes import FakeController, FakeInventory, FakeSecretProvider, FakeStore, service


VAULT = [
    ('Alpha', 'svc-alpha', 'P@ss1'),
    ('Beta', 'svc-beta', 'P@ss2'),
]


class TestRunCoordinator(unittest.TestCase):

    def setUp(self):
        self.inventory = FakeInventory({
            'HostA': [
                service('Svc1', 'DOMAIN\\svc-alpha', 'HostA'),
                service('Spooler', 'LocalSystem', 'HostA'),
            ],
        })
        self.store = FakeStore(VAULT)
        self.controller = FakeController()
        self.provider = FakeSecretProvider()
        self.output = io.StringIO()

    def coordinator(self, **kwargs):
        return RunCoordinator(self.inventory, self.store, self.controller, self.provider, output=self.output,
                              **kwargs)

    def testEndToEnd(self):
        summary = self.coordinator().run(['HostA', 'HostB'])

        self.assertEqual(self.controller.calls, [('HostA', 'Svc1', 'DOMAIN\\svc-alpha', 'P@ss1')])
        self.assertEqual(self.controller.restarts, [('HostA', 'Svc1')])
        self.assertEqual(self.store.searches, ['svc-alpha'])
        self.assertFalse(self.store.is_open)
        self.assertEqual(self.store.closed, 1)

        self.assertEqual(summary.scanned, 1)
        self.assertEqual(summary.matched, 1)
        self.assertEqual(summary.rotated_ok, 1)
        self.assertEqual(summary.rotated_failed, 0)
        self.assertEqual(summary.restart_failed, 0)
        self.assertEqual(summary.unreachable_hosts, 1)

        report = self.output.getvalue()
        self.assertIn('UNREACHABLE: HostB', report)
        self.assertIn('ROTATED: Svc1 on HostA (DOMAIN\\svc-alpha)', report)
        self.assertNotIn('P@ss1', report)

    def testVaultClosedBeforeRotation(self):
        states = []
        store = self.store

        class Watching(FakeController):
            def set_credentials(self, host, service_id, account, password):
                states.append(store.is_open)
                return super().set_credentials(host, service_id, account, password)

        self.controller = Watching()
        self.coordinator().run(['HostA'])
        self.assertEqual(states, [False])

    def testMixedCaseAccountsAllSearched(self):
        self.inventory = FakeInventory({
            'HostA': [
                service('Svc1', 'DOMAIN\\SVC-ALPHA', 'HostA'),
                service('Svc2', 'DOMAIN\\svc-alpha', 'HostA'),
            ],
        })
        summary = self.coordinator().run(['HostA'])
        self.assertEqual(self.store.searches, ['SVC-ALPHA', 'svc-alpha'])
        self.assertEqual(summary.matched, 2)
        self.assertEqual(summary.unmatched, 0)
        self.assertEqual(summary.ambiguous, 0)
        self.assertEqual(self.controller.calls, [
            ('HostA', 'Svc1', 'DOMAIN\\SVC-ALPHA', 'P@ss1'),
            ('HostA', 'Svc2', 'DOMAIN\\svc-alpha', 'P@ss1'),
        ])

    def testOverlappingSearchesAreNotAmbiguous(self):
        self.inventory = FakeInventory({
            'HostA': [
                service('Svc1', 'DOMAIN\\svc-a', 'HostA'),
                service('Svc2', 'DOMAIN\\svc-alpha', 'HostA'),
            ],
        })
        self.store = FakeStore([('A', 'svc-a', 'P@ssA'), ('Alpha', 'svc-alpha', 'P@ss1')])
        summary = self.coordinator().run(['HostA'])
        self.assertEqual(summary.matched, 2)
        self.assertEqual(summary.ambiguous, 0)
        self.assertNotIn('WARNING', self.output.getvalue())
        self.assertEqual(self.controller.calls, [
            ('HostA', 'Svc1', 'DOMAIN\\svc-a', 'P@ssA'),
            ('HostA', 'Svc2', 'DOMAIN\\svc-alpha', 'P@ss1'),
        ])

    def testAccessDenied(self):
        self.controller = FakeController(codes={('HostA', 'Svc1'): 2})
        summary = self.coordinator().run(['HostA'])
        self.assertEqual(self.controller.restarts, [])
        self.assertEqual(summary.rotated_ok, 0)
        self.assertEqual(summary.rotated_failed, 1)
        self.assertIn('FAILED: Svc1 on HostA (DOMAIN\\svc-alpha): Access Denied', self.output.getvalue())

    def testNothingDiscovered(self):
        self.inventory = FakeInventory({'HostA': [service('Spooler', 'LocalSystem', 'HostA')]})
        summary = self.coordinator().run(['HostA'])
        self.assertEqual(summary.scanned, 0)
        self.assertEqual(self.provider.picker_calls, [])
        self.assertEqual(self.provider.attempts, [])
        self.assertEqual(self.store.opened, [])
        self.assertIn('Nothing to do', self.output.getvalue())

    def testUnmatchedRecord(self):
        self.inventory = FakeInventory({'HostA': [service('Svc3', 'DOMAIN\\svc-gamma', 'HostA')]})
        summary = self.coordinator().run(['HostA'])
        self.assertEqual(summary.matched, 0)
        self.assertEqual(summary.unmatched, 1)
        self.assertEqual(self.controller.calls, [])
        self.assertIn('NO VAULT MATCH: Svc3 on HostA (DOMAIN\\svc-gamma)', self.output.getvalue())

    def testNoVaultSelected(self):
        self.provider = FakeSecretProvider(vault_path=None)
        with self.assertRaises(VaultNotSelectedError):
            self.coordinator().run(['HostA'])
        self.assertEqual(self.store.opened, [])
        self.assertEqual(self.controller.calls, [])

    def testExplicitVaultPath(self):
        self.coordinator(vault_path='explicit.kdbx').run(['HostA'])
        self.assertEqual(self.provider.picker_calls, [])
        self.assertEqual(self.store.opened, ['explicit.kdbx'])

    def testWrongPassphraseReprompts(self):
        self.provider = FakeSecretProvider(['nope', 'correct horse'])
        summary = self.coordinator().run(['HostA'])
        self.assertEqual(self.provider.rejections, [1])
        self.assertEqual(summary.rotated_ok, 1)

    def testCancelled(self):
        self.provider = FakeSecretProvider([None])
        with self.assertRaises(OperationCancelledError):
            self.coordinator().run(['HostA'])
        self.assertEqual(self.controller.calls, [])

    def testCorruptVault(self):
        self.store = FakeStore(VAULT, corrupt=True)
        with self.assertRaises(VaultFormatError):
            self.coordinator().run(['HostA'])
        self.assertEqual(self.controller.calls, [])

    def testVaultClosedOnSearchError(self):
        class Failing(FakeStore):
            def search_by_username(self, handle, term):
                raise RuntimeError('search failed')

        self.store = Failing(VAULT)
        with self.assertRaises(RuntimeError):
            self.coordinator().run(['HostA'])
        self.assertEqual(self.store.closed, 1)
        self.assertFalse(self.store.is_open)

    def testSecretsScrubbed(self):
        self.coordinator().run(['HostA'])
        for entry in self.store.returned:
            self.assertTrue(entry.is_scrubbed)
        for passphrase in self.provider.issued:
            self.assertTrue(passphrase.is_scrubbed)

    def testVaultDirectoryPassedToPicker(self):
        from svcrotate.configurations import RotationSettings
        settings = RotationSettings.defaults()._replace(vault_directory='D:\\Vaults')
        self.coordinator(settings=settings).run(['HostA'])
        self.assertEqual(self.provider.picker_calls, [('.kdbx', 'D:\\Vaults')])


if __name__ == '__main__':
    unittest.main()
