import unittest

from svcrotate.accounts import (RESERVED_IDENTITIES, ServiceAccountRecord, StartMode, is_reserved_identity,
                                leaf_name, split_account)


class TestAccountNames(unittest.TestCase):

    def testSplitDownLevel(self):
        self.assertEqual(split_account('DOMAIN\\svc-alpha'), ('DOMAIN', 'svc-alpha'))
        self.assertEqual(split_account('.\\svc-local'), ('.', 'svc-local'))

    def testSplitPrincipalName(self):
        self.assertEqual(split_account('svc-alpha@corp.example.com'), ('corp.example.com', 'svc-alpha'))

    def testSplitUnqualified(self):
        self.assertEqual(split_account('  svc-alpha '), ('', 'svc-alpha'))

    def testLeafName(self):
        self.assertEqual(leaf_name('DOMAIN\\svc-alpha'), 'svc-alpha')
        self.assertEqual(leaf_name('svc-alpha@corp'), 'svc-alpha')
        self.assertEqual(leaf_name('svc-alpha'), 'svc-alpha')


class TestReservedIdentities(unittest.TestCase):

    reserved = [
        'LocalSystem',
        'localsystem',
        '.\\LocalSystem',
        'NT AUTHORITY\\LocalService',
        'NT AUTHORITY\\NetworkService',
        'NT AUTHORITY\\Local Service',
        'nt authority\\network service',
        'NT AUTHORITY\\SYSTEM',
        'NT SERVICE\\MSSQLSERVER',
        'NT-AUTORITÄT\\NETZWERKDIENST',
        'AUTORITE NT\\SERVICE RÉSEAU',
        'LocalService',
        'NetworkService',
    ]

    ordinary = [
        'DOMAIN\\svc-alpha',
        '.\\svc-local',
        'svc-alpha@corp.example.com',
        'NetworkServiceAccount',
        'DOMAIN\\LocalServiceUser',
    ]

    def testReserved(self):
        for account in self.reserved:
            with self.subTest(account=account):
                self.assertTrue(is_reserved_identity(account))

    def testOrdinary(self):
        for account in self.ordinary:
            with self.subTest(account=account):
                self.assertFalse(is_reserved_identity(account))

    def testIdentitiesAreCaseFolded(self):
        for identity in RESERVED_IDENTITIES:
            self.assertEqual(identity, identity.casefold())


class TestStartMode(unittest.TestCase):

    def testParse(self):
        self.assertIs(StartMode.parse('Auto'), StartMode.AUTOMATIC)
        self.assertIs(StartMode.parse('Manual'), StartMode.MANUAL)
        self.assertIs(StartMode.parse('Disabled'), StartMode.DISABLED)
        self.assertIs(StartMode.parse('Boot'), StartMode.OTHER)
        self.assertIs(StartMode.parse(None), StartMode.OTHER)
        self.assertIs(StartMode.parse(StartMode.MANUAL), StartMode.MANUAL)


class TestServiceAccountRecord(unittest.TestCase):

    def testFields(self):
        record = ServiceAccountRecord('HostA', 'Svc1', None, 'Auto', ' DOMAIN\\svc-alpha ')
        self.assertEqual(record.display_name, 'Svc1')
        self.assertIs(record.start_mode, StartMode.AUTOMATIC)
        self.assertEqual(record.run_as_account, 'DOMAIN\\svc-alpha')
        self.assertEqual(record.leaf, 'svc-alpha')
        self.assertEqual(record.key, ('hosta', 'svc1'))
        self.assertEqual(str(record), 'Svc1 on HostA (DOMAIN\\svc-alpha)')

    def testRejectsReservedIdentity(self):
        with self.assertRaises(ValueError):
            ServiceAccountRecord('HostA', 'Svc1', 'Service One', 'Auto', 'NT AUTHORITY\\LocalService')

    def testRejectsEmptyAccount(self):
        with self.assertRaises(ValueError):
            ServiceAccountRecord('HostA', 'Svc1', 'Service One', 'Auto', '   ')


if __name__ == '__main__':
    unittest.main()
