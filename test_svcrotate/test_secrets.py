import pickle
import unittest

from svcrotate.exceptions import SecretScrubbedError
from svcrotate.security.credentials import Credential
from svcrotate.security.encryption import from_bytes, zero_buffer
from svcrotate.security.secrets import SecretValue


class TestSecretValue(unittest.TestCase):

    def testReveal(self):
        secret = SecretValue('P@ss1')
        with secret.reveal() as buffer:
            self.assertEqual(from_bytes(buffer), 'P@ss1')

    def testRevealZeroesBuffer(self):
        secret = SecretValue('P@ss1')
        with secret.reveal() as buffer:
            pass
        self.assertEqual(buffer, bytearray(len(buffer)))

    def testRevealZeroesBufferOnError(self):
        secret = SecretValue('P@ss1')
        captured = []
        with self.assertRaises(RuntimeError):
            with secret.reveal() as buffer:
                captured.append(buffer)
                raise RuntimeError()
        self.assertEqual(captured[0], bytearray(5))

    def testFromBufferZeroesSource(self):
        source = bytearray(b'hunter2')
        secret = SecretValue.from_buffer(source)
        self.assertEqual(source, bytearray(7))
        with secret.reveal() as buffer:
            self.assertEqual(bytes(buffer), b'hunter2')

    def testScrub(self):
        secret = SecretValue('P@ss1')
        self.assertFalse(secret.is_scrubbed)
        secret.scrub()
        self.assertTrue(secret.is_scrubbed)
        secret.scrub()
        with self.assertRaises(SecretScrubbedError):
            with secret.reveal():
                pass

    def testContextManagerScrubs(self):
        with SecretValue('P@ss1') as secret:
            self.assertFalse(secret.is_scrubbed)
        self.assertTrue(secret.is_scrubbed)

    def testCopyIsIndependent(self):
        original = SecretValue('P@ss1')
        duplicate = original.copy()
        original.scrub()
        with duplicate.reveal() as buffer:
            self.assertEqual(from_bytes(buffer), 'P@ss1')

    def testNeverDisplayed(self):
        secret = SecretValue('P@ss1')
        self.assertNotIn('P@ss1', str(secret))
        self.assertNotIn('P@ss1', repr(secret))
        secret.scrub()
        self.assertIn('scrubbed', repr(secret))

    def testCannotBePickled(self):
        with self.assertRaises(TypeError):
            pickle.dumps(SecretValue('P@ss1'))

    def testZeroBufferEmpty(self):
        buffer = bytearray()
        zero_buffer(buffer)
        self.assertEqual(buffer, bytearray())


class TestCredential(unittest.TestCase):

    def testAccountParts(self):
        credential = Credential('DOMAIN\\svc-alpha', SecretValue('P@ss1'))
        self.assertEqual(credential.account, 'DOMAIN\\svc-alpha')
        self.assertEqual(credential.domain, 'DOMAIN')
        self.assertEqual(credential.user, 'svc-alpha')
        self.assertIsNone(Credential('svc-alpha', SecretValue('x')).domain)

    def testUnpacking(self):
        password = SecretValue('P@ss1')
        account, secret = Credential('DOMAIN\\svc-alpha', password)
        self.assertEqual(account, 'DOMAIN\\svc-alpha')
        self.assertIs(secret, password)

    def testContextManagerScrubs(self):
        with Credential('DOMAIN\\svc-alpha', SecretValue('P@ss1')) as credential:
            self.assertFalse(credential.is_scrubbed)
        self.assertTrue(credential.is_scrubbed)
        self.assertTrue(credential.password.is_scrubbed)

    def testPasswordHidden(self):
        credential = Credential('DOMAIN\\svc-alpha', SecretValue('P@ss1'))
        self.assertNotIn('P@ss1', str(credential))
        self.assertNotIn('P@ss1', repr(credential))
        self.assertIn('svc-alpha', repr(credential))


if __name__ == '__main__':
    unittest.main()
