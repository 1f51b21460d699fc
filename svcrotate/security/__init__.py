"""
Security- and credential-related functionality.

The security chain, summarized in one sentence:
    The current passwords of the service accounts are read from an encrypted
    KeePass vault, unlocked with a master passphrase that the operator types at
    run time, and every sensitive value taken from either one is held only in
    encrypted form in memory until the moment it is handed to the remote service
    control call.

Every passphrase, vault title, account name and password is wrapped in a
SecretValue as soon as it is obtained. A SecretValue keeps its plaintext as a
Fernet token under a random key that is generated once per process and never
written anywhere. The plaintext is decrypted into a mutable buffer only inside
a reveal() block, and the buffer is overwritten with zeros when the block
exits. Scrubbing a SecretValue destroys the token.
"""


__author__ = 'Aaron Hosford'
__all__ = [
    'credentials',
    'encryption',
    'secrets',
]
