"""
Service account password rotation.

Discovers the Windows services that run under domain or local service accounts
across a fleet of servers, looks up the current password for each account in an
encrypted KeePass vault, applies the password to every matching service, and
restarts the services whose credentials were changed.
"""


__version__ = '1.0.0'

__author__ = 'Aaron Hosford'
__author_email__ = 'hosford42@gmail.com'
__description__ = 'svcrotate: Windows Service Account Password Rotation'
__long_description__ = __doc__
__license__ = 'MIT (https://opensource.org/licenses/MIT)'
__install_requires__ = [
    # 3rd-party
    'cryptography',
    'pykeepass>=4.0',
    'pywin32; sys_platform == "win32"',
    'wmi; sys_platform == "win32"',
]
__url__ = 'TBD'
__python_requires__ = '>=3.6'
__packages__ = [
    'svcrotate',
    'svcrotate.abc',
    'svcrotate.security',
    'test_svcrotate',
]
__package_data__ = {
    'svcrotate': ['svcrotate.ini'],
}
__entry_points__ = {'console_scripts': ['rotate_service_passwords = svcrotate.cli:main']}
