"""
Service Account Password Rotation
=================================

Sets the password of every Windows service that runs under a service account
on the target hosts to the account's current password in a KeePass vault, and
restarts each service whose credentials were changed.


USAGE:

    rotate_service_passwords HOST [HOST ...]

or, if your path variable isn't setup,

    python -m svcrotate HOST [HOST ...]

You will be asked to select the vault file and to enter its master passphrase.
"""


import argparse
import configparser
import logging
import sys


from . import __version__
from .configurations import RotationSettings, get_config_manager
from .exceptions import (ConfigurationError, InventoryUnavailableError, OperationCancelledError, VaultFormatError,
                         VaultNotSelectedError)
from .inventory import normalize_hosts
from .logging import configure_logging


__author__ = 'Aaron Hosford'
__all__ = [
    'EXIT_OK',
    'EXIT_NO_VAULT_SELECTED',
    'EXIT_VAULT_UNREADABLE',
    'EXIT_INVENTORY_UNAVAILABLE',
    'EXIT_CANCELLED',
    'EXIT_BAD_CONFIGURATION',
    'EXIT_INTERRUPTED',
    'build_parser',
    'build_coordinator',
    'run',
    'main',
]


log = logging.getLogger(__name__)


EXIT_OK = 0
EXIT_NO_VAULT_SELECTED = 1
EXIT_VAULT_UNREADABLE = 2
EXIT_INVENTORY_UNAVAILABLE = 3
EXIT_CANCELLED = 4
EXIT_BAD_CONFIGURATION = 5
EXIT_INTERRUPTED = 130


def build_parser():
    """Build the command line argument parser."""
    parser = argparse.ArgumentParser(
        prog='rotate_service_passwords',
        description="Apply the current vault passwords to the service accounts on a fleet of hosts, and restart "
                    "the affected services."
    )
    parser.add_argument(
        'hosts',
        nargs='+',
        metavar='HOST',
        help="The target host names. Comma-separated lists are accepted."
    )
    parser.add_argument('--vault-tool-dir', dest='vault_tool_dir', default=None, help=argparse.SUPPRESS)
    parser.add_argument('--vault-path', dest='vault_path', default=None, help=argparse.SUPPRESS)
    parser.add_argument('--config', dest='config', action='append', default=[], help=argparse.SUPPRESS)
    parser.add_argument('--version', action='version', version='%(prog)s ' + __version__)
    return parser


def build_coordinator(settings, vault_path=None):
    """
    Create a coordinator wired to the production Windows collaborators. Raises
    InventoryUnavailableError if the Windows management modules cannot be loaded.

    :param settings: A RotationSettings instance.
    :param vault_path: An explicit vault file path, or None to ask for one.
    :return: A svcrotate.coordinator.RunCoordinator.
    """
    try:
        from . import windows
    except ImportError as exc:
        raise InventoryUnavailableError("The WMI service inventory modules are not available: %s" % exc) from exc

    from .coordinator import RunCoordinator
    from .keepass import KeePassStore

    return RunCoordinator(
        windows.WMIInventoryProvider(settings.liveness_port, settings.liveness_timeout),
        KeePassStore(),
        windows.WMIServiceController(settings.restart_wait_seconds),
        windows.ConsoleSecretProvider(),
        settings,
        vault_path=vault_path
    )


def run(args, coordinator_factory=build_coordinator, stderr=None):
    """
    Run the rotation for parsed command line arguments, translating fatal conditions into exit
    codes.

    :param args: The argparse.Namespace from build_parser().
    :param coordinator_factory: A callable accepting (settings, vault_path=...) that returns a
        RunCoordinator.
    :param stderr: The stream for fatal notices. Defaults to sys.stderr.
    :return: The process exit code.
    """
    stderr = sys.stderr if stderr is None else stderr

    try:
        settings = RotationSettings.load(get_config_manager(extra_paths=args.config))
    except (OSError, configparser.Error, ConfigurationError) as exc:
        print("The configuration could not be loaded: %s" % exc, file=stderr)
        return EXIT_BAD_CONFIGURATION
    if args.vault_tool_dir:
        settings = settings._replace(vault_directory=args.vault_tool_dir)
    configure_logging(settings)

    hosts = normalize_hosts(args.hosts)
    if not hosts:
        print("No target hosts were given.", file=stderr)
        return EXIT_OK

    try:
        coordinator = coordinator_factory(settings, vault_path=args.vault_path)
        coordinator.run(hosts)
    except VaultNotSelectedError:
        log.warning("No vault file was selected; aborting.")
        print("No vault file was selected. No changes were made.", file=stderr)
        return EXIT_NO_VAULT_SELECTED
    except VaultFormatError as exc:
        log.error("The vault could not be opened: %s", exc)
        print("The vault file could not be read: %s. No changes were made." % exc, file=stderr)
        return EXIT_VAULT_UNREADABLE
    except InventoryUnavailableError as exc:
        log.error("Service inventory is unavailable: %s", exc)
        print("Service inventory is unavailable: %s. No changes were made." % exc, file=stderr)
        return EXIT_INVENTORY_UNAVAILABLE
    except OperationCancelledError:
        log.warning("The passphrase prompt was cancelled; aborting.")
        print("The run was cancelled. No changes were made.", file=stderr)
        return EXIT_CANCELLED

    return EXIT_OK


def main(argv=None):
    """
    Service Account Password Rotation
    =================================

    Entry point for the rotate_service_passwords console script.
    """
    args = build_parser().parse_args(argv)
    try:
        return run(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == '__main__':
    sys.exit(main())
