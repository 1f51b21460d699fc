"""
svcrotate.rotation
==================

Applies vault passwords to services and restarts them.

Each task is handled on its own: the new credentials are set, and only if the service control
manager reports success is the service restarted. A failure of either step is recorded against
that task alone, and the remaining tasks are still processed. A failed restart never undoes the
credential change.
"""


import collections
import enum
import logging


from .abc.services import ServiceController
from .accounts import ServiceAccountRecord
from .exceptions import verify_type
from .security.credentials import Credential
from .security.encryption import from_bytes


__author__ = 'Aaron Hosford'
__all__ = [
    'ResultCode',
    'RESTART_FAILED_MESSAGE',
    'RotationTask',
    'RotationResult',
    'RotationExecutor',
]


log = logging.getLogger(__name__)


RESTART_FAILED_MESSAGE = 'restart failed - verify credential correctness manually'


class ResultCode(enum.IntEnum):
    """
    The return codes of the service control manager's change-configuration call. Zero is the only
    success. Each failure is classified as fatal, meaning the same call will keep failing until
    someone fixes the service, account or permissions, or non-fatal, meaning the condition is
    transient and the call may succeed if simply repeated later.
    """

    def __new__(cls, value, description, fatal):
        member = int.__new__(cls, value)
        member._value_ = value
        member.description = description
        member.fatal = fatal
        return member

    SUCCESS = (0, 'Success', False)
    NOT_SUPPORTED = (1, 'Not Supported', True)
    ACCESS_DENIED = (2, 'Access Denied', True)
    DEPENDENT_SERVICES_RUNNING = (3, 'Dependent Services Running', False)
    INVALID_SERVICE_CONTROL = (4, 'Invalid Service Control', True)
    SERVICE_CANNOT_ACCEPT_CONTROL = (5, 'Service Cannot Accept Control', False)
    SERVICE_NOT_ACTIVE = (6, 'Service Not Active', False)
    SERVICE_REQUEST_TIMEOUT = (7, 'Service Request Timeout', False)
    UNKNOWN_FAILURE = (8, 'Unknown Failure', True)
    PATH_NOT_FOUND = (9, 'Path Not Found', True)
    SERVICE_ALREADY_STOPPED = (10, 'Service Already Stopped', False)
    SERVICE_DATABASE_LOCKED = (11, 'Service Database Locked', False)
    SERVICE_DEPENDENCY_DELETED = (12, 'Service Dependency Deleted', True)
    SERVICE_DEPENDENCY_FAILURE = (13, 'Service Dependency Failure', True)
    SERVICE_DISABLED = (14, 'Service Disabled', True)
    SERVICE_LOGON_FAILED = (15, 'Service Logon Failed', True)
    SERVICE_MARKED_FOR_DELETION = (16, 'Service Marked For Deletion', True)
    SERVICE_NO_THREAD = (17, 'Service No Thread', False)
    STATUS_CIRCULAR_DEPENDENCY = (18, 'Status Circular Dependency', True)
    STATUS_DUPLICATE_NAME = (19, 'Status Duplicate Name', True)
    STATUS_INVALID_NAME = (20, 'Status Invalid Name', True)
    STATUS_INVALID_PARAMETER = (21, 'Status Invalid Parameter', True)
    STATUS_INVALID_SERVICE_ACCOUNT = (22, 'Status Invalid Service Account', True)
    STATUS_SERVICE_EXISTS = (23, 'Status Service Exists', True)
    SERVICE_ALREADY_PAUSED = (24, 'Service Already Paused', False)

    @classmethod
    def interpret(cls, value):
        """
        Map a raw return code to a ResultCode. Codes outside the table are treated as
        UNKNOWN_FAILURE.

        :param value: The raw return code.
        :return: The corresponding ResultCode.
        """
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return cls.UNKNOWN_FAILURE

    @property
    def succeeded(self):
        """Whether this code indicates success."""
        return self is ResultCode.SUCCESS

    def __str__(self):
        return self.description


class RotationTask(collections.namedtuple('RotationTask', 'record credential')):
    """
    One unit of rotation work: a discovered service paired with the credential it should run
    under. The credential's account is the service's own qualified run-as account, and its
    password comes from the matching vault entry.
    """

    __slots__ = ()

    @classmethod
    def create(cls, record, entry):
        """
        Create a task for the record from a matching vault entry, taking an independent copy of
        the entry's password.

        :param record: A ServiceAccountRecord.
        :param entry: The matching VaultEntry.
        :return: A new RotationTask.
        """
        verify_type(record, ServiceAccountRecord)
        return cls(record, Credential(record.run_as_account, entry.password.copy()))

    @property
    def host(self):
        return self.record.host_name

    @property
    def service_id(self):
        return self.record.service_id

    @property
    def account(self):
        return self.record.run_as_account

    def __str__(self):
        return str(self.record)


class RotationResult(collections.namedtuple('RotationResult',
                                            'task applied_ok apply_error_code restarted restart_error '
                                            'raw_code error')):
    """
    The outcome of one task.

    applied_ok: Whether the credential change succeeded.
    apply_error_code: The ResultCode of a failed credential change, or None.
    restarted: Whether the restart succeeded, or None if no restart was attempted.
    restart_error: The reason the restart failed, or None.
    raw_code: The raw return code of the credential change, or None if the call raised an error.
    error: The message of an error raised by the credential change call, or None.
    """

    __slots__ = ()

    def __new__(cls, task, applied_ok, apply_error_code=None, restarted=None, restart_error=None, raw_code=None,
                error=None):
        return super().__new__(cls, task, applied_ok, apply_error_code, restarted, restart_error, raw_code, error)

    @property
    def restart_attempted(self):
        return self.restarted is not None

    @property
    def restart_failed(self):
        return self.restarted is False

    @property
    def failure_kind(self):
        """A short description of what went wrong with the credential change, or None."""
        if self.applied_ok:
            return None
        if self.error is not None:
            return 'Error: %s' % self.error
        description = str(self.apply_error_code or ResultCode.UNKNOWN_FAILURE)
        if self.raw_code is not None and self.apply_error_code is not None and self.raw_code != \
                int(self.apply_error_code):
            description += ' (code %s)' % self.raw_code
        return description

    @property
    def status(self):
        """A one-word summary of the outcome."""
        if not self.applied_ok:
            return 'FAILED'
        elif self.restart_failed:
            return 'RESTART FAILED'
        else:
            return 'ROTATED'

    def describe(self):
        """
        Return a one-line description of the outcome, naming the host, service and account.
        """
        line = '%s: %s on %s (%s)' % (self.status, self.task.service_id, self.task.host, self.task.account)
        if not self.applied_ok:
            line += ': ' + self.failure_kind
        elif self.restart_failed:
            line += ': ' + RESTART_FAILED_MESSAGE
            if self.restart_error:
                line += ' (%s)' % self.restart_error
        return line


class RotationExecutor:
    """
    Applies each task's credential through a ServiceController, then restarts the service if and
    only if the credential change succeeded. Tasks are processed one at a time, in order.
    """

    def __init__(self, controller):
        verify_type(controller, ServiceController)
        self._controller = controller

    @property
    def controller(self):
        return self._controller

    def apply(self, task):
        """
        Set the task's credential on its service. The credential is scrubbed as soon as the
        controller call returns, whether or not it succeeded.

        :param task: A RotationTask.
        :return: A tuple, (ResultCode, raw return code).
        """
        with task.credential as credential:
            with credential.password.reveal() as buffer:
                raw_code = self._controller.set_credentials(
                    task.host,
                    task.service_id,
                    credential.account,
                    from_bytes(buffer)
                )
        return ResultCode.interpret(raw_code), raw_code

    def execute_one(self, task):
        """
        Process a single task. Errors raised by the controller are recorded in the result rather
        than propagated.

        :param task: A RotationTask.
        :return: A RotationResult.
        """
        verify_type(task, RotationTask)
        log.info("Setting credentials for %s.", task)

        try:
            code, raw_code = self.apply(task)
        except Exception as exc:
            log.exception("Setting credentials for %s raised an error.", task)
            return RotationResult(task, False, error=str(exc) or type(exc).__name__)

        if not code.succeeded:
            log.warning("Setting credentials for %s failed: %s (code %s).", task, code, raw_code)
            return RotationResult(task, False, apply_error_code=code, raw_code=raw_code)

        log.info("Credentials set for %s; restarting.", task)
        try:
            self._controller.restart(task.host, task.service_id)
        except Exception as exc:
            log.warning("Restarting %s failed: %s", task, exc)
            return RotationResult(task, True, restarted=False, restart_error=str(exc) or type(exc).__name__,
                                  raw_code=raw_code)

        log.info("Restarted %s.", task)
        return RotationResult(task, True, restarted=True, raw_code=raw_code)

    def execute(self, tasks):
        """
        Process every task. A failure in one task never prevents the others from being attempted.

        :param tasks: An iterable of RotationTasks.
        :return: A tuple of RotationResults, in the same order as the tasks.
        """
        results = []
        for task in tasks:
            try:
                results.append(self.execute_one(task))
            finally:
                task.credential.scrub()
        return tuple(results)
