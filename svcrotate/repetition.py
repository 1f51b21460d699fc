"""
svcrotate.repetition
====================

Functions for conditionally repeating checks against remote hosts.
"""

import time

__author__ = 'Aaron Hosford'
__all__ = [
    'wait_for',
]


def wait_for(condition, timeout=None, attempts=None, interval=None, raise_error=False, ignore_errors=True,
             args=None, kwargs=None, sleep=time.sleep):
    """
    Wait for the specified condition to be satisfied.

    :param condition: A callable (function, method, or lambda) which is called repeatedly.
    :param timeout: The maximum number of seconds to wait before giving up.
    :param attempts: The maximum number of attempts to make before giving up.
    :param interval: The number of seconds to wait between attempts. Default is 1.
    :param raise_error: Whether to raise a TimeoutError on failure, or just return False.
    :param ignore_errors: Whether to treat errors in the condition as the condition not being met, or re-raise them.
    :param args: The argument list to pass to the condition.
    :param kwargs: The keyword arguments to pass to the condition.
    :param sleep: The function used to pause between attempts.
    :return: Whether the condition was satisfied.
    """

    assert callable(condition)
    assert timeout is None or timeout >= 0
    assert attempts is None or attempts >= 0
    assert interval is None or interval >= 0

    if interval is None:
        interval = 1

    args = args or ()
    kwargs = kwargs or {}

    if timeout is None:
        end_time = None
    else:
        end_time = time.time() + timeout

    counter = 0
    while True:
        counter += 1

        # noinspection PyBroadException
        try:
            if condition(*args, **kwargs):
                return True
        except Exception:
            if not ignore_errors:
                raise

        if end_time is not None and time.time() >= end_time:
            if raise_error:
                raise TimeoutError("Timed out after waiting " + str(timeout) + " second(s).")
            else:
                return False

        if attempts is not None and counter >= attempts:
            if raise_error:
                raise TimeoutError("Timed out after making " + str(attempts) + " attempt(s).")
            else:
                return False

        sleep(interval)  # Avoid hammering hosts that are slow to respond.
