"""
svcrotate.threads
=================

Classes and functions for calling functions in the background and joining on the results.
"""

import sys
import threading
import traceback


from .exceptions import verify_callable


__author__ = 'Aaron Hosford'
__all__ = [
    "AsyncCall",
    "fan_out",
]


class AsyncCall(threading.Thread):
    """
    A specialized thread to call a function asynchronously and capture the return value or exception info when it
    becomes available.
    """

    def __init__(self, group=None, target=None, name=None, args=(), kwargs=None, *, daemon=None, semaphore=None):
        super().__init__(group, self._target_wrapper, name, args, kwargs, daemon=daemon)
        self._wrapped_target = target
        self._semaphore = semaphore
        self.terminated = False
        self.return_value = None
        self.exception = None
        self.traceback = None
        self.exc_info = (None, None, None)

    @property
    def succeeded(self):
        """Whether the call completed without raising an exception."""
        return self.terminated and self.exception is None

    def _target_wrapper(self, *args, **kwargs):
        """
        Wraps the target function, capturing its return value or exception info. The exception is not re-raised;
        it is left for whoever joins on the call to inspect.
        """
        if self._semaphore is not None:
            self._semaphore.acquire()
        try:
            if self._wrapped_target:
                self.return_value = self._wrapped_target(*args, **kwargs)
        except Exception as exc:
            self.exception = exc
            self.traceback = traceback.format_exc()
            self.exc_info = sys.exc_info()
        finally:
            self.terminated = True
            if self._semaphore is not None:
                self._semaphore.release()


def fan_out(function, items, max_workers=None, name=None):
    """
    Call a function once for each item, each call in its own thread, and wait for all of them to
    complete. At most max_workers calls run at the same time. The calls are returned in the same
    order as the items, whether or not they succeeded.

    :param function: The function to call. It receives one item as its only argument.
    :param items: The items to call the function with.
    :param max_workers: The maximum number of simultaneous calls, or None for no limit.
    :param name: An optional prefix for the thread names.
    :return: A list of completed AsyncCall objects.
    """
    verify_callable(function)
    assert max_workers is None or max_workers > 0

    semaphore = None if max_workers is None else threading.BoundedSemaphore(max_workers)

    calls = []
    for index, item in enumerate(items):
        call = AsyncCall(
            target=function,
            name=None if name is None else '%s-%s' % (name, index),
            args=(item,),
            daemon=True,
            semaphore=semaphore
        )
        call.start()
        calls.append(call)

    for call in calls:
        call.join()

    return calls
