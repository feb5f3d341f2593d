# Copyright 2017 Red Hat, Inc.
# Copyright 2023-2024 Acme Gating, LLC
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

# Utility methods shared among drivers.

import time
from enum import StrEnum

from selmachine import exceptions


DEFAULT_WAIT_ATTEMPTS = 10
DEFAULT_WAIT_INTERVAL = 1.0


class WaitResult:
    """The outcome of a wait_for call"""

    class Status(StrEnum):
        SUCCEEDED = "succeeded"
        TIMED_OUT = "timed out"
        ERROR = "error"

    def __init__(self, status, attempts, error=None):
        self.status = status
        self.attempts = attempts
        self.error = error

    @property
    def succeeded(self):
        return self.status == self.Status.SUCCEEDED

    def check(self, purpose):
        """Raise an exception unless the wait succeeded

        A timeout becomes a TimeoutException; an error raised by the
        check function is re-raised as-is.
        """
        if self.status == self.Status.SUCCEEDED:
            return
        if self.status == self.Status.ERROR:
            raise self.error
        raise exceptions.TimeoutException(
            "Timeout waiting for %s after %s attempts" %
            (purpose, self.attempts))

    def __repr__(self):
        return '<WaitResult %s attempts=%s error=%r>' % (
            self.status, self.attempts, self.error)


def wait_for(check, attempts=DEFAULT_WAIT_ATTEMPTS,
             interval=DEFAULT_WAIT_INTERVAL):
    """Call check until it returns a true value

    The check is called at most ``attempts`` times with ``interval``
    seconds between calls.  An exception raised by check ends the wait
    immediately and is stored on the result.
    """
    for attempt in range(1, attempts + 1):
        try:
            done = check()
        except Exception as e:
            return WaitResult(WaitResult.Status.ERROR, attempt, e)
        if done:
            return WaitResult(WaitResult.Status.SUCCEEDED, attempt)
        if attempt < attempts:
            time.sleep(interval)
    return WaitResult(WaitResult.Status.TIMED_OUT, attempts)


def join_host_port(host, port):
    if ':' in host:
        return '[%s]:%s' % (host, port)
    return '%s:%s' % (host, port)


class Timer:
    def __init__(self, log, msg):
        self.log = log
        self.msg = msg

    def __enter__(self):
        self.start = time.perf_counter()

    def __exit__(self, type, value, traceback):
        delta = time.perf_counter() - self.start
        self.log.debug(f'{self.msg} in {delta}')
