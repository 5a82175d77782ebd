# Copyright The Volcano Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Deadline-based cancellation shared between a lifecycle thread and the harness.
"""

import threading
import time
from typing import Optional

from metricsamples.exceptions import OperationTimeoutError

DEADLINE_EXCEEDED = "deadline exceeded"


class CancellationToken:
    """Thread-safe cancellation signal with an optional deadline.

    The token becomes cancelled either when ``cancel()`` is called or when the
    deadline passes, whichever happens first. The first reason wins.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self.timeout = timeout
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self, reason: str = "cancelled") -> None:
        with self._lock:
            if self._reason is None:
                self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self.cancel(DEADLINE_EXCEEDED)
            return True
        return False

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, ``None`` without one"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def wait(self, interval: float) -> bool:
        """Sleep up to ``interval`` seconds, waking early on cancellation.

        Returns True if the token is cancelled when the wait ends.
        """
        remaining = self.remaining()
        if remaining is not None:
            interval = min(interval, remaining)
        self._event.wait(interval)
        return self.cancelled

    def raise_if_cancelled(self, operation: str) -> None:
        if self.cancelled:
            raise OperationTimeoutError(
                f"{operation} aborted: {self._reason}",
                reason=self._reason,
                context={"timeout": self.timeout}
            )
