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

import threading
import time
import unittest

from metricsamples.cancellation import DEADLINE_EXCEEDED, CancellationToken
from metricsamples.exceptions import OperationTimeoutError


class TestCancellationToken(unittest.TestCase):

    def test_token_without_deadline_stays_active(self):
        token = CancellationToken()

        self.assertFalse(token.cancelled)
        self.assertIsNone(token.remaining())
        self.assertIsNone(token.reason)

    def test_cancel_records_first_reason(self):
        token = CancellationToken()
        token.cancel("interrupted")
        token.cancel("something else")

        self.assertTrue(token.cancelled)
        self.assertEqual(token.reason, "interrupted")

    def test_deadline_cancels_token(self):
        token = CancellationToken(timeout=0.05)
        time.sleep(0.1)

        self.assertTrue(token.cancelled)
        self.assertEqual(token.reason, DEADLINE_EXCEEDED)
        self.assertEqual(token.remaining(), 0.0)

    def test_wait_is_bounded_by_deadline(self):
        token = CancellationToken(timeout=0.1)
        start = time.monotonic()

        self.assertTrue(token.wait(5))
        self.assertLess(time.monotonic() - start, 2)

    def test_wait_wakes_on_cancel(self):
        token = CancellationToken()
        timer = threading.Timer(0.05, token.cancel, args=("stop",))
        timer.start()
        start = time.monotonic()

        self.assertTrue(token.wait(5))
        self.assertLess(time.monotonic() - start, 2)
        timer.join()

    def test_wait_returns_false_when_interval_elapses(self):
        token = CancellationToken(timeout=5)

        self.assertFalse(token.wait(0.01))

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled("noop")

        token.cancel("interrupted")
        with self.assertRaises(OperationTimeoutError) as ctx:
            token.raise_if_cancelled("Readiness wait")
        self.assertEqual(ctx.exception.reason, "interrupted")
        self.assertIn("interrupted", str(ctx.exception))


if __name__ == '__main__':
    unittest.main()
