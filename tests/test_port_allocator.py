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
import unittest

from metricsamples.exceptions import ConfigurationError, NoFreePortError
from metricsamples.services.port_allocator import PortAllocator


class TestPortAllocator(unittest.TestCase):

    def test_assigns_lowest_free_port_first(self):
        allocator = PortAllocator(5000, 5010)

        self.assertEqual(allocator.assign_free_port(), 5000)
        self.assertEqual(allocator.assign_free_port(), 5001)
        self.assertEqual(allocator.in_use, frozenset({5000, 5001}))

    def test_exhaustion_raises_no_free_port(self):
        allocator = PortAllocator(5000, 5003)
        ports = [allocator.assign_free_port() for _ in range(allocator.capacity)]

        self.assertEqual(ports, [5000, 5001, 5002])
        with self.assertRaises(NoFreePortError):
            allocator.assign_free_port()

    def test_ports_are_never_reassigned(self):
        allocator = PortAllocator(5000, 5002)
        first = allocator.assign_free_port()
        second = allocator.assign_free_port()

        self.assertNotEqual(first, second)
        with self.assertRaises(NoFreePortError):
            allocator.assign_free_port()

    def test_concurrent_assignments_are_distinct(self):
        allocator = PortAllocator(5000, 5064)
        barrier = threading.Barrier(allocator.capacity)
        results = []
        results_lock = threading.Lock()

        def worker():
            barrier.wait()
            port = allocator.assign_free_port()
            with results_lock:
                results.append(port)

        threads = [threading.Thread(target=worker) for _ in range(allocator.capacity)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(len(results), allocator.capacity)
        self.assertEqual(len(set(results)), allocator.capacity)
        with self.assertRaises(NoFreePortError):
            allocator.assign_free_port()

    def test_in_use_is_a_snapshot(self):
        allocator = PortAllocator(5000, 5010)
        snapshot = allocator.in_use
        allocator.assign_free_port()

        self.assertEqual(snapshot, frozenset())

    def test_invalid_range_rejected(self):
        for start, end in ((5000, 5000), (6000, 5000), (0, 10), (65000, 70000)):
            with self.assertRaises(ConfigurationError):
                PortAllocator(start, end)


if __name__ == '__main__':
    unittest.main()
