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
from typing import FrozenSet, Set

from metricsamples.constants import DEFAULT_PORT_RANGE_END, DEFAULT_PORT_RANGE_START
from metricsamples.exceptions import ConfigurationError, NoFreePortError


class PortAllocator:
    """Hands out host ports from ``[start, end)``; ports are never released."""

    def __init__(self, start: int = DEFAULT_PORT_RANGE_START, end: int = DEFAULT_PORT_RANGE_END):
        if not (1 <= start < end <= 65536):
            raise ConfigurationError(
                f"Invalid port range {start}-{end}",
                {"start": start, "end": end}
            )
        self.start = start
        self.end = end
        self._in_use: Set[int] = set()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self.end - self.start

    @property
    def in_use(self) -> FrozenSet[int]:
        with self._lock:
            return frozenset(self._in_use)

    def assign_free_port(self) -> int:
        # scan and record must stay in one critical section
        with self._lock:
            for port in range(self.start, self.end):
                if port not in self._in_use:
                    self._in_use.add(port)
                    return port

        raise NoFreePortError(
            f"No free port found in range {self.start}-{self.end}",
            {"start": self.start, "end": self.end}
        )
