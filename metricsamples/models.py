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
This module defines the data models shared by the lifecycle and the harness.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from metricsamples.constants import DEFAULT_BIND_HOST_IP


class LifecycleState(Enum):
    """States of one version's sandbox lifecycle"""
    PENDING = "Pending"
    PULLED = "Pulled"
    CREATED = "Created"
    STARTED = "Started"
    READY = "Ready"
    HARVESTED = "Harvested"
    TORN_DOWN = "TornDown"
    FAILED = "Failed"


class Stage(Enum):
    PULL = "pull"
    ACQUIRE_PORT = "acquire-port"
    CREATE = "create"
    START = "start"
    READINESS = "readiness"
    HARVEST = "harvest"


@dataclass
class PortBinding:
    internal_port: int
    host_port: int
    host_ip: str = DEFAULT_BIND_HOST_IP

    def to_docker(self) -> dict:
        """Port mapping in the shape the Docker SDK expects"""
        return {f"{self.internal_port}/tcp": (self.host_ip, self.host_port)}


@dataclass
class LifecycleOutcome:
    version: str
    state: LifecycleState = LifecycleState.PENDING
    failed_stage: Optional[Stage] = None
    error: Optional[str] = None
    port: Optional[int] = None
    container_id: Optional[str] = None
    files: List[Path] = field(default_factory=list)
    teardown_attempted: bool = False
    teardown_succeeded: Optional[bool] = None
    elapsed: float = 0.0
    history: List[LifecycleState] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == LifecycleState.HARVESTED


@dataclass
class HarnessReport:
    outcomes: List[LifecycleOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[LifecycleOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[LifecycleOutcome]:
        return [o for o in self.outcomes if not o.succeeded]
