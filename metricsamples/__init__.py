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
Logstash metric samples - run each declared Logstash version in a throwaway
container and collect its node stats and node info.
"""

__version__ = "0.1.0"

from .config import SamplerConfig, get_versions
from .models import HarnessReport, LifecycleOutcome, LifecycleState
from .runtime.harness import OrchestrationHarness
from .runtime.lifecycle import LifecycleController
from .services.port_allocator import PortAllocator

__all__ = [
    "SamplerConfig",
    "get_versions",
    "HarnessReport",
    "LifecycleOutcome",
    "LifecycleState",
    "OrchestrationHarness",
    "LifecycleController",
    "PortAllocator",
]
