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
Services module for the metric sampler.

This module provides the interfaces to external systems: the container
runtime, the node monitoring API and the local filesystem, plus the port
allocator shared by concurrent lifecycles.
"""

from .docker_service import DockerService
from .port_allocator import PortAllocator
from .telemetry_client import TelemetryClient

__all__ = ["DockerService", "PortAllocator", "TelemetryClient"]
