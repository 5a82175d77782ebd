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
Exceptions raised while sampling metrics from versioned sandboxes
"""
from typing import Any, Dict, Optional


class SamplerError(Exception):
    """Base exception class for all sampler errors"""
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.code = getattr(self, 'code', 500)

class ConfigurationError(SamplerError):
    """Invalid configuration or unreadable versions file"""
    code = 400

class RuntimeUnavailableError(SamplerError):
    """Container runtime cannot be reached"""
    code = 503

class NoFreePortError(SamplerError):
    """Every port in the allocator range is already in use"""
    code = 507

class ProviderError(SamplerError):
    """Container runtime returned an error"""
    code = 502

class OperationTimeoutError(SamplerError):
    """Lifecycle deadline elapsed or the run was cancelled"""
    code = 504

    def __init__(self, message: str, reason: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context)
        self.reason = reason

class HarvestError(SamplerError):
    """Telemetry could not be fetched or persisted"""

class TelemetryFetchError(HarvestError):
    """Endpoint unreachable or body was empty / not JSON"""
    code = 502

class TelemetryWriteError(HarvestError):
    """Telemetry document could not be written to disk"""
