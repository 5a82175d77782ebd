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
Configuration module for the metric sampler.

Values come from the defaults in ``constants``, then environment variables
(optionally loaded from a ``.env`` file), then explicit overrides.
"""
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

import metricsamples.constants as constants
from metricsamples.exceptions import ConfigurationError


class SamplerConfig(BaseModel):
    """Pydantic model for orchestration settings."""

    versions_file: str = Field(constants.DEFAULT_VERSIONS_FILE, description="File listing one version per line")
    output_dir: str = Field(constants.DEFAULT_OUTPUT_DIR, description="Root directory for harvested telemetry")
    registry: str = Field(constants.DEFAULT_REGISTRY, description="Image repository combined with each version")
    container_prefix: str = Field(constants.DEFAULT_CONTAINER_PREFIX, description="Container name prefix")
    internal_port: int = Field(constants.DEFAULT_INTERNAL_PORT, description="API port inside the container")
    host: str = Field(constants.DEFAULT_HOST, description="Host used to reach published ports")
    port_range_start: int = Field(constants.DEFAULT_PORT_RANGE_START, description="First host port (inclusive)")
    port_range_end: int = Field(constants.DEFAULT_PORT_RANGE_END, description="Last host port (exclusive)")
    lifecycle_timeout: float = Field(constants.DEFAULT_LIFECYCLE_TIMEOUT, description="Per-version deadline in seconds")
    teardown_timeout: float = Field(constants.DEFAULT_TEARDOWN_TIMEOUT, description="Teardown deadline in seconds")
    poll_interval: float = Field(constants.DEFAULT_POLL_INTERVAL, description="Seconds between readiness probes")
    request_timeout: float = Field(constants.DEFAULT_REQUEST_TIMEOUT, description="HTTP request timeout in seconds")

    @field_validator('internal_port', 'port_range_start', 'port_range_end')
    @classmethod
    def validate_port(cls, v):
        if not (1 <= v <= 65535):
            raise ValueError(f"Port {v} is not in the valid range (1-65535)")
        return v

    @field_validator('lifecycle_timeout', 'teardown_timeout', 'poll_interval', 'request_timeout')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError(f"Timeout values must be positive, got {v}")
        return v

    @model_validator(mode='after')
    def validate_ranges(self):
        if self.port_range_start >= self.port_range_end:
            raise ValueError(
                f"Port range start ({self.port_range_start}) must be below end ({self.port_range_end})"
            )
        if self.teardown_timeout >= self.lifecycle_timeout:
            raise ValueError("Teardown timeout must be shorter than the lifecycle timeout")
        return self

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir)

    def image_name(self, version: str) -> str:
        return f"{self.registry}:{version}"

    def container_name(self, version: str) -> str:
        return f"{self.container_prefix}-{version}"

    @classmethod
    def from_env(cls, overrides: Optional[Dict[str, Any]] = None, dotenv_path: Optional[str] = None) -> "SamplerConfig":
        """
        Build configuration from environment variables and explicit overrides

        Args:
            overrides: Values that take precedence over the environment; None values are ignored
            dotenv_path: Optional .env file to load (defaults to searching from the cwd)

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If any value is invalid
        """
        load_dotenv(dotenv_path)

        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            env_value = os.getenv(f"{constants.ENV_PREFIX}{name.upper()}")
            if env_value is not None and env_value != "":
                values[name] = env_value

        values.update({k: v for k, v in (overrides or {}).items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def parse_versions(text: str) -> List[str]:
    """Split file content into versions, trimming whitespace and skipping blank lines"""
    return [line.strip() for line in text.splitlines() if line.strip()]


def get_versions(versions_file: str = constants.DEFAULT_VERSIONS_FILE) -> List[str]:
    """
    Read the ordered list of versions to sample

    Args:
        versions_file: Path to a file with one version per line

    Returns:
        Versions in file order, duplicates preserved

    Raises:
        ConfigurationError: If the file cannot be read
    """
    try:
        with open(versions_file, 'r', encoding='utf-8') as f:
            return parse_versions(f.read())
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read versions file {versions_file}: {e}",
            {"versions_file": versions_file}
        ) from e
