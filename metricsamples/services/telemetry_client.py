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

import json
from pathlib import Path
from typing import Any, Optional, Union

import requests

from metricsamples.constants import DEFAULT_REQUEST_TIMEOUT, JSON_INDENT
from metricsamples.exceptions import TelemetryFetchError, TelemetryWriteError
from metricsamples.utils.http import create_session
from metricsamples.utils.log import get_logger


class TelemetryClient:
    """Fetches JSON documents from a node's monitoring API and persists them."""

    def __init__(
        self,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        connect_timeout: Optional[float] = None,
        pool_maxsize: int = 10,
    ):
        """Initialize the telemetry client.

        Args:
            timeout: Read timeout in seconds (default: 10).
            connect_timeout: Connection timeout in seconds (defaults to ``timeout``).
            pool_maxsize: Maximum connections per pool (default: 10).
        """
        self.timeout = timeout
        self.connect_timeout = connect_timeout or timeout
        self.logger = get_logger(f"{__name__}.TelemetryClient")
        self.session = create_session(pool_maxsize=pool_maxsize)
        self.session.headers.update({"Accept": "application/json"})

    def fetch_json(self, url: str) -> Any:
        """Fetch and decode a JSON document.

        Args:
            url: Endpoint to GET.

        Returns:
            The decoded document; never None.

        Raises:
            TelemetryFetchError: On network errors, non-2xx status, or an
                empty / undecodable body.
        """
        try:
            response = self.session.get(url, timeout=(self.connect_timeout, self.timeout))
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            # JSONDecodeError from requests is a RequestException as well
            raise TelemetryFetchError(f"Failed to fetch {url}: {e}", {"url": url}) from e
        except ValueError as e:
            raise TelemetryFetchError(f"Invalid JSON from {url}: {e}", {"url": url}) from e

        if data is None:
            raise TelemetryFetchError(f"Empty document from {url}", {"url": url})
        return data

    def ensure_directory(self, path: Union[str, Path]) -> Path:
        directory = Path(path)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise TelemetryWriteError(f"Failed to create directory {directory}: {e}", {"path": str(directory)}) from e
        return directory

    def write_json(self, document: Any, path: Union[str, Path]) -> Path:
        """Write a document as indented JSON, overwriting any existing file."""
        target = Path(path)
        try:
            payload = json.dumps(document, indent=JSON_INDENT)
            target.write_text(payload, encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise TelemetryWriteError(f"Failed to write {target}: {e}", {"path": str(target)}) from e

        self.logger.debug(f"Wrote {len(payload)} bytes to {target}")
        return target

    def close(self):
        """Close the underlying session and release connection pool resources."""
        self.session.close()
