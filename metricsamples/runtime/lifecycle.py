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
Lifecycle of one version's sandbox.

A controller pulls the image, claims a host port, creates and starts the
container, polls the monitoring API until it answers, harvests node stats and
node info to disk, and tears the container down on every exit path.
"""

import time
from typing import Optional

from metricsamples.cancellation import CancellationToken
from metricsamples.config import SamplerConfig
from metricsamples.constants import NODE_INFO_FILE, NODE_INFO_PATH, NODE_STATS_FILE, NODE_STATS_PATH
from metricsamples.exceptions import OperationTimeoutError, SamplerError, TelemetryFetchError
from metricsamples.models import LifecycleOutcome, LifecycleState, PortBinding, Stage
from metricsamples.runtime.sandbox import Sandbox
from metricsamples.services.port_allocator import PortAllocator
from metricsamples.utils.log import get_logger, with_context


class LifecycleController:
    """Drives a single version through pull, start, readiness, harvest and teardown."""

    def __init__(
            self,
            version: str,
            config: SamplerConfig,
            runtime,
            telemetry,
            allocator: PortAllocator,
            token: Optional[CancellationToken] = None,
    ):
        self._logger = get_logger(f"{__name__}.LifecycleController")
        self.version = version
        self.config = config
        self.runtime = runtime
        self.telemetry = telemetry
        self.allocator = allocator
        self.token = token or CancellationToken(config.lifecycle_timeout)
        self.outcome = LifecycleOutcome(version=version, history=[LifecycleState.PENDING])
        self._stage: Optional[Stage] = None

    def run(self) -> LifecycleOutcome:
        """Run the lifecycle to completion; errors are recorded, never raised"""
        start_time = time.time()
        self._logger.info(with_context("Starting lifecycle", {"version": self.version}))

        try:
            self._run()
        except Exception as e:
            self._fail(e)
        finally:
            self.outcome.elapsed = time.time() - start_time

        if self.outcome.succeeded:
            self._logger.info(f"Done scraping version {self.version}")
        return self.outcome

    def _run(self) -> None:
        image_name = self._pull()
        port = self._acquire_port()
        container_id = self._create(image_name, port)

        with Sandbox(
            self.runtime,
            self.version,
            container_id,
            teardown_timeout=self.config.teardown_timeout,
            on_teardown=self._on_teardown,
        ):
            try:
                self._start(container_id)
                self._wait_until_ready(port)
                self._harvest(port)
            except Exception as e:
                # record the failure before teardown runs
                self._fail(e)
                raise

    def _pull(self) -> str:
        self._enter(Stage.PULL)
        image_name = self.runtime.pull_image(self.config.image_name(self.version))
        self._transition(LifecycleState.PULLED)
        return image_name

    def _acquire_port(self) -> int:
        self._enter(Stage.ACQUIRE_PORT)
        port = self.allocator.assign_free_port()
        self.outcome.port = port
        return port

    def _create(self, image_name: str, port: int) -> str:
        self._enter(Stage.CREATE)
        binding = PortBinding(internal_port=self.config.internal_port, host_port=port)
        container_id = self.runtime.create_instance(image_name, binding, self.config.container_name(self.version))
        self.outcome.container_id = container_id
        self._transition(LifecycleState.CREATED)
        return container_id

    def _start(self, container_id: str) -> None:
        self._enter(Stage.START)
        self.runtime.start_instance(container_id)
        self._transition(LifecycleState.STARTED)

    def _wait_until_ready(self, port: int) -> None:
        """Poll the stats endpoint until it returns a non-empty document.

        Fetch errors only mean "not ready yet"; the loop ends on success or
        when the token is cancelled, checked before every attempt.
        """
        self._enter(Stage.READINESS)
        url = self._url(port, NODE_STATS_PATH)
        self._logger.info(f"Waiting for {url} to become ready")

        attempts = 0
        while True:
            self.token.raise_if_cancelled(f"Readiness wait for version {self.version}")
            attempts += 1
            try:
                document = self.telemetry.fetch_json(url)
            except TelemetryFetchError as e:
                self._logger.debug(with_context("Not ready yet", {"version": self.version, "attempt": attempts, "error": e}))
                document = None

            if document:
                self._logger.info(with_context("Sandbox ready", {"version": self.version, "attempts": attempts}))
                self._transition(LifecycleState.READY)
                return

            self.token.wait(self.config.poll_interval)

    def _harvest(self, port: int) -> None:
        self._enter(Stage.HARVEST)
        node_stats_url = self._url(port, NODE_STATS_PATH)
        node_info_url = self._url(port, NODE_INFO_PATH)

        self._logger.info(f"Getting node stats from {node_stats_url}")
        node_stats = self.telemetry.fetch_json(node_stats_url)

        self._logger.info(f"Getting node info from {node_info_url}")
        node_info = self.telemetry.fetch_json(node_info_url)

        output_dir = self.config.output_path / self.version
        self._logger.info(f"Ensuring output directory {output_dir} exists")
        self.telemetry.ensure_directory(output_dir)

        for document, filename in ((node_stats, NODE_STATS_FILE), (node_info, NODE_INFO_FILE)):
            target = output_dir / filename
            self._logger.info(f"Writing {filename} to {target}")
            self.outcome.files.append(self.telemetry.write_json(document, target))

        self._transition(LifecycleState.HARVESTED)

    def _url(self, port: int, path: str) -> str:
        return f"http://{self.config.host}:{port}{path}"

    def _enter(self, stage: Stage) -> None:
        self._stage = stage
        self.token.raise_if_cancelled(f"Stage {stage.value} for version {self.version}")

    def _transition(self, state: LifecycleState) -> None:
        self.outcome.history.append(state)
        if state != LifecycleState.TORN_DOWN:
            self.outcome.state = state

    def _on_teardown(self, succeeded: bool) -> None:
        self.outcome.teardown_attempted = True
        self.outcome.teardown_succeeded = succeeded
        self._transition(LifecycleState.TORN_DOWN)

    def _fail(self, error: Exception) -> None:
        if self.outcome.state == LifecycleState.FAILED:
            return

        self.outcome.failed_stage = self._stage
        self.outcome.error = str(error)
        self._transition(LifecycleState.FAILED)

        context = {
            "version": self.version,
            "stage": self._stage.value if self._stage else None,
            "error": error,
        }
        if isinstance(error, OperationTimeoutError):
            context["reason"] = error.reason
            self._logger.error(with_context("Lifecycle cancelled", context))
        elif isinstance(error, SamplerError):
            self._logger.error(with_context("Lifecycle failed", context))
        else:
            self._logger.exception(with_context("Unexpected lifecycle error", context))
