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
Orchestration harness.

One lifecycle thread is launched per version. Every lifecycle has its own
deadline, failures stay with their version, and ``run`` returns only after
every lifecycle has finished, teardown included.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence

from metricsamples.cancellation import CancellationToken
from metricsamples.config import SamplerConfig
from metricsamples.models import HarnessReport, LifecycleOutcome, LifecycleState
from metricsamples.runtime.lifecycle import LifecycleController
from metricsamples.services.port_allocator import PortAllocator
from metricsamples.utils.log import get_logger, with_context

logger = get_logger(__name__)


class OrchestrationHarness:
    """Runs one lifecycle per version concurrently and waits for all of them."""

    def __init__(
        self,
        config: SamplerConfig,
        runtime,
        telemetry,
        allocator: Optional[PortAllocator] = None,
        controller_factory: Callable[..., LifecycleController] = LifecycleController,
    ) -> None:
        self.config = config
        self.runtime = runtime
        self.telemetry = telemetry
        self.allocator = allocator
        self.controller_factory = controller_factory
        self._tokens: List[CancellationToken] = []
        self._lock = threading.Lock()

    def cancel(self, reason: str = "cancelled by operator") -> None:
        """Cancel every lifecycle started by the current run."""
        with self._lock:
            tokens = list(self._tokens)
        for token in tokens:
            token.cancel(reason)

    def run(self, versions: Sequence[str]) -> HarnessReport:
        """
        Sample every version and block until all lifecycles are terminal.

        Args:
            versions: Versions in the order they should be reported

        Returns:
            HarnessReport with one outcome per version, in input order

        Raises:
            KeyboardInterrupt: Re-raised after all lifecycles were cancelled
                and torn down
        """
        if not versions:
            logger.warning("No versions to sample")
            return HarnessReport()

        # ports are scoped to a single orchestration run
        allocator = self.allocator or PortAllocator(self.config.port_range_start, self.config.port_range_end)
        if len(versions) > allocator.capacity:
            logger.warning(
                f"{len(versions)} versions requested but only {allocator.capacity} ports are available; "
                f"the remaining lifecycles will fail"
            )

        controllers = []
        with self._lock:
            self._tokens = []
            for version in versions:
                token = CancellationToken(self.config.lifecycle_timeout)
                self._tokens.append(token)
                controllers.append(self.controller_factory(
                    version,
                    self.config,
                    self.runtime,
                    self.telemetry,
                    allocator,
                    token=token,
                ))

        logger.info(f"Sampling {len(versions)} versions: {', '.join(versions)}")

        with ThreadPoolExecutor(max_workers=len(controllers), thread_name_prefix="lifecycle") as executor:
            futures = [executor.submit(controller.run) for controller in controllers]
            try:
                wait(futures)
            except KeyboardInterrupt:
                logger.warning("Interrupted, cancelling all lifecycles and waiting for teardown")
                self.cancel("interrupted")
                wait(futures)
                raise

        report = HarnessReport(outcomes=[
            self._collect(version, future) for version, future in zip(versions, futures)
        ])

        for outcome in report.outcomes:
            self._log_outcome(outcome)
        logger.info(f"Done: {len(report.succeeded)} succeeded, {len(report.failed)} failed")

        return report

    def _collect(self, version: str, future: Future) -> LifecycleOutcome:
        error = future.exception()
        if error is None:
            return future.result()

        # run() records its own errors, so this only sees crashes outside it
        logger.error(with_context("Lifecycle crashed", {"version": version, "error": error}))
        return LifecycleOutcome(
            version=version,
            state=LifecycleState.FAILED,
            error=str(error),
            history=[LifecycleState.PENDING, LifecycleState.FAILED],
        )

    def _log_outcome(self, outcome: LifecycleOutcome) -> None:
        context = {
            "version": outcome.version,
            "state": outcome.state.value,
            "elapsed": f"{outcome.elapsed:.1f}s",
        }
        if outcome.succeeded:
            logger.info(with_context("Version sampled", context))
            return

        # the lifecycle already logged the error itself
        context["stage"] = outcome.failed_stage.value if outcome.failed_stage else None
        logger.info(with_context(f"Version failed: {outcome.error}", context))
