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

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextlib import AbstractContextManager
from typing import Callable, Optional

from metricsamples.cancellation import DEADLINE_EXCEEDED, CancellationToken
from metricsamples.constants import DEFAULT_STOP_GRACE_PERIOD, DEFAULT_TEARDOWN_TIMEOUT
from metricsamples.exceptions import OperationTimeoutError
from metricsamples.services.docker_service import remediation_command
from metricsamples.utils.log import get_logger, with_context


class Sandbox(AbstractContextManager):
    """Owns one created container and tears it down when the block exits"""

    def __init__(
            self,
            runtime,
            version: str,
            container_id: str,
            teardown_timeout: float = DEFAULT_TEARDOWN_TIMEOUT,
            stop_grace_period: int = DEFAULT_STOP_GRACE_PERIOD,
            on_teardown: Optional[Callable[[bool], None]] = None,
    ):
        self._logger = get_logger(f"{__name__}.Sandbox")
        self.runtime = runtime
        self.version = version
        self.id = container_id
        self.teardown_timeout = teardown_timeout
        self.stop_grace_period = stop_grace_period
        self._on_teardown = on_teardown
        self._result: Optional[bool] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Always tear down; never suppress the primary exception"""
        self.teardown()
        return False

    def teardown(self) -> bool:
        """
        Stop then remove the container, at most once

        Both calls share one teardown deadline. A runtime call still in
        flight when it passes is abandoned and counted as a failure; the call
        itself is left to finish on its worker thread. Failures are logged
        with a manual remediation command and reported through the return
        value only.

        Returns:
            True if both stop and remove succeeded. Later calls return the
            result of the first one.
        """
        if self._result is not None:
            return self._result

        # teardown gets its own deadline, independent of the lifecycle's
        token = CancellationToken(self.teardown_timeout)
        context = {"version": self.version, "container_id": self.id}
        self._logger.info(with_context(f"Removing container {self.id}", context))

        succeeded = True
        try:
            grace = max(1, min(self.stop_grace_period, int(token.remaining())))
            self._call_within(token, "stop", self.runtime.stop_instance, self.id, timeout=grace)
        except Exception as e:
            succeeded = False
            self._report_failure("stop", e, context)

        if token.cancelled:
            succeeded = False
            self._report_failure("remove", f"teardown {token.reason}", context)
        else:
            try:
                self._call_within(token, "remove", self.runtime.remove_instance, self.id)
            except Exception as e:
                succeeded = False
                self._report_failure("remove", e, context)

        self._result = succeeded
        if self._on_teardown is not None:
            self._on_teardown(succeeded)
        return succeeded

    def _call_within(self, token: CancellationToken, operation: str, fn, *args, **kwargs):
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"teardown-{operation}")
        try:
            return executor.submit(fn, *args, **kwargs).result(timeout=token.remaining())
        except FutureTimeoutError:
            token.cancel(DEADLINE_EXCEEDED)
            raise OperationTimeoutError(
                f"Container {operation} did not finish before the teardown deadline",
                reason=token.reason,
                context={"timeout": self.teardown_timeout},
            )
        finally:
            executor.shutdown(wait=False)

    def _report_failure(self, operation: str, error, context: dict) -> None:
        self._logger.error(with_context(f"Error during container {operation}: {error}", context))
        self._logger.error(f"To remove container manually, run: {remediation_command(self.id)}")
