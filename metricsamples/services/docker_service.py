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
Docker service for running versioned sandbox containers.

This service pulls images and creates, starts, stops and removes containers
using the Docker SDK. Every SDK failure is reported as a ProviderError so the
lifecycle can tell runtime errors apart from its own.
"""

import time
from typing import Optional

import docker
from docker.errors import APIError, DockerException, NotFound

from metricsamples.constants import DEFAULT_STOP_GRACE_PERIOD
from metricsamples.exceptions import ProviderError, RuntimeUnavailableError
from metricsamples.models import PortBinding
from metricsamples.utils.log import get_logger

logger = get_logger(__name__)


def remediation_command(container_id: str) -> str:
    """Command an operator can run to remove a container left behind"""
    return f"docker rm -f {container_id}"


class DockerService:
    """Service for container operations using Docker SDK."""

    def __init__(self, verbose: bool = False, client: Optional[docker.DockerClient] = None) -> None:
        self.verbose = verbose

        if client is not None:
            self.client = client
            return

        try:
            self.client = docker.from_env()
            # Test connection
            self.client.ping()
            if self.verbose:
                logger.info("Successfully connected to Docker daemon")
        except DockerException as e:
            logger.error(f"Failed to connect to Docker: {e}")
            raise RuntimeUnavailableError(f"Docker is not available or not running: {e}") from e

    def pull_image(self, image_name: str) -> str:
        """
        Pull an image, blocking until the download completes.

        Args:
            image_name: Full image reference, ``repository:tag``

        Returns:
            The image reference that was pulled

        Raises:
            ProviderError: If the registry or daemon rejects the pull
        """
        logger.info(f"Pulling image {image_name}")
        start_time = time.time()

        try:
            self.client.images.pull(image_name)
        except APIError as e:
            raise ProviderError(f"Docker API error during pull: {e}", {"image": image_name}) from e
        except DockerException as e:
            raise ProviderError(f"Docker pull error: {str(e)}", {"image": image_name}) from e

        if self.verbose:
            logger.info(f"Pulled {image_name} in {time.time() - start_time:.1f}s")

        return image_name

    def create_instance(self, image_name: str, port_binding: PortBinding, name: str) -> str:
        """
        Create (but do not start) a container publishing one port.

        Args:
            image_name: Image to run
            port_binding: Internal port and the host port it is published on
            name: Container name

        Returns:
            The container id

        Raises:
            ProviderError: If the container cannot be created
        """
        logger.info(f"Creating container {name} on port {port_binding.host_port}")

        try:
            container = self.client.containers.create(
                image_name,
                name=name,
                ports=port_binding.to_docker(),
                detach=True,
            )
        except APIError as e:
            raise ProviderError(
                f"Docker API error during create: {e}",
                {"container": name, "remediation": remediation_command(name)}
            ) from e
        except DockerException as e:
            raise ProviderError(f"Docker create error: {str(e)}", {"container": name}) from e

        if self.verbose:
            logger.debug(f"Created container {name} with id {container.id}")

        return container.id

    def start_instance(self, container_id: str) -> None:
        try:
            self.client.containers.get(container_id).start()
        except DockerException as e:
            raise ProviderError(f"Docker start error: {str(e)}", {"container_id": container_id}) from e

    def stop_instance(self, container_id: str, timeout: int = DEFAULT_STOP_GRACE_PERIOD) -> None:
        """Stop a container, killing it after ``timeout`` seconds."""
        try:
            self.client.containers.get(container_id).stop(timeout=timeout)
        except DockerException as e:
            raise ProviderError(f"Docker stop error: {str(e)}", {"container_id": container_id}) from e

    def remove_instance(self, container_id: str) -> bool:
        """
        Remove a stopped container.

        Returns:
            True if removed, False if it was already gone

        Raises:
            ProviderError: If the daemon refuses to remove it
        """
        try:
            self.client.containers.get(container_id).remove()
        except NotFound:
            # Not found is acceptable for deletion
            logger.warning(f"Container {container_id} already removed")
            return False
        except DockerException as e:
            raise ProviderError(f"Docker remove error: {str(e)}", {"container_id": container_id}) from e

        if self.verbose:
            logger.info(f"Successfully removed container: {container_id}")

        return True
