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

import unittest
from unittest.mock import Mock, patch

from docker.errors import APIError, DockerException, NotFound

from metricsamples.exceptions import ProviderError, RuntimeUnavailableError
from metricsamples.models import PortBinding
from metricsamples.services.docker_service import DockerService, remediation_command


class TestDockerServiceInit(unittest.TestCase):

    @patch('metricsamples.services.docker_service.docker.from_env')
    def test_connects_from_environment(self, mock_from_env):
        client = Mock()
        mock_from_env.return_value = client

        service = DockerService()

        self.assertIs(service.client, client)
        client.ping.assert_called_once_with()

    @patch('metricsamples.services.docker_service.docker.from_env')
    def test_unreachable_daemon_is_fatal(self, mock_from_env):
        mock_from_env.side_effect = DockerException("socket not found")

        with self.assertRaises(RuntimeUnavailableError):
            DockerService()

    def test_injected_client_skips_connection_check(self):
        client = Mock()

        service = DockerService(client=client)

        self.assertIs(service.client, client)
        client.ping.assert_not_called()


class TestDockerServiceOperations(unittest.TestCase):

    def setUp(self):
        self.client = Mock()
        self.container = Mock()
        self.container.id = "abc123"
        self.client.containers.create.return_value = self.container
        self.client.containers.get.return_value = self.container
        self.service = DockerService(client=self.client)

    def test_pull_image(self):
        image = self.service.pull_image("docker.elastic.co/logstash/logstash:8.9.0")

        self.assertEqual(image, "docker.elastic.co/logstash/logstash:8.9.0")
        self.client.images.pull.assert_called_once_with("docker.elastic.co/logstash/logstash:8.9.0")

    def test_pull_failure_raises_provider_error(self):
        self.client.images.pull.side_effect = APIError("manifest unknown")

        with self.assertRaises(ProviderError):
            self.service.pull_image("logstash:0.0.0")

    def test_create_instance_binds_port_on_all_interfaces(self):
        binding = PortBinding(internal_port=9600, host_port=5003)

        container_id = self.service.create_instance("logstash:8.9.0", binding, "logstash-8.9.0")

        self.assertEqual(container_id, "abc123")
        self.client.containers.create.assert_called_once_with(
            "logstash:8.9.0",
            name="logstash-8.9.0",
            ports={"9600/tcp": ("0.0.0.0", 5003)},
            detach=True,
        )

    def test_create_conflict_raises_provider_error(self):
        self.client.containers.create.side_effect = APIError("Conflict. The container name is already in use")

        with self.assertRaises(ProviderError) as ctx:
            self.service.create_instance("logstash:8.9.0", PortBinding(9600, 5000), "logstash-8.9.0")
        self.assertEqual(ctx.exception.context["remediation"], "docker rm -f logstash-8.9.0")

    def test_start_stop_remove(self):
        self.service.start_instance("abc123")
        self.service.stop_instance("abc123", timeout=3)
        removed = self.service.remove_instance("abc123")

        self.assertTrue(removed)
        self.container.start.assert_called_once_with()
        self.container.stop.assert_called_once_with(timeout=3)
        self.container.remove.assert_called_once_with()

    def test_start_failure_raises_provider_error(self):
        self.container.start.side_effect = APIError("port is already allocated")

        with self.assertRaises(ProviderError):
            self.service.start_instance("abc123")

    def test_stop_failure_raises_provider_error(self):
        self.container.stop.side_effect = DockerException("timeout")

        with self.assertRaises(ProviderError):
            self.service.stop_instance("abc123")

    def test_remove_missing_container_is_not_an_error(self):
        self.client.containers.get.side_effect = NotFound("No such container")

        self.assertFalse(self.service.remove_instance("abc123"))

    def test_remove_failure_raises_provider_error(self):
        self.container.remove.side_effect = APIError("container is running")

        with self.assertRaises(ProviderError):
            self.service.remove_instance("abc123")

    def test_remediation_command(self):
        self.assertEqual(remediation_command("abc123"), "docker rm -f abc123")


if __name__ == '__main__':
    unittest.main()
