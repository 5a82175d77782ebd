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

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import metricsamples.constants as constants
from metricsamples.config import SamplerConfig, get_versions, parse_versions
from metricsamples.exceptions import ConfigurationError


@patch('metricsamples.config.load_dotenv')
class TestSamplerConfig(unittest.TestCase):

    def test_defaults(self, _mock_dotenv):
        with patch.dict(os.environ, {}, clear=False):
            for name in SamplerConfig.model_fields:
                os.environ.pop(f"{constants.ENV_PREFIX}{name.upper()}", None)
            config = SamplerConfig.from_env()

        self.assertEqual(config.versions_file, "versions.txt")
        self.assertEqual(config.output_dir, "output")
        self.assertEqual(config.port_range_start, 5000)
        self.assertEqual(config.port_range_end, 6000)
        self.assertEqual(config.lifecycle_timeout, 25 * 60)
        self.assertEqual(config.teardown_timeout, 2 * 60)
        self.assertEqual(config.poll_interval, 1.0)
        self.assertEqual(config.internal_port, 9600)

    def test_environment_overrides_defaults(self, _mock_dotenv):
        env = {
            "METRICSAMPLES_OUTPUT_DIR": "/tmp/samples",
            "METRICSAMPLES_PORT_RANGE_START": "7000",
            "METRICSAMPLES_PORT_RANGE_END": "7010",
            "METRICSAMPLES_POLL_INTERVAL": "0.5",
        }
        with patch.dict(os.environ, env):
            config = SamplerConfig.from_env()

        self.assertEqual(config.output_dir, "/tmp/samples")
        self.assertEqual(config.port_range_start, 7000)
        self.assertEqual(config.port_range_end, 7010)
        self.assertEqual(config.poll_interval, 0.5)

    def test_explicit_overrides_beat_environment(self, _mock_dotenv):
        with patch.dict(os.environ, {"METRICSAMPLES_REGISTRY": "from-env"}):
            config = SamplerConfig.from_env({"registry": "from-cli", "output_dir": None})

        self.assertEqual(config.registry, "from-cli")
        self.assertEqual(config.output_dir, constants.DEFAULT_OUTPUT_DIR)

    def test_invalid_port_range_rejected(self, _mock_dotenv):
        with self.assertRaises(ConfigurationError):
            SamplerConfig.from_env({"port_range_start": 6000, "port_range_end": 5000})
        with self.assertRaises(ConfigurationError):
            SamplerConfig.from_env({"port_range_end": 70000})

    def test_teardown_must_be_shorter_than_lifecycle(self, _mock_dotenv):
        with self.assertRaises(ConfigurationError):
            SamplerConfig.from_env({"lifecycle_timeout": 60, "teardown_timeout": 60})

    def test_non_positive_timeouts_rejected(self, _mock_dotenv):
        with self.assertRaises(ConfigurationError):
            SamplerConfig.from_env({"poll_interval": 0})

    def test_names_derived_from_version(self, _mock_dotenv):
        config = SamplerConfig()

        self.assertEqual(config.image_name("8.9.0"), "docker.elastic.co/logstash/logstash:8.9.0")
        self.assertEqual(config.container_name("8.9.0"), "logstash-8.9.0")
        self.assertEqual(config.output_path, Path("output"))


class TestVersions(unittest.TestCase):

    def test_parse_versions_trims_and_skips_blank_lines(self):
        text = "\n 8.9.0 \n8.8.2\n\n8.9.0\r\n"

        self.assertEqual(parse_versions(text), ["8.9.0", "8.8.2", "8.9.0"])

    def test_get_versions_reads_file_in_order(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "versions.txt"
            path.write_text("7.17.13\n8.9.0\n", encoding="utf-8")

            self.assertEqual(get_versions(str(path)), ["7.17.13", "8.9.0"])

    def test_get_versions_missing_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigurationError):
                get_versions(os.path.join(tmp, "missing.txt"))


if __name__ == '__main__':
    unittest.main()
