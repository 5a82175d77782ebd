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

# Input / output
DEFAULT_VERSIONS_FILE = "versions.txt"
DEFAULT_OUTPUT_DIR = "output"
NODE_STATS_FILE = "node-stats.json"
NODE_INFO_FILE = "node-info.json"
JSON_INDENT = 2

# Container Constants
DEFAULT_REGISTRY = "docker.elastic.co/logstash/logstash"
DEFAULT_CONTAINER_PREFIX = "logstash"
DEFAULT_INTERNAL_PORT = 9600
DEFAULT_BIND_HOST_IP = "0.0.0.0"
DEFAULT_HOST = "localhost"

# Port allocation, end is exclusive
DEFAULT_PORT_RANGE_START = 5000
DEFAULT_PORT_RANGE_END = 6000

# API endpoints
NODE_STATS_PATH = "/_node/stats"
NODE_INFO_PATH = "/_node/"

# Timeouts
DEFAULT_LIFECYCLE_TIMEOUT = 25 * 60  # seconds
DEFAULT_TEARDOWN_TIMEOUT = 2 * 60  # seconds
DEFAULT_POLL_INTERVAL = 1.0  # seconds
DEFAULT_REQUEST_TIMEOUT = 10.0  # seconds
DEFAULT_STOP_GRACE_PERIOD = 10  # seconds

# Environment variables
ENV_PREFIX = "METRICSAMPLES_"
