# Copyright 2016 Yelp Inc.
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


class KafkaToolError(Exception):
    """Base class for kafka tool exceptions."""
    pass


class ConfigurationError(KafkaToolError):
    """Error in configuration. For example: missing configuration file,
    misformatted configuration or a request the cluster cannot satisfy."""
    pass


class MissingConfigurationError(ConfigurationError):
    """Missing configuration file."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Invalid configuration file."""
    pass


class UnknownTopic(KafkaToolError):
    """Topic does not exist in kafka."""
    pass
