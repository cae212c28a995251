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
from kafka_alter_rf.util.error import ConfigurationError
from kafka_alter_rf.util.error import KafkaToolError


class InvalidReplicationFactorError(ConfigurationError):
    """Raised when the requested replication factor is not positive or
    exceeds the number of distinct brokers of the cluster.
    """
    pass


class TopologyMismatchError(KafkaToolError):
    """Raised when the partitions of a topic are inconsistent with the
    broker set they are supposed to live on.
    """
    pass
