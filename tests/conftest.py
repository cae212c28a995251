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
import pytest

from kafka_alter_rf.cluster_info.broker import Broker
from kafka_alter_rf.cluster_info.partition import build_topic


def make_brokers(racks):
    """Brokers from a broker_id: rack mapping, None meaning no rack."""
    return [
        Broker(b_id, {'host': f'host{b_id}', 'rack': rack} if rack else {'host': f'host{b_id}'})
        for b_id, rack in racks.items()
    ]


@pytest.fixture
def two_rack_brokers():
    return make_brokers({1: 'rackA', 2: 'rackA', 3: 'rackB', 4: 'rackB'})


@pytest.fixture
def create_partitions():
    """Fixture building the partitions of a topic from an assignment."""
    def _create_partitions(topic_id, assignment):
        return build_topic(topic_id, assignment).partitions
    return _create_partitions
