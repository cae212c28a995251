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
from collections import OrderedDict

from kafka_alter_rf.cluster_info.broker import Broker
from kafka_alter_rf.cluster_info.broker import build_brokers
from kafka_alter_rf.cluster_info.broker import NO_RACK


class TestBroker:

    def test_rack_from_metadata(self):
        broker = Broker(1, {'host': 'host1', 'rack': 'use1-az1'})
        assert broker.id == 1
        assert broker.rack == 'use1-az1'

    def test_missing_rack(self):
        assert Broker(1, {'host': 'host1'}).rack == NO_RACK
        assert Broker(1, {'host': 'host1', 'rack': None}).rack == NO_RACK

    def test_no_metadata(self):
        broker = Broker(2)
        assert broker.rack == NO_RACK

    def test_equality_by_id(self):
        assert Broker(1, {'rack': 'a'}) == Broker(1, {'rack': 'b'})
        assert Broker(1) != Broker(2)
        assert len({Broker(1), Broker(1), Broker(2)}) == 2


def test_build_brokers_keeps_order():
    brokers = build_brokers(OrderedDict([
        (3, {'rack': 'a'}),
        (1, None),
        (2, {'rack': 'b'}),
    ]))

    assert [broker.id for broker in brokers] == [3, 1, 2]
    assert [broker.rack for broker in brokers] == ['a', NO_RACK, 'b']
