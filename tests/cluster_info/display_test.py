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
import logging

from kafka_alter_rf.cluster_info.display import count_racks
from kafka_alter_rf.cluster_info.display import display_assignment_changes
from kafka_alter_rf.cluster_info.display import display_rack_groups
from kafka_alter_rf.cluster_info.display import display_table
from kafka_alter_rf.cluster_info.rack import group_by_rack
from tests.conftest import make_brokers


def test_display_table(capsys):
    display_table(['a', 'long header'], [[1, 'x'], ['wide cell', 2]])

    assert capsys.readouterr().out.splitlines() == [
        'a         | long header',
        '----------+------------',
        '1         | x',
        'wide cell | 2',
    ]


def test_display_table_no_rows(capsys):
    display_table(['Rack', 'Brokers'], [])

    assert capsys.readouterr().out.splitlines() == [
        'Rack | Brokers',
        '-----+--------',
    ]


def test_count_racks(two_rack_brokers):
    brokers = {broker.id: broker for broker in two_rack_brokers}

    assert count_racks([1, 2], brokers) == 1
    assert count_racks([1, 3], brokers) == 2
    assert count_racks([1, 7, 8], brokers) == 3
    assert count_racks([], brokers) == 0


def test_display_rack_groups(capsys):
    brokers = make_brokers({1: 'a', 2: None, 3: 'a'})

    display_rack_groups(group_by_rack(brokers), [1, 2, 3])

    out = capsys.readouterr().out
    assert 'a         | 1, 3' in out
    assert '<no rack> | 2' in out
    assert 'Rack alternating broker ordering: [1, 2, 3]' in out


def test_display_assignment_changes(capsys, caplog, two_rack_brokers):
    brokers = {broker.id: broker for broker in two_rack_brokers}
    current = {('T0', 0): [1, 2], ('T0', 1): [3, 2]}
    proposed = {('T0', 0): [1, 3], ('T0', 1): [3, 2]}

    with caplog.at_level(logging.INFO):
        display_assignment_changes(current, proposed, brokers)

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].split(' | ') == [
        'Partition', 'Current replicas', 'Racks', 'Proposed replicas', 'Racks',
    ]
    assert [cell.strip() for cell in lines[2].split(' | ')] == ['T0:0', '[1, 2]', '1', '[1, 3]', '2']
    assert [cell.strip() for cell in lines[3].split(' | ')] == ['T0:1', '[3, 2]', '2', '[3, 2]', '2']
    assert '1 of 2 partition(s) change replicas.' in caplog.text
