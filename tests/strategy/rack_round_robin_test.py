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
import itertools

import pytest

from kafka_alter_rf.cluster_info.error import InvalidReplicationFactorError
from kafka_alter_rf.strategy.rack_round_robin import interleave
from kafka_alter_rf.strategy.rack_round_robin import rack_alternating_ordering
from kafka_alter_rf.strategy.rack_round_robin import rotation
from kafka_alter_rf.strategy.rack_round_robin import RoundRobinAcrossRacksStrategy
from kafka_alter_rf.util.error import ConfigurationError
from tests.conftest import make_brokers


class TestInterleave:

    def test_round_robin_selection(self):
        assert interleave([[1, 2, 5], [3, 4]]) == [1, 3, 2, 4, 5]

    def test_ties_broken_by_group_order(self):
        assert interleave([['b1'], ['a1', 'a2'], ['c1']]) == ['b1', 'a1', 'c1', 'a2']

    def test_single_group_is_pass_through(self):
        assert interleave([[4, 2, 9]]) == [4, 2, 9]

    def test_empty(self):
        assert interleave([]) == []
        assert interleave([[], []]) == []

    def test_empty_group_is_skipped(self):
        assert interleave([[1, 2], [], [3]]) == [1, 3, 2]

    @pytest.mark.parametrize('sizes', [(1,), (2, 2), (3, 1, 2), (5, 1), (2, 4, 3, 1)])
    def test_permutation_of_input(self, sizes):
        counter = itertools.count()
        groups = [[next(counter) for _ in range(size)] for size in sizes]

        result = interleave(groups)

        assert sorted(result) == list(range(sum(sizes)))

    @pytest.mark.parametrize('sizes', [(2, 2), (3, 1, 2), (5, 1), (2, 4, 3, 1)])
    def test_consecutive_elements_alternate_groups(self, sizes):
        groups = [[(g, i) for i in range(size)] for g, size in enumerate(sizes)]

        result = interleave(groups)

        for (g1, i1), (g2, i2) in zip(result, result[1:]):
            if g1 == g2:
                # Only allowed once every other group ran out of elements
                assert all(
                    len(group) <= i2
                    for g, group in enumerate(groups) if g != g1
                )


class TestRotation:

    def test_window_from_position(self):
        assert rotation([1, 3, 2, 4], 1, 2) == [3, 2]

    def test_window_wraps_around(self):
        assert rotation([1, 3, 2, 4], 3, 3) == [4, 1, 3]

    def test_full_window(self):
        assert rotation([1, 3, 2, 4], 2, 4) == [2, 4, 1, 3]

    @pytest.mark.parametrize('size', [1, 2, 5])
    def test_distinct_elements(self, size):
        ordering = list(range(10, 10 + size))
        for position in range(2 * size):
            for take in range(1, size + 1):
                window = rotation(ordering, position, take)
                assert len(window) == take
                assert len(set(window)) == take
                assert set(window) <= set(ordering)

    def test_periodic_in_position(self):
        ordering = [7, 1, 5, 3, 2]
        for position in range(len(ordering)):
            assert rotation(ordering, position, 3) == \
                rotation(ordering, position + len(ordering), 3)


class TestRackAlternatingOrdering:

    def test_two_racks(self, two_rack_brokers):
        assert rack_alternating_ordering(two_rack_brokers) == [1, 3, 2, 4]

    def test_racks_ordered_by_first_appearance(self):
        brokers = make_brokers({10: 'r2', 11: 'r1', 12: 'r2', 13: 'r3', 14: 'r1'})
        assert rack_alternating_ordering(brokers) == [10, 11, 13, 12, 14]

    def test_brokers_without_rack_form_a_group(self):
        brokers = make_brokers({1: None, 2: 'r1', 3: None, 4: 'r1'})
        assert rack_alternating_ordering(brokers) == [1, 2, 3, 4]

    def test_empty(self):
        assert rack_alternating_ordering([]) == []


class TestRoundRobinAcrossRacksStrategy:

    def test_two_racks_example(self, two_rack_brokers, create_partitions):
        partitions = create_partitions('T0', {
            ('T0', 0): [1],
            ('T0', 1): [2],
            ('T0', 2): [3],
        })

        strategy = RoundRobinAcrossRacksStrategy('T0', two_rack_brokers, partitions, 2)

        assert strategy.ordering == [1, 3, 2, 4]
        assert strategy.reassignments() == {
            ('T0', 0): [1, 3],
            ('T0', 1): [3, 2],
            ('T0', 2): [2, 4],
        }

    def test_single_rack_degenerates_to_input_order(self, create_partitions):
        brokers = make_brokers({1: 'rackX', 2: 'rackX', 3: 'rackX'})
        partitions = create_partitions('T0', {('T0', 0): [1]})

        strategy = RoundRobinAcrossRacksStrategy('T0', brokers, partitions, 2)

        assert strategy.reassignments() == {('T0', 0): [1, 2]}

    def test_each_partition_spans_two_racks(self, two_rack_brokers, create_partitions):
        assignment = {('T0', p_id): [1] for p_id in range(8)}
        racks = {b.id: b.rack for b in two_rack_brokers}

        strategy = RoundRobinAcrossRacksStrategy(
            'T0',
            two_rack_brokers,
            create_partitions('T0', assignment),
            2,
        )

        for replicas in strategy.reassignments().values():
            assert {racks[b_id] for b_id in replicas} == {'rackA', 'rackB'}

    def test_partition_id_sets_the_phase(self, two_rack_brokers, create_partitions):
        # Partition 5 behaves like partition 1 on four brokers
        partitions = create_partitions('T0', {('T0', 5): [1]})

        strategy = RoundRobinAcrossRacksStrategy('T0', two_rack_brokers, partitions, 3)

        assert strategy.reassignments() == {('T0', 5): [3, 2, 4]}

    def test_keys_are_current_partitions(self, two_rack_brokers, create_partitions):
        assignment = {('T0', 0): [1, 2], ('T0', 3): [3, 4], ('T0', 7): [1, 4]}

        strategy = RoundRobinAcrossRacksStrategy(
            'T0',
            two_rack_brokers,
            create_partitions('T0', assignment),
            1,
        )

        assert set(strategy.reassignments()) == set(assignment)

    def test_empty_topic(self, two_rack_brokers):
        strategy = RoundRobinAcrossRacksStrategy('T0', two_rack_brokers, [], 2)

        assert strategy.reassignments() == {}

    def test_rf_equal_to_broker_count(self, two_rack_brokers, create_partitions):
        partitions = create_partitions('T0', {('T0', 0): [1], ('T0', 1): [2]})

        strategy = RoundRobinAcrossRacksStrategy('T0', two_rack_brokers, partitions, 4)

        assert strategy.reassignments() == {
            ('T0', 0): [1, 3, 2, 4],
            ('T0', 1): [3, 2, 4, 1],
        }

    def test_rf_greater_than_broker_count(self, two_rack_brokers, create_partitions):
        partitions = create_partitions('T0', {('T0', 0): [1]})

        with pytest.raises(ConfigurationError):
            RoundRobinAcrossRacksStrategy('T0', two_rack_brokers, partitions, 5)

    def test_no_brokers(self):
        with pytest.raises(InvalidReplicationFactorError):
            RoundRobinAcrossRacksStrategy('T0', [], [], 1)

    def test_deterministic(self, create_partitions):
        racks = {b_id: f'r{b_id % 3}' for b_id in range(9)}
        assignment = {('T0', p_id): [0] for p_id in range(12)}

        first = RoundRobinAcrossRacksStrategy(
            'T0', make_brokers(racks), create_partitions('T0', assignment), 3,
        ).reassignments()
        second = RoundRobinAcrossRacksStrategy(
            'T0', make_brokers(racks), create_partitions('T0', assignment), 3,
        ).reassignments()

        assert first == second
