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
"""Place replicas round-robin across racks.

Brokers of all racks are merged into one ordering that alternates racks,
and partition p takes the replication_factor brokers found from position
p onwards, wrapping around. Consecutive partitions therefore lead on
different brokers while each replica set spreads over as many racks as
the ordering allows.
"""
from __future__ import annotations

import logging
from typing import Iterable
from typing import Sequence
from typing import TypeVar

from .reassignment_strategy import Assignment
from .reassignment_strategy import ReassignmentStrategy
from kafka_alter_rf.cluster_info.broker import Broker
from kafka_alter_rf.cluster_info.rack import group_by_rack

T = TypeVar('T')

_log = logging.getLogger(__name__)


def interleave(groups: Sequence[Sequence[T]]) -> list[T]:
    """Merge groups taking one element of each group per round.

    Example:
        interleave([[1, 2, 5], [3, 4]]) => [1, 3, 2, 4, 5]
    """
    rounds = max((len(group) for group in groups), default=0)
    return [
        group[i]
        for i in range(rounds)
        for group in groups
        if i < len(group)
    ]


def rotation(ordering: Sequence[T], position: int, take: int) -> list[T]:
    """Return take elements of ordering starting at position, wrapping
    around its end. take must not exceed len(ordering) for the result to
    be free of repetitions.
    """
    window = [
        ordering[i % len(ordering)]
        for i in range(position, position + take)
    ]
    _log.debug("Window at %s of size %s: %s", position, take, window)
    return window


def rack_alternating_ordering(brokers: Iterable[Broker]) -> list[int]:
    """Broker ids ordered so that consecutive ids sit on different racks
    for as long as at least two racks have brokers left.
    """
    return interleave([group.broker_ids for group in group_by_rack(brokers)])


class RoundRobinAcrossRacksStrategy(ReassignmentStrategy):
    """Default placement: rotation windows over the rack alternating
    broker ordering, phase-shifted by partition id.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.ordering = rack_alternating_ordering(self.brokers)
        self.log.debug("Rack alternating broker ordering %s", self.ordering)

    def reassignments(self) -> Assignment:
        return {
            (self.topic, partition.partition_id): rotation(
                self.ordering,
                partition.partition_id,
                self.replication_factor,
            )
            for partition in self.partitions
        }
