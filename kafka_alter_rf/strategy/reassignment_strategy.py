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
from __future__ import annotations

import argparse
import itertools
import logging
import shlex
from collections import Counter
from typing import Dict
from typing import Iterable
from typing import List
from typing import Tuple

from kafka_alter_rf.cluster_info.broker import Broker
from kafka_alter_rf.cluster_info.error import InvalidReplicationFactorError
from kafka_alter_rf.cluster_info.error import TopologyMismatchError
from kafka_alter_rf.cluster_info.partition import Partition

Assignment = Dict[Tuple[str, int], List[int]]


def validate_replication_factor(replication_factor: int, broker_count: int) -> None:
    """Every replica of a partition must land on a distinct broker.

    :raises InvalidReplicationFactorError: replication_factor is not positive
        or greater than broker_count.
    """
    if replication_factor <= 0:
        raise InvalidReplicationFactorError(
            f"Replication factor must be positive, {replication_factor} given"
        )
    if replication_factor > broker_count:
        raise InvalidReplicationFactorError(
            f"Replication factor cannot exceed broker count: "
            f"{replication_factor} > {broker_count}"
        )


def validate_topology(topic: str, brokers: list[Broker], partitions: list[Partition]) -> None:
    """Check that brokers and partitions come from one consistent snapshot.

    :raises TopologyMismatchError: on duplicate brokers or partitions, on
        partitions of another topic, or on replica lists that are empty,
        repeat a broker, or name a broker missing from brokers.
    """
    duplicate_brokers = sorted(
        b_id for b_id, count in Counter(b.id for b in brokers).items()
        if count > 1
    )
    if duplicate_brokers:
        raise TopologyMismatchError(f"Duplicate broker ids {duplicate_brokers}")

    broker_ids = {broker.id for broker in brokers}
    seen_ids: set[int] = set()
    for partition in partitions:
        if partition.topic.id != topic:
            raise TopologyMismatchError(
                f"Partition {partition} does not belong to topic {topic}"
            )
        if partition.partition_id < 0 or partition.partition_id in seen_ids:
            raise TopologyMismatchError(
                f"Invalid or repeated partition id in {partition}"
            )
        seen_ids.add(partition.partition_id)
        if not partition.replicas:
            raise TopologyMismatchError(f"Partition {partition} has no replicas")
        if len(set(partition.replicas)) != len(partition.replicas):
            raise TopologyMismatchError(
                f"Partition {partition} repeats a broker in {partition.replicas}"
            )
        unknown = sorted(set(partition.replicas) - broker_ids)
        if unknown:
            raise TopologyMismatchError(
                f"Partition {partition} has replicas on unknown brokers {unknown}"
            )


class ReassignmentStrategy:
    """Interface used to implement any replica placement policy.

    Inputs are validated on construction so that reassignments() either
    returns the complete mapping or is never reached.

    :param topic: name of the topic to reassign
    :param brokers: brokers of the cluster snapshot
    :param partitions: current partitions of the topic
    :param replication_factor: requested number of replicas per partition
    :param args: the program arguments
    :raises InvalidReplicationFactorError: before partitions are looked at
    :raises TopologyMismatchError: inconsistent brokers and partitions
    """

    def __init__(
        self,
        topic: str,
        brokers: Iterable[Broker],
        partitions: Iterable[Partition],
        replication_factor: int,
        args: argparse.Namespace | None = None,
    ) -> None:
        self.log = logging.getLogger(self.__class__.__name__)
        self.topic = topic
        self.brokers = list(brokers)
        self.replication_factor = replication_factor
        validate_replication_factor(
            replication_factor,
            len({broker.id for broker in self.brokers}),
        )
        self.partitions = list(partitions)
        validate_topology(topic, self.brokers, self.partitions)
        self.args = args
        if getattr(args, 'strategy_args', None):
            self.parse_args(list(itertools.chain.from_iterable(
                shlex.split(arg) for arg in args.strategy_args
            )))
        else:
            self.parse_args([])

    def parse_args(self, _strategy_args: list[str]) -> None:
        """Parse strategy specific command line arguments.

        :param _strategy_args: The list of arguments as strings.
        """
        pass

    def reassignments(self) -> Assignment:
        """Return the new replica list of every current partition of the
        topic, keyed by (topic, partition_id).
        """
        raise NotImplementedError("Implement in subclass")
