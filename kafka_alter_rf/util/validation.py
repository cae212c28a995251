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
"""Provide functions to validate and generate a Kafka reassignment plan."""
from __future__ import annotations

import logging
from collections import Counter

from typing_extensions import TypedDict


_log = logging.getLogger(__name__)


class PartitionDict(TypedDict):
    topic: str
    partition: int
    replicas: list[int]


class PlanDict(TypedDict):
    version: int
    partitions: list[PartitionDict]


def plan_to_assignment(plan: PlanDict) -> dict[tuple[str, int], list[int]]:
    """Convert the plan to the (topic, partition): replicas format."""
    return {
        (elem['topic'], elem['partition']): elem['replicas']
        for elem in plan['partitions']
    }


def assignment_to_plan(assignment: dict[tuple[str, int], list[int]]) -> PlanDict:
    """Convert an assignment to the format used by Kafka to
    describe a reassignment plan.
    """
    return {
        'version': 1,
        'partitions': [
            {'topic': t_p[0], 'partition': t_p[1], 'replicas': list(replicas)}
            for t_p, replicas in assignment.items()
        ],
    }


def validate_plan(
    new_plan: PlanDict,
    base_plan: PlanDict | None = None,
    allow_rf_change: bool = False,
) -> bool:
    """Verify that the new plan is valid for execution.

    Given kafka-reassignment plan should affirm with following rules:
    - Plan should have at least one partition for re-assignment
    - Partition-name list should be subset of base-plan partition-list
    - Replication-factor for each partition of same topic is same
    - Replication-factor for each partition remains unchanged, unless
      allow_rf_change is set
    - No duplicate broker-ids in each replicas
    """
    if not _validate_plan(new_plan):
        _log.error('Invalid proposed-plan.')
        return False

    if base_plan:
        if not _validate_format(base_plan):
            _log.error('Invalid assignment from cluster.')
            return False
        if not _validate_plan_base(new_plan, base_plan, allow_rf_change):
            return False
    return True


def _validate_plan_base(
    new_plan: PlanDict,
    base_plan: PlanDict,
    allow_rf_change: bool = False,
) -> bool:
    """Validate the new plan against the plan currently in the cluster.

    - Partition-check: New partition-set should be subset of base-partition set
    - Replica-count check: Replication-factor for each partition remains same
    """
    base_replicas = plan_to_assignment(base_plan)
    new_replicas = plan_to_assignment(new_plan)

    invalid_partitions = sorted(set(new_replicas) - set(base_replicas))
    if invalid_partitions:
        _log.error('Invalid partition(s) found: %s', invalid_partitions)
        return False

    if not allow_rf_change:
        mismatched = [
            t_p for t_p, replicas in new_replicas.items()
            if len(replicas) != len(base_replicas[t_p])
        ]
        for t_p in mismatched:
            _log.error(
                'Replication-factor Mismatch: Partition: %s: '
                'Base-replicas: %s, Proposed-replicas: %s',
                t_p,
                base_replicas[t_p],
                new_replicas[t_p],
            )
        if mismatched:
            return False
    return True


def _validate_format(plan: PlanDict) -> bool:
    """Validate if the format of the plan as expected.

    Sample-plan format:
    {
        "version": 1,
        "partitions": [
            {"partition":0, "topic":'t1', "replicas":[0,1,2]},
            {"partition":0, "topic":'t2', "replicas":[1,2]},
            ...
        ]}
    """
    if not isinstance(plan, dict) or set(plan.keys()) != {'version', 'partitions'}:
        _log.error(
            'Invalid or incomplete keys in given plan. Expected: "version", '
            '"partitions". Found: %s',
            ', '.join(plan.keys()) if isinstance(plan, dict) else plan,
        )
        return False

    if plan['version'] != 1:
        _log.error('Invalid version of plan %s', plan['version'])
        return False

    if not isinstance(plan['partitions'], list):
        _log.error('"partitions" of type list expected.')
        return False

    if not plan['partitions']:
        _log.error('"partitions" list found empty')
        return False

    for p_data in plan['partitions']:
        if not isinstance(p_data, dict) or set(p_data.keys()) != {'topic', 'partition', 'replicas'}:
            _log.error('Invalid partition-data %s', p_data)
            return False
        if not isinstance(p_data['topic'], str):
            _log.error('"topic" of type str expected %s', p_data)
            return False
        # bool is an int subclass but never a valid id
        if not isinstance(p_data['partition'], int) or isinstance(p_data['partition'], bool):
            _log.error('"partition" of type int expected %s', p_data)
            return False
        if not isinstance(p_data['replicas'], list) or not p_data['replicas']:
            _log.error('Non-empty "replicas" list expected %s', p_data)
            return False
        if not all(
            isinstance(broker, int) and not isinstance(broker, bool)
            for broker in p_data['replicas']
        ):
            _log.error('"replicas" of type integer list expected %s', p_data)
            return False
    return True


def _validate_plan(plan: PlanDict) -> bool:
    """Validate if given plan is valid based on kafka-cluster-assignment protocols.

    - Correct format of plan
    - Partition-list should be unique
    - Every partition of a topic should have same replication-factor
    - Replicas of a partition should have unique broker-set
    """
    if not _validate_format(plan):
        return False

    partition_names = [
        (p_data['topic'], p_data['partition'])
        for p_data in plan['partitions']
    ]
    duplicate_partitions = [
        partition for partition, count in Counter(partition_names).items()
        if count > 1
    ]
    if duplicate_partitions:
        _log.error('Duplicate partitions in plan %s', duplicate_partitions)
        return False

    for p_data in plan['partitions']:
        if len(set(p_data['replicas'])) != len(p_data['replicas']):
            _log.error(
                'Duplicate brokers: (%s, %s) in replicas %s',
                p_data['topic'],
                p_data['partition'],
                p_data['replicas'],
            )
            return False

    topic_replication_factor: dict[str, int] = {}
    for p_data in plan['partitions']:
        replication_factor = topic_replication_factor.setdefault(
            p_data['topic'],
            len(p_data['replicas']),
        )
        if replication_factor != len(p_data['replicas']):
            _log.error(
                'Mismatch in replication-factor of partitions for topic %s',
                p_data['topic'],
            )
            return False
    return True
