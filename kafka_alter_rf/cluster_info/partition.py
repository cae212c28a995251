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

from .topic import Topic


class Partition:
    """Class representing the partition object.
    It contains topic-partition_id tuple as name, topic and replicas
    (list of broker ids).
    """

    def __init__(self, topic: Topic, id: int, replicas: list[int] | None = None) -> None:
        # Every partition name has (topic, partition) tuple
        self._name = (topic.id, id)
        self._topic = topic
        self._replicas = list(replicas or [])

    @property
    def name(self) -> tuple[str, int]:
        """Name of partition, consisting of (topic_id, partition_id) tuple."""
        return self._name

    @property
    def partition_id(self) -> int:
        """Partition id component of the partition-tuple."""
        return self._name[1]

    @property
    def topic(self) -> Topic:
        return self._topic

    @property
    def replicas(self) -> list[int]:
        """List of broker ids holding a replica of the partition."""
        return self._replicas

    def __str__(self) -> str:
        return f"{self._name}"

    def __repr__(self) -> str:
        return f"{self}"


def build_topic(topic_id: str, assignment: dict[tuple[str, int], list[int]]) -> Topic:
    """Build a Topic and its Partitions from a (topic, partition): replicas
    assignment. Partitions of other topics are ignored.
    """
    topic = Topic(topic_id)
    for (t_id, p_id), replicas in sorted(assignment.items()):
        if t_id == topic_id:
            topic.add_partition(Partition(topic, p_id, replicas))
    return topic
