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
"""This class contains information for a topic object."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kafka_alter_rf.cluster_info.partition import Partition


class Topic:
    """Information of a topic object.

    :params
        id:         Name of the given topic
        partitions: List of Partition objects, in partition id order
    """

    def __init__(self, id: str, partitions: list[Partition] | None = None) -> None:
        self._id = id
        self._partitions = partitions or []

    @property
    def id(self) -> str:
        return self._id

    @property
    def partitions(self) -> list[Partition]:
        return self._partitions

    def add_partition(self, partition: Partition) -> None:
        self._partitions.append(partition)

    def __str__(self) -> str:
        return f"{self._id}"

    def __repr__(self) -> str:
        return f"{self}"
