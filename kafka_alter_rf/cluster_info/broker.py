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

from typing import Any

NO_RACK = ''


class Broker:
    """Broker of the cluster snapshot.

    :param id: broker id, unique within the cluster
    :param metadata: registration data of the broker as found in zookeeper,
        None for a broker that is not registered
    """

    def __init__(self, id: int, metadata: dict[str, Any] | None = None) -> None:
        self._id = id
        self._metadata = metadata or {}

    @property
    def id(self) -> int:
        return self._id

    @property
    def rack(self) -> str:
        """Rack label as reported by the broker, NO_RACK when absent."""
        return self._metadata.get('rack') or NO_RACK

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Broker):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __str__(self) -> str:
        return f"{self._id}"

    def __repr__(self) -> str:
        return f"Broker({self._id}, rack={self.rack!r})"


def build_brokers(brokers: dict[int, dict[str, Any] | None]) -> list[Broker]:
    """Create Broker objects from the broker_id: metadata mapping returned by
    the zookeeper gateway, keeping its iteration order.
    """
    return [
        Broker(broker_id, metadata)
        for broker_id, metadata in brokers.items()
    ]
