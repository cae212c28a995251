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

import logging
from typing import Iterable

from .broker import Broker

_log = logging.getLogger(__name__)


class RackGroup:
    """Brokers sharing one rack label, in the order they were added."""

    def __init__(self, id: str, brokers: list[Broker] | None = None) -> None:
        self._id = id
        self._brokers = brokers or []

    @property
    def id(self) -> str:
        """Rack label, empty for brokers without a rack."""
        return self._id

    @property
    def brokers(self) -> list[Broker]:
        return self._brokers

    @property
    def broker_ids(self) -> list[int]:
        return [broker.id for broker in self._brokers]

    def add_broker(self, broker: Broker) -> None:
        self._brokers.append(broker)

    def __len__(self) -> int:
        return len(self._brokers)

    def __str__(self) -> str:
        return f"{self._id}"

    def __repr__(self) -> str:
        return f"RackGroup({self._id!r}, {self.broker_ids})"


def group_by_rack(brokers: Iterable[Broker]) -> list[RackGroup]:
    """Split brokers into rack groups.

    Groups come out in the order their rack label is first seen in brokers
    and keep the relative broker order inside each rack. The label is used
    as reported; brokers without one share the NO_RACK group.
    """
    groups: dict[str, RackGroup] = {}
    for broker in brokers:
        groups.setdefault(broker.rack, RackGroup(broker.rack)).add_broker(broker)
    _log.debug("Brokers by rack: %s", list(groups.values()))
    return list(groups.values())
