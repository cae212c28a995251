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

import json
import logging
import sys
from typing import Any

from .broker import Broker
from .broker import NO_RACK
from .rack import RackGroup

_log = logging.getLogger('kafka-alter-rf')


def display_table(headers: list[str], table: list[list[Any]]) -> None:
    """Print a formatted table.

    :param headers: A list of header objects that are displayed in the first
        row of the table.
    :param table: A list of lists where each sublist is a row of the table.
        The number of elements in each row should be equal to the number of
        headers.
    """
    assert all(len(row) == len(headers) for row in table)

    str_headers = [str(header) for header in headers]
    str_table = [[str(cell) for cell in row] for row in table]
    column_lengths = [
        max([len(header)] + [len(row[i]) for row in str_table])
        for i, header in enumerate(str_headers)
    ]

    print(
        " | ".join(
            header.ljust(length)
            for header, length in zip(str_headers, column_lengths)
        ).rstrip()
    )
    print("-+-".join("-" * length for length in column_lengths))
    for row in str_table:
        print(
            " | ".join(
                cell.ljust(length)
                for cell, length in zip(row, column_lengths)
            ).rstrip()
        )


def rack_label(rack: str) -> str:
    return rack if rack != NO_RACK else '<no rack>'


def count_racks(replicas: list[int], brokers: dict[int, Broker]) -> int:
    """Number of distinct racks spanned by replicas. Unknown brokers count
    as a rack of their own.
    """
    return len({
        brokers[b_id].rack if b_id in brokers else f'unknown-{b_id}'
        for b_id in replicas
    })


def display_rack_groups(groups: list[RackGroup], ordering: list[int]) -> None:
    display_table(
        ['Rack', 'Brokers'],
        [
            [rack_label(group.id), ', '.join(str(b) for b in group.broker_ids)]
            for group in groups
        ],
    )
    print(f"\nRack alternating broker ordering: {ordering}")


def display_rack_groups_json(groups: list[RackGroup], ordering: list[int]) -> None:
    """Print rack groups and ordering as json, indented when stdout is a
    terminal. Brokers without a rack are listed under the "" rack.
    """
    layout = {
        'racks': [
            {'rack': group.id, 'brokers': group.broker_ids}
            for group in groups
        ],
        'ordering': ordering,
    }
    print(json.dumps(layout, indent=4 if sys.stdout.isatty() else None))


def display_assignment_changes(
    current_assignment: dict[tuple[str, int], list[int]],
    new_assignment: dict[tuple[str, int], list[int]],
    brokers: dict[int, Broker],
) -> None:
    """Print current and proposed replicas side by side together with the
    number of racks each replica set spans.
    """
    table = []
    for t_p, new_replicas in new_assignment.items():
        old_replicas = current_assignment.get(t_p, [])
        table.append([
            f"{t_p[0]}:{t_p[1]}",
            old_replicas,
            count_racks(old_replicas, brokers),
            new_replicas,
            count_racks(new_replicas, brokers),
        ])
    display_table(
        ['Partition', 'Current replicas', 'Racks', 'Proposed replicas', 'Racks'],
        table,
    )
    changed = sum(
        1 for t_p, replicas in new_assignment.items()
        if current_assignment.get(t_p) != replicas
    )
    _log.info(
        "%s of %s partition(s) change replicas.",
        changed,
        len(new_assignment),
    )
