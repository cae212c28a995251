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
import sys
from argparse import ArgumentTypeError

from .command import AlterRFCmd
from kafka_alter_rf.cluster_info.display import display_assignment_changes
from kafka_alter_rf.cluster_info.partition import build_topic
from kafka_alter_rf.util.error import KafkaToolError
from kafka_alter_rf.util.error import UnknownTopic


def replication_factor_arg(value):
    """argparse type of the requested replication factor. Its upper bound
    depends on the cluster and is checked by the strategy.
    """
    try:
        replication_factor = int(value)
    except ValueError:
        raise ArgumentTypeError(f"replication factor must be an integer, got {value!r}")
    if replication_factor < 1:
        raise ArgumentTypeError(
            f"replication factor must be at least 1, got {replication_factor}"
        )
    return replication_factor


class SetReplicationFactorCmd(AlterRFCmd):

    def __init__(self):
        super().__init__()
        self.log = logging.getLogger(self.__class__.__name__)

    def build_subparser(self, subparsers):
        subparser = subparsers.add_parser(
            'set_replication_factor',
            description='Increase/decrease the replication factor of a topic.',
            help='This command is used to increase or decrease the replication'
            ' factor of a topic. Replicas of every partition are placed by the'
            ' selected strategy, by default round-robin over brokers'
            ' alternating racks so that each partition spans as many racks as'
            ' possible.',
        )
        subparser.add_argument(
            '--topic',
            help='Kafka topic whose replication factor will be modified.',
            required=True,
        )
        subparser.add_argument(
            'replication_factor',
            help='The new replication factor for the topic.',
            type=replication_factor_arg,
        )
        return subparser

    def run_command(self, brokers, strategy_class):
        """Get executable proposed plan(if any) for display or execution."""
        topic_id = self.args.topic
        try:
            current_assignment = self.zk.get_topic_assignment(topic_id)
        except UnknownTopic:
            self.log.error("Topic %s not found. Exiting.", topic_id)
            sys.exit(1)

        if self.is_reassignment_pending():
            self.log.error('Previous reassignment pending.')
            sys.exit(1)

        self.log.info("Current assignment of topic %s:", topic_id)
        for t_p, replicas in current_assignment.items():
            self.log.info("%s:%s %s", t_p[0], t_p[1], replicas)

        topic = build_topic(topic_id, current_assignment)
        try:
            strategy = strategy_class(
                topic_id,
                brokers,
                topic.partitions,
                self.args.replication_factor,
                self.args,
            )
            new_assignment = strategy.reassignments()
        except KafkaToolError as e:
            self.log.error(
                "Cannot set replication factor of %s to %s: %s",
                topic_id,
                self.args.replication_factor,
                e,
            )
            sys.exit(1)

        if not new_assignment:
            self.log.info("Topic %s has no partitions. No actions to perform.", topic_id)
            return

        display_assignment_changes(
            current_assignment,
            new_assignment,
            {broker.id: broker for broker in brokers},
        )
        self.process_assignment(new_assignment, allow_rf_change=True)
