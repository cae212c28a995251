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

from .command import AlterRFCmd
from kafka_alter_rf.cluster_info.display import display_rack_groups
from kafka_alter_rf.cluster_info.display import display_rack_groups_json
from kafka_alter_rf.cluster_info.rack import group_by_rack
from kafka_alter_rf.strategy.rack_round_robin import interleave


class DescribeRacksCmd(AlterRFCmd):

    def __init__(self):
        super().__init__()
        self.log = logging.getLogger(self.__class__.__name__)

    def build_subparser(self, subparsers):
        subparser = subparsers.add_parser(
            'describe_racks',
            description='Show brokers grouped by rack and the rack alternating'
            ' broker ordering used for replica placement.',
            help='This command will not mutate the cluster\'s state.',
        )
        subparser.add_argument(
            '--json',
            action='store_true',
            help='Print output in json format.',
        )
        return subparser

    def run_command(self, brokers, strategy_class):
        if not brokers:
            self.log.info("The cluster has no brokers.")
            return
        groups = group_by_rack(brokers)
        ordering = interleave([group.broker_ids for group in groups])
        if self.args.json:
            display_rack_groups_json(groups, ordering)
        else:
            display_rack_groups(groups, ordering)
