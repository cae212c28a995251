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
import json
import logging
import sys

from kafka_alter_rf.cluster_info.broker import Broker
from kafka_alter_rf.cluster_info.broker import build_brokers
from kafka_alter_rf.strategy.reassignment_strategy import Assignment
from kafka_alter_rf.util.config import ClusterConfig
from kafka_alter_rf.util.validation import assignment_to_plan
from kafka_alter_rf.util.validation import PlanDict
from kafka_alter_rf.util.zookeeper import ZK


class AlterRFCmd:
    """Interface used by all kafka-alter-rf commands
    The attributes cluster_config, args and zk are initialized on run().
    """

    log = logging.getLogger("AlterRF")

    def __init__(self) -> None:
        self.cluster_config: ClusterConfig | None = None
        self.args: argparse.Namespace | None = None
        self.zk: ZK | None = None

    def build_subparser(self, subparsers):
        """Build the command subparser.

        :param subparsers: argpars subparsers
        :returns: subparser
        """
        raise NotImplementedError("Implement in subclass")

    def run_command(self, brokers: list[Broker], strategy_class: type) -> None:
        """Implement the command logic.
        When run_command is called cluster_config, args, and zk are already
        initialized.

        :param brokers: brokers of the cluster, ordered by id
        :param strategy_class: ReassignmentStrategy subclass selected for
            this run
        """
        raise NotImplementedError("Implement in subclass")

    def run(
        self,
        cluster_config: ClusterConfig,
        strategy_class: type,
        args: argparse.Namespace,
    ) -> None:
        """Initialize cluster_config, args, and zk then call run_command."""
        self.cluster_config = cluster_config
        self.args = args
        with ZK(self.cluster_config) as self.zk:
            self.log.debug(
                'Starting %s for cluster: %s and zookeeper: %s',
                self.__class__.__name__,
                self.cluster_config.name,
                self.cluster_config.zookeeper,
            )
            brokers = build_brokers(self.zk.get_brokers())
            self.run_command(brokers, strategy_class)

    def add_subparser(self, subparsers) -> None:
        self.build_subparser(subparsers).set_defaults(command=self.run)

    def is_reassignment_pending(self) -> bool:
        """Return True if there are reassignment tasks pending."""
        in_progress_plan = self.zk.get_pending_plan()
        if in_progress_plan:
            in_progress_partitions = in_progress_plan.get('partitions', [])
            self.log.info(
                'Previous re-assignment in progress for %s partitions.'
                ' Current partitions in re-assignment queue: %s',
                len(in_progress_partitions),
                in_progress_partitions,
            )
            return True
        return False

    def process_assignment(self, assignment: Assignment, allow_rf_change: bool = False) -> None:
        """Store the proposed plan if requested, then execute it if confirmed."""
        plan = assignment_to_plan(assignment)
        if self.args.proposed_plan_file:
            self.log.info(
                'Storing proposed-plan in %s',
                self.args.proposed_plan_file,
            )
            self.write_json_plan(plan, self.args.proposed_plan_file)
        self.log.info('Proposed plan assignment %s', plan)
        self.log.info(
            'Proposed-plan actions count: %s',
            len(plan['partitions']),
        )
        self.execute_plan(plan, allow_rf_change=allow_rf_change)

    def execute_plan(self, plan: PlanDict, allow_rf_change: bool = False) -> None:
        """Execute the proposed plan if requested."""
        if self.should_execute():
            if not self.zk.execute_plan(plan, allow_rf_change=allow_rf_change):
                self.log.error('Plan execution unsuccessful.')
                sys.exit(1)
            self.log.info(
                'Plan sent to zookeeper for reassignment successfully.',
            )
        else:
            self.log.info('Proposed plan won\'t be executed (--apply and confirmation needed).')

    def should_execute(self) -> bool:
        """Confirm if proposed-plan should be executed."""
        return self.args.apply and (self.args.no_confirm or self.confirm_execution())

    def confirm_execution(self) -> bool:
        """Ask the user whether the proposed plan should be executed."""
        permit = ''
        while permit.lower() not in ('yes', 'no'):
            permit = input('Execute Proposed Plan? [yes/no] ')
        return permit.lower() == 'yes'

    def write_json_plan(self, proposed_layout: PlanDict, proposed_plan_file: str) -> None:
        """Dump proposed json plan to given output file for future usage."""
        with open(proposed_plan_file, 'w') as output:
            json.dump(proposed_layout, output)
