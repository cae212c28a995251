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
from types import TracebackType
from typing import Any

from kazoo.client import KazooClient
from kazoo.exceptions import NodeExistsError
from kazoo.exceptions import NoNodeError
from kazoo.protocol.states import ZnodeStat
from kazoo.retry import KazooRetry

from kafka_alter_rf.util.config import ClusterConfig
from kafka_alter_rf.util.error import UnknownTopic
from kafka_alter_rf.util.serialization import dump_json
from kafka_alter_rf.util.serialization import load_json
from kafka_alter_rf.util.validation import assignment_to_plan
from kafka_alter_rf.util.validation import PlanDict
from kafka_alter_rf.util.validation import validate_plan

ADMIN_PATH = "/admin"
REASSIGNMENT_NODE = "reassign_partitions"
REASSIGNMENT_PATH = f"{ADMIN_PATH}/{REASSIGNMENT_NODE}"
_log = logging.getLogger('kafka-zookeeper-manager')


class ZK:
    """Opens a connection to a kafka zookeeper.
    To be used in the 'with' statement."""

    def __init__(self, cluster_config: ClusterConfig) -> None:
        self.cluster_config = cluster_config

    def __enter__(self) -> ZK:
        kazoo_retry = KazooRetry(
            max_tries=5,
        )
        self.zk = KazooClient(
            hosts=self.cluster_config.zookeeper,
            connection_retry=kazoo_retry,
            auth_data=self.cluster_config.auth_data,
            sasl_options=self.cluster_config.sasl_options,
        )
        # Credentials stay out of the logs, only the schemes are shown.
        _log.debug(
            "ZK: Creating new zookeeper connection: %s, auth schemes: %s, sasl: %s",
            self.cluster_config.zookeeper,
            [scheme for scheme, _ in self.cluster_config.auth_data or []],
            bool(self.cluster_config.sasl_options),
        )
        self.zk.start()
        return self

    def __exit__(self, type: type | None, value: BaseException | None, traceback: TracebackType | None) -> None:
        self.zk.stop()

    def get_children(self, path: str) -> list[str]:
        """Returns the children of the specified node."""
        _log.debug("ZK: Getting children of %s", path)
        return self.zk.get_children(path)

    def get(self, path: str) -> tuple[bytes, ZnodeStat]:
        """Returns the data of the specified node."""
        _log.debug("ZK: Getting %s", path)
        return self.zk.get(path)

    def create(self, path: str, value: bytes = b'', makepath: bool = False) -> str:
        """Creates a Zookeeper node.

        :param: path: The zookeeper node path
        :param: value: Zookeeper node value
        :param: makepath: Whether the path should be created if it doesn't
          exist.
        """
        _log.debug("ZK: Creating node %s", path)
        return self.zk.create(path, value, makepath=makepath)

    def get_broker_metadata(self, broker_id: str) -> dict[str, Any]:
        """Broker registration data: host, port, endpoints and, when the
        broker was started with broker.rack, its rack.
        """
        try:
            return load_json(self.get(f"/brokers/ids/{broker_id}")[0])
        except NoNodeError:
            _log.error("broker '%s' not found.", broker_id)
            raise

    def get_brokers(self) -> dict[int, dict[str, Any]]:
        """Get information on all the available brokers.

        Brokers are keyed and ordered by ascending broker id so that
        callers iterating the result see a stable order across runs.
        """
        try:
            broker_ids = self.get_children("/brokers/ids")
        except NoNodeError:
            _log.info("cluster is empty.")
            return {}
        ordered_ids = sorted(broker_ids, key=int)
        return {int(b_id): self.get_broker_metadata(b_id) for b_id in ordered_ids}

    def get_topic_assignment(self, topic: str) -> dict[tuple[str, int], list[int]]:
        """Fetch the current replicas of every partition of topic, ordered
        by partition id.

        Topic-data format in zookeeper:
        {
            'version': 1,
            'partitions': {
                <p_id>: [<broker_id>, <broker_id>, ...],
            }
        }
        :raises UnknownTopic: the topic does not exist
        """
        try:
            topic_data = load_json(self.get(f"/brokers/topics/{topic}")[0])
        except NoNodeError:
            _log.error("topic '%s' not found.", topic)
            raise UnknownTopic(f"Topic {topic} does not exist")
        partitions = topic_data.get('partitions') or {}
        return {
            (topic, int(p_id)): replicas
            for p_id, replicas in sorted(
                partitions.items(),
                key=lambda item: int(item[0]),
            )
        }

    def get_cluster_plan(self, topic_names: list[str]) -> PlanDict:
        """Fetch the current plan of the given topics from zookeeper."""
        _log.info('Fetching current cluster-topology from Zookeeper...')
        assignment: dict[tuple[str, int], list[int]] = {}
        for topic in topic_names:
            assignment.update(self.get_topic_assignment(topic))
        return assignment_to_plan(assignment)

    def get_pending_plan(self) -> Any:
        """Read the currently running plan on reassign_partitions node."""
        try:
            return load_json(self.get(REASSIGNMENT_PATH)[0])
        except NoNodeError:
            return {}

    def execute_plan(self, plan: PlanDict, allow_rf_change: bool = False) -> bool:
        """Submit reassignment plan for execution."""
        topic_names = sorted({p_data['topic'] for p_data in plan['partitions']})
        base_plan = self.get_cluster_plan(topic_names)
        if not validate_plan(plan, base_plan, allow_rf_change=allow_rf_change):
            _log.error('Given plan is invalid. Aborting new reassignment plan ... %s', plan)
            return False
        try:
            _log.info('Sending plan to Zookeeper...')
            self.create(REASSIGNMENT_PATH, dump_json(plan), makepath=True)
            _log.info(
                'Re-assign partitions node in Zookeeper updated successfully '
                'with %s',
                plan,
            )
            return True
        except NodeExistsError:
            _log.warning('Previous plan in progress. Exiting..')
            _log.warning('Aborting new reassignment plan... %s', plan)
            in_progress = self.get_pending_plan().get('partitions', [])
            _log.warning(
                '%s partition(s) reassignment currently in progress: %s',
                len(in_progress),
                ', '.join(
                    '{topic}-{p_id}'.format(topic=p['topic'], p_id=p['partition'])
                    for p in in_progress
                ),
            )
            return False
