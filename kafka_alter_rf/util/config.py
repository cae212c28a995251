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
import os
from typing import Any
from typing import NamedTuple

import yaml
from typing_extensions import TypedDict

from kafka_alter_rf.util.error import ConfigurationError
from kafka_alter_rf.util.error import InvalidConfigurationError
from kafka_alter_rf.util.error import MissingConfigurationError


DEFAULT_KAFKA_TOPOLOGY_BASE_PATH = '/etc/kafka_discovery'
HOME_OVERRIDE = '.kafka_discovery'
ADHOC_CLUSTER_TYPE = 'adhoc'

_log = logging.getLogger(__name__)


class ClusterConfig(NamedTuple):
    """Cluster configuration.
    :param type: cluster type, the name of the topology file it came from
    :param name: cluster name
    :param broker_list: list of kafka brokers
    :param zookeeper: zookeeper connection string
    :param auth_data: (scheme, credential) pairs added to the zookeeper
        session, e.g. ("digest", "user:password")
    :param sasl_options: SASL options of the zookeeper session
    """
    type: str
    name: str
    broker_list: list[str]
    zookeeper: str
    auth_data: list[tuple[str, str]] | None = None
    sasl_options: dict[str, str] | None = None


class AuthDataDict(TypedDict):
    scheme: str
    credential: str


class SecurityConfigDict(TypedDict, total=False):
    auth_data: list[AuthDataDict]
    sasl_options: dict[str, str]


class ClusterConfigDict(TypedDict, total=False):
    broker_list: list[str]
    zookeeper: str
    zookeeper_security: SecurityConfigDict


class LocalConfigDict(TypedDict):
    cluster: str


class TopologyConfigurationDict(TypedDict, total=False):
    clusters: dict[str, ClusterConfigDict]
    local_config: LocalConfigDict


def load_yaml_config(config_path: str) -> TopologyConfigurationDict:
    with open(config_path) as config_file:
        return yaml.safe_load(config_file)


class TopologyConfiguration:
    """Topology configuration for a kafka cluster type.

    Read a cluster_type.yaml from the kafka_topology_path.
    Example config file:
    .. code-block:: yaml

       clusters:
         cluster1:
             broker_list:
               - "broker1:9092"
               - "broker2:9092"
             zookeeper: "zookeeper1:2181/mykafka"
         cluster2:
             broker_list:
               - "broker3:9092"
             zookeeper: "zookeeper2:2181/mykafka"
             zookeeper_security:
               auth_data:
                 - scheme: "digest"
                   credential: "admin:secret"
               sasl_options:
                 mechanism: "DIGEST-MD5"
                 username: "admin"
                 password: "secret"
       local_config:
         cluster: cluster1

    :param cluster_type: kafka cluster type.
    :param kafka_topology_path: path of the directory containing
        the <cluster_type>.yaml config
    """

    def __init__(
        self,
        cluster_type: str,
        kafka_topology_path: str = DEFAULT_KAFKA_TOPOLOGY_BASE_PATH,
    ) -> None:
        self.kafka_topology_path = kafka_topology_path
        self.cluster_type = cluster_type
        self.log = logging.getLogger(self.__class__.__name__)
        self.clusters: dict[str, ClusterConfigDict] = {}
        self.local_config: LocalConfigDict | None = None
        self.load_topology_config()

    def load_topology_config(self) -> None:
        config_path = os.path.join(
            self.kafka_topology_path,
            f'{self.cluster_type}.yaml',
        )
        self.log.debug("Loading configuration from %s", config_path)
        if not os.path.isfile(config_path):
            raise MissingConfigurationError(
                f"Topology configuration {config_path} for cluster "
                f"{self.cluster_type} does not exist"
            )
        topology_config = load_yaml_config(config_path)
        if not isinstance(topology_config, dict) or 'clusters' not in topology_config:
            self.log.error("Invalid topology file %s", config_path)
            raise InvalidConfigurationError(
                f"Invalid topology file {config_path}"
            )
        self.clusters = topology_config['clusters']
        self.local_config = topology_config.get('local_config')

    def _to_cluster_config(self, name: str) -> ClusterConfig:
        cluster = self.clusters[name]
        if 'zookeeper' not in cluster:
            raise InvalidConfigurationError(
                f"Cluster {name} of type {self.cluster_type} has no zookeeper"
            )
        auth_data, sasl_options = parse_security_config(
            cluster.get('zookeeper_security') or {},
            f"cluster {name} of type {self.cluster_type}",
        )
        return ClusterConfig(
            type=self.cluster_type,
            name=name,
            broker_list=cluster.get('broker_list', []),
            zookeeper=cluster['zookeeper'],
            auth_data=auth_data,
            sasl_options=sasl_options,
        )

    def get_cluster_by_name(self, name: str) -> ClusterConfig:
        if name in self.clusters:
            return self._to_cluster_config(name)
        raise ConfigurationError(f"No cluster with name: {name}")

    def get_local_cluster(self) -> ClusterConfig:
        if not self.local_config:
            raise ConfigurationError("No default local cluster configured")
        name = self.local_config.get('cluster')
        if name not in self.clusters:
            self.log.error("Local cluster %s is not defined", name)
            raise InvalidConfigurationError(
                f"Invalid topology file: local cluster {name} is not defined"
            )
        return self._to_cluster_config(name)

    def __repr__(self) -> str:
        return (
            f"TopologyConfig: cluster_type {self.cluster_type}, "
            f"clusters: {self.clusters}, local_config {self.local_config}"
        )


def get_conf_dirs() -> list[str]:
    config_dirs = []
    if os.environ.get("KAFKA_DISCOVERY_DIR"):
        config_dirs.append(os.environ["KAFKA_DISCOVERY_DIR"])
    if os.environ.get("HOME"):
        home_config = os.path.join(
            os.path.abspath(os.environ['HOME']),
            HOME_OVERRIDE,
        )
        if os.path.isdir(home_config):
            config_dirs.append(home_config)
    config_dirs.append(DEFAULT_KAFKA_TOPOLOGY_BASE_PATH)
    return config_dirs


def get_cluster_config(
    cluster_type: str,
    cluster_name: str | None = None,
    kafka_topology_base_path: str | None = None,
) -> ClusterConfig:
    """Return the cluster configuration.
    Use the local cluster if cluster_name is not specified.
    The first directory holding a <cluster_type>.yaml wins.

    :param cluster_type: the type of the cluster
    :param cluster_name: the name of the cluster
    :param kafka_topology_base_path: base path to look for <cluster_type>.yaml
    :raises MissingConfigurationError: no topology file found
    """
    if kafka_topology_base_path:
        config_dirs = [kafka_topology_base_path]
    else:
        config_dirs = get_conf_dirs()

    topology = None
    for config_dir in config_dirs:
        try:
            topology = TopologyConfiguration(cluster_type, config_dir)
            break
        except MissingConfigurationError:
            _log.debug("No %s.yaml in %s", cluster_type, config_dir)
    if not topology:
        raise MissingConfigurationError(
            f"No available configuration for type {cluster_type}",
        )

    if cluster_name:
        return topology.get_cluster_by_name(cluster_name)
    else:
        return topology.get_local_cluster()


def adhoc_cluster_config(zookeeper: str, cluster_name: str | None = None) -> ClusterConfig:
    """Build a configuration for a cluster reached directly by its
    zookeeper connection string, without any topology file.
    """
    if not zookeeper:
        raise ConfigurationError("Empty zookeeper connection string")
    return ClusterConfig(
        type=ADHOC_CLUSTER_TYPE,
        name=cluster_name or zookeeper,
        broker_list=[],
        zookeeper=zookeeper,
    )


def parse_security_config(
    security: Any,
    source: str,
) -> tuple[list[tuple[str, str]] | None, dict[str, str] | None]:
    """Convert a zookeeper security section into the auth_data and
    sasl_options arguments of the zookeeper client.

    Expected format:
    .. code-block:: yaml

       auth_data:
         - scheme: "digest"
           credential: "user:password"
       sasl_options:
         mechanism: "DIGEST-MD5"
         username: "user"
         password: "password"

    :param security: the parsed section
    :param source: where the section comes from, used in error messages
    :raises InvalidConfigurationError: malformed section
    """
    if not isinstance(security, dict):
        raise InvalidConfigurationError(f"Invalid zookeeper security in {source}")
    unknown_keys = set(security) - {'auth_data', 'sasl_options'}
    if unknown_keys:
        raise InvalidConfigurationError(
            f"Unknown zookeeper security keys in {source}: {sorted(unknown_keys)}"
        )

    auth_data = None
    if security.get('auth_data') is not None:
        entries = security['auth_data']
        if not isinstance(entries, list) or not all(
            isinstance(entry, dict) and {'scheme', 'credential'} <= set(entry)
            for entry in entries
        ):
            raise InvalidConfigurationError(
                f"auth_data in {source} must be a list of scheme/credential entries"
            )
        auth_data = [(entry['scheme'], str(entry['credential'])) for entry in entries]

    sasl_options = None
    if security.get('sasl_options') is not None:
        if not isinstance(security['sasl_options'], dict):
            raise InvalidConfigurationError(
                f"sasl_options in {source} must be a mapping"
            )
        sasl_options = {
            key: str(value) for key, value in security['sasl_options'].items()
        }
    return auth_data, sasl_options


def apply_command_config(cluster_config: ClusterConfig, command_config_path: str) -> ClusterConfig:
    """Replace the zookeeper credentials of cluster_config with the ones
    found in a command config file, a YAML file holding a zookeeper
    security section at its top level. Keys absent from the file keep the
    cluster's value.

    :raises MissingConfigurationError: the file does not exist
    :raises InvalidConfigurationError: malformed file
    """
    if not os.path.isfile(command_config_path):
        raise MissingConfigurationError(
            f"Command config {command_config_path} does not exist"
        )
    _log.debug("Loading zookeeper credentials from %s", command_config_path)
    auth_data, sasl_options = parse_security_config(
        load_yaml_config(command_config_path) or {},
        command_config_path,
    )
    return cluster_config._replace(
        auth_data=auth_data if auth_data is not None else cluster_config.auth_data,
        sasl_options=sasl_options if sasl_options is not None else cluster_config.sasl_options,
    )
