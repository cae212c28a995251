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
import argparse
import configparser
import logging
import sys
from logging.config import fileConfig

from kafka_alter_rf.cmds.describe_racks import DescribeRacksCmd
from kafka_alter_rf.cmds.set_replication_factor import SetReplicationFactorCmd
from kafka_alter_rf.strategy.loader import load_strategy_class
from kafka_alter_rf.strategy.rack_round_robin import RoundRobinAcrossRacksStrategy
from kafka_alter_rf.util import config
from kafka_alter_rf.util.error import ConfigurationError

_log = logging.getLogger()


def parse_args(argv=None):
    """Parse the arguments."""
    parser = argparse.ArgumentParser(
        description='Alter the replication factor of a topic, spreading the'
        ' replicas of each partition across racks.',
    )
    parser.add_argument(
        '--cluster-type',
        '-t',
        dest='cluster_type',
        help='Type of the cluster.',
        type=str,
    )
    parser.add_argument(
        '--cluster-name',
        '-c',
        dest='cluster_name',
        help='Name of the cluster (Default to local cluster).',
    )
    parser.add_argument(
        '--discovery-base-path',
        dest='discovery_base_path',
        type=str,
        help='Path of the directory containing the <cluster_type>.yaml config',
    )
    parser.add_argument(
        '--zookeeper',
        type=str,
        help='Zookeeper connection string of the cluster. Overrides'
        ' --cluster-type and the topology configuration files.',
    )
    parser.add_argument(
        '--command-config',
        dest='command_config',
        metavar='<command-config-file-path>',
        type=str,
        help='YAML file with the zookeeper credentials (auth_data and/or'
        ' sasl_options) used to connect to the cluster. Overrides the'
        ' zookeeper_security of the cluster configuration.',
    )
    parser.add_argument(
        '--logconf',
        type=str,
        help='Path to logging configuration file. Default: log to console.',
    )
    parser.add_argument(
        '--apply',
        action='store_true',
        help='Proposed-plan will be executed on confirmation.',
    )
    parser.add_argument(
        '--no-confirm',
        action='store_true',
        help='Proposed-plan will be executed without confirmation.'
             ' --apply flag also required.',
    )
    parser.add_argument(
        '--write-to-file',
        dest='proposed_plan_file',
        metavar='<reassignment-plan-file-path>',
        type=str,
        help='Write the partition reassignment plan '
             'to a json file.',
    )
    parser.add_argument(
        '--strategy',
        type=str,
        help='Module containing an implementation of ReassignmentStrategy. '
        'The module should be specified as path_to_include_to_py_path:module. '
        'Ex: "/module/path:module.strategy". '
        'Default: round-robin across racks.',
    )
    parser.add_argument(
        '--strategy-args',
        type=str,
        action='append',
        default=[],
        help='Argument list that is passed to the chosen ReassignmentStrategy. '
        'Ex: --strategy-args "--n 10" will pass ["--n", "10"] to the '
        'ReassignmentStrategy\'s parse_args method.'
    )

    subparsers = parser.add_subparsers(dest='subcommand')
    subparsers.required = True
    SetReplicationFactorCmd().add_subparser(subparsers)
    DescribeRacksCmd().add_subparser(subparsers)

    args = parser.parse_args(argv)
    if not args.zookeeper and not args.cluster_type:
        parser.error('one of --cluster-type or --zookeeper is required')
    return args


def exception_logger(exc_type, exc_value, exc_traceback):
    """Log unhandled exceptions"""
    if not issubclass(exc_type, KeyboardInterrupt):  # do not log Ctrl-C
        _log.critical(
            "Uncaught exception:",
            exc_info=(exc_type, exc_value, exc_traceback)
        )
    sys.__excepthook__(exc_type, exc_value, exc_traceback)


def configure_logging(log_conf=None, log_unhandled_exceptions=True):
    if log_conf:
        try:
            fileConfig(log_conf, disable_existing_loggers=False)
        except (configparser.Error, KeyError, OSError, RuntimeError):
            logging.basicConfig(level=logging.INFO)
            _log.error('Failed to load %s file.', log_conf)
    else:
        logging.basicConfig(level=logging.INFO)
    if log_unhandled_exceptions:
        sys.excepthook = exception_logger


def get_cluster_config(args):
    if args.zookeeper:
        cluster_config = config.adhoc_cluster_config(args.zookeeper, args.cluster_name)
    else:
        cluster_config = config.get_cluster_config(
            args.cluster_type,
            args.cluster_name,
            args.discovery_base_path,
        )
    if args.command_config:
        cluster_config = config.apply_command_config(cluster_config, args.command_config)
    return cluster_config


def get_strategy_class(args):
    if not args.strategy:
        return RoundRobinAcrossRacksStrategy
    return load_strategy_class(args.strategy)


def run(argv=None):
    args = parse_args(argv)

    configure_logging(args.logconf)

    try:
        cluster_config = get_cluster_config(args)
        strategy_class = get_strategy_class(args)
    except ConfigurationError as e:
        _log.error("ConfigurationError: %s", e)
        sys.exit(1)

    args.command(cluster_config, strategy_class, args)
