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
"""Load a ReassignmentStrategy implementation given on the command line."""
from __future__ import annotations

import importlib
import inspect
import logging
import os
import sys
from types import ModuleType
from typing import Iterable

from .reassignment_strategy import ReassignmentStrategy
from kafka_alter_rf.util.error import ConfigurationError

_log = logging.getLogger(__name__)


def import_strategy_module(module_path: str) -> ModuleType:
    """Import a module given as "dotted.name" or "/extra/py/path:dotted.name".

    :raises ConfigurationError: the extra path is not a directory or the
        module cannot be imported
    """
    if ':' in module_path:
        path, module_name = module_path.rsplit(':', 1)
        if not os.path.isdir(path):
            raise ConfigurationError(f"{path} is not a valid directory")
        if path not in sys.path:
            sys.path.append(path)
    else:
        module_name = module_path
    try:
        return importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import strategy module {module_name}: {e}")


def most_derived_strategy(classes: Iterable[type]) -> type | None:
    """Pick the strategy class no other candidate derives from.

    Example:
        class A(ReassignmentStrategy): ...
        class B(A): ...

        most_derived_strategy([ReassignmentStrategy, A, B]) = B
    """
    candidates = {
        cls for cls in classes
        if cls is not ReassignmentStrategy and issubclass(cls, ReassignmentStrategy)
    }
    leaves = sorted(
        (
            cls for cls in candidates
            if not any(other is not cls and issubclass(other, cls) for other in candidates)
        ),
        key=lambda cls: cls.__name__,
    )
    if len(leaves) > 1:
        _log.warning(
            "Several strategies found: %s. Using %s.",
            [cls.__name__ for cls in leaves],
            leaves[0].__name__,
        )
    return leaves[0] if leaves else None


def load_strategy_class(module_path: str) -> type:
    """Return the ReassignmentStrategy subclass defined or imported in the
    module at module_path.

    :raises ConfigurationError: no usable strategy in the module
    """
    module = import_strategy_module(module_path)
    strategy_class = most_derived_strategy(
        cls for _, cls in inspect.getmembers(module, inspect.isclass)
    )
    if strategy_class is None:
        raise ConfigurationError(
            f"No ReassignmentStrategy implementation found in {module_path}"
        )
    _log.debug("Using strategy %s from %s", strategy_class.__name__, module_path)
    return strategy_class
