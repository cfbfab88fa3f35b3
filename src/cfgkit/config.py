# Copyright © 2022 CISPA Helmholtz Center for Information Security.
#
# This file is part of cfgkit.
#
# cfgkit is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# cfgkit is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with cfgkit.  If not, see <http://www.gnu.org/licenses/>.

import logging
import os
import pathlib
import sys
from functools import lru_cache
from typing import Dict, List, Optional

import toml
from returns.maybe import Maybe, Some

from cfgkit.helpers import get_cfgkit_resource_file_content

CONFIG_LOGGER = logging.getLogger(__name__)

RC_FILE_NAME = ".cfgkitrc"

LEVEL_MAPPING = {
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


@lru_cache
def read_cfgkit_rc_defaults(
    content: Maybe[str] = Maybe.empty,
) -> Dict[str, Dict[str, str | int | float | bool]]:
    """
    Attempts to read a `.cfgkitrc` configuration from the following sources, in
    the given order:

    1. The `content` parameter
    2. The file `./.cfgkitrc` (in the current working directory)
    3. The file `~/.cfgkitrc` (in the current user's home directory)
    4. The file `resources/.cfgkitrc` (bundled with the cfgkit distribution)

    Returns a configuration dictionary. The keys are operations (e.g.,
    "evaluate") or "default" for a fallback; the values are dictionaries from
    option names to default values. Sources earlier in the list take precedence.

    >>> config = read_cfgkit_rc_defaults(Some('''
    ... [[defaults.evaluate]]
    ... max-depth = 42
    ... '''))
    >>> config["evaluate"]["max-depth"]
    42
    >>> config["default"]["log-level"]
    'WARNING'

    :param content: An optional TOML configuration string (not a path!).
    :return: The configuration dictionary.
    """

    sources: List[str] = []
    match content:
        case Some(text):
            sources.append(text)

    dirs = (os.getcwd(), pathlib.Path.home())
    candidate_locations = [os.path.join(dir, RC_FILE_NAME) for dir in dirs]
    sources.extend(
        [
            pathlib.Path(location).read_text(encoding="utf-8")
            for location in candidate_locations
            if os.path.isfile(location)
        ]
    )

    sources.append(get_cfgkit_resource_file_content(f"resources/{RC_FILE_NAME}"))

    all_defaults = [toml.loads(source).get("defaults", {}) for source in sources]

    result: Dict[str, Dict[str, str | int | float | bool]] = {}

    for defaults in all_defaults:
        # Expecting something like
        #
        # {
        #     "default": [{"log-level": "WARNING"}],
        #     "evaluate": [{"max-depth": 10}],
        # }

        if (
            not isinstance(defaults, dict)
            or any(not isinstance(key, str) for key in defaults)
            or not all(
                isinstance(value, list)
                and len(value) == 1
                and isinstance(value[0], dict)
                and all(isinstance(inner_key, str) for inner_key in value[0])
                and all(
                    isinstance(inner_value, (str, int, float, bool))
                    for inner_value in value[0].values()
                )
                for value in defaults.values()
            )
        ):
            raise RuntimeError(
                f"Unexpected {RC_FILE_NAME} format: defaults should be a "
                + "non-nested array of tables"
            )

        for key, value in defaults.items():
            for inner_key, inner_value in value[0].items():
                result.setdefault(key, {}).setdefault(inner_key, inner_value)

    return result


def get_default(
    operation: str, option: str, content: Maybe[str] = Maybe.empty
) -> Maybe[str | int | float | bool]:
    """
    >>> get_default("evaluate", "log-level").value_or(None)
    'WARNING'
    >>> get_default("evaluate", "no-such-option").value_or(None) is None
    True
    """

    config = read_cfgkit_rc_defaults(content)
    default = config.get("default", {}).get(option, None)
    return Maybe.from_optional(config.get(operation, {}).get(option, default))


def default_max_depth(content: Maybe[str] = Maybe.empty) -> int:
    """
    The depth bound new grammars start with.

    >>> default_max_depth(Some("[[defaults.evaluate]]\\nmax-depth = 15"))
    15
    """

    max_depth = get_default("evaluate", "max-depth", content).value_or(10)
    if isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 1:
        raise RuntimeError(
            f"Unexpected {RC_FILE_NAME} content: max-depth must be a positive "
            + f"integer, found {max_depth!r}"
        )

    return max_depth


def configure_logging(level: Optional[str] = None, stream=sys.stderr) -> None:
    """
    Installs a basic logging configuration with the given level, or with the
    configured `log-level` if :code:`level` is None.
    """

    if level is None:
        level = str(get_default("default", "log-level").value_or("WARNING"))

    if level not in LEVEL_MAPPING:
        raise ValueError(
            f"Unknown log level {level}, expected one of "
            + ", ".join(LEVEL_MAPPING)
        )

    logging.basicConfig(stream=stream, level=LEVEL_MAPPING[level])
    CONFIG_LOGGER.debug("Logging configured with level %s", level)
