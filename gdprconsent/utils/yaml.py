# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Mapping files: consent fields files (YAML or JSON) and settings files that may extend each other."""

from pathlib import Path
from typing import Any, Optional, TypeVar, Union

import yaml
from pydantic import BaseModel

from gdprconsent.utils.dict import deep_merge

EXTENDS_KEY = 'extends'

T = TypeVar('T', bound=BaseModel)


def read_mapping(*, filepath: Union[Path, str]) -> dict[str, Any]:
    """Read a YAML or JSON file holding a mapping. An empty file reads as an empty dict.

    JSON is read by the YAML loader, so `encode` accepts the output of `decode` as is.
    """
    path = Path(filepath)
    if not path.is_file():
        raise ValueError(f"'{filepath}' is not a file")

    try:
        contents = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"'{filepath}' is not valid YAML or JSON: {e}") from e

    if contents is None:
        return {}
    if not isinstance(contents, dict):
        raise ValueError(f"'{filepath}' cannot be parsed as a dictionary")
    return contents


def _extended_path(path: Path, extends: str, custom_root: Optional[Path]) -> Path:
    candidate = path.parent / extends
    if not candidate.is_file() and custom_root is not None:
        return custom_root / extends
    return candidate


def read_extended_mapping(*, filepath: Union[Path, str], custom_root: Optional[Path] = None) -> dict[str, Any]:
    """
    Read a mapping file following its chain of `extends` keys.

    `extends` names another file, either absolute or relative to the extending file. When it is not found there it
    is looked up under `custom_root`, which is how user settings extend the packaged `default.yml`. Keys of the
    extending file win, nested mappings are merged. The `extends` key itself is dropped from the result.
    """
    chain: list[dict[str, Any]] = []
    visited: set[Path] = set()
    path = Path(filepath)

    while True:
        resolved = path.resolve()
        if resolved in visited:
            raise ValueError('Cannot parse yaml with recursive extensions.')
        visited.add(resolved)

        contents = read_mapping(filepath=path)
        extends = contents.pop(EXTENDS_KEY, None)
        chain.append(contents)
        if not extends:
            break
        path = _extended_path(path, str(extends), custom_root)

    merged: dict[str, Any] = {}
    for contents in reversed(chain):
        merged = deep_merge(merged, contents)
    return merged


def model_from_extended_yaml(model: type[T], *, filepath: Union[Path, str], custom_root: Optional[Path] = None) -> T:
    return model.model_validate(read_extended_mapping(filepath=filepath, custom_root=custom_root))
