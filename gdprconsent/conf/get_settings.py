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

import os
from pathlib import Path
from typing import NamedTuple, Optional

from gdprconsent.conf.settings import GdprSettings
from gdprconsent.utils.log import get_logger
from gdprconsent.utils.yaml import model_from_extended_yaml

logger = get_logger(__name__)

DEFAULT_SETTINGS_FILEPATH = str(Path(__file__).parent / 'default.yml')


class _SettingsMetadata(NamedTuple):
    source: str
    settings: GdprSettings


_settings_singleton: Optional[_SettingsMetadata] = None


def get_global_settings() -> GdprSettings:
    """
    Returns the settings model.

    The settings are loaded from the yaml filepath in the 'GDPR_CONFIG_YAML' env var. If it's not set, the packaged
    default.yml is used. Settings are loaded once and cached for the lifetime of the process.
    """
    settings_yaml_filepath = os.environ.get('GDPR_CONFIG_YAML', DEFAULT_SETTINGS_FILEPATH)
    return _load_settings_singleton(settings_yaml_filepath)


def get_settings_source() -> str:
    """ Returns the path of the YAML file that was loaded.

    XXX: Will raise an assertion error if get_global_settings() wasn't used before.
    """
    assert _settings_singleton is not None, 'get_global_settings() not called before'
    return _settings_singleton.source


def load_yaml_settings(filepath: str) -> GdprSettings:
    """Load and validate settings from a yaml file, `extends` is resolved relative to this package too."""
    return model_from_extended_yaml(GdprSettings, filepath=filepath, custom_root=Path(__file__).parent)


def _load_settings_singleton(source: str) -> GdprSettings:
    global _settings_singleton

    if _settings_singleton is not None:
        if _settings_singleton.source != source:
            raise Exception('loading config twice with a different file')

        return _settings_singleton.settings

    logger.debug('loading settings', source=source)
    _settings_singleton = _SettingsMetadata(source=source, settings=load_yaml_settings(source))

    return _settings_singleton.settings
