#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from gdprconsent.conf import DEFAULT_SETTINGS_FILEPATH, UNITTESTS_SETTINGS_FILEPATH, GdprSettings
from gdprconsent.conf.get_settings import get_global_settings, get_settings_source, load_yaml_settings
from gdprconsent.encoding import PaddingMode


def _get_absolute_filepath(filepath: str) -> str:
    parent_dir = Path(__file__).parent

    return str(parent_dir / filepath)


def test_default_settings():
    settings = load_yaml_settings(DEFAULT_SETTINGS_FILEPATH)

    assert settings == GdprSettings()
    assert settings.BASE64_PADDING is PaddingMode.UNPADDED
    assert settings.GDPR_SWITCH_DATE == datetime(2018, 5, 24, 22, tzinfo=timezone.utc)
    assert settings.MAX_CONSENT_STRING_LENGTH == 16384


def test_unittests_settings():
    settings = load_yaml_settings(UNITTESTS_SETTINGS_FILEPATH)

    assert settings == GdprSettings(MAX_CONSENT_STRING_LENGTH=4096)


def test_global_settings_use_unittests_file():
    settings = get_global_settings()

    assert get_settings_source() == UNITTESTS_SETTINGS_FILEPATH
    assert settings.MAX_CONSENT_STRING_LENGTH == 4096
    assert get_global_settings() is settings


def test_global_settings_cannot_change_source():
    get_global_settings()

    with patch.dict('os.environ', {'GDPR_CONFIG_YAML': DEFAULT_SETTINGS_FILEPATH}):
        with pytest.raises(Exception) as e:
            get_global_settings()

    assert str(e.value) == 'loading config twice with a different file'


def test_valid_settings_from_yaml():
    settings = load_yaml_settings(_get_absolute_filepath('fixtures/valid_settings_fixture.yml'))

    assert settings == GdprSettings(BASE64_PADDING=PaddingMode.PADDED, MAX_CONSENT_STRING_LENGTH=2048)


@pytest.mark.parametrize(
    ['filepath', 'error'],
    [
        ('fixtures/invalid_padding_settings_fixture.yml', "Input should be 'padded' or 'unpadded'"),
        ('fixtures/invalid_switch_date_settings_fixture.yml', 'Value error, GDPR_SWITCH_DATE must have a timezone'),
        ('fixtures/invalid_max_length_settings_fixture.yml',
         'Value error, MAX_CONSENT_STRING_LENGTH must be positive'),
        ('fixtures/unknown_key_settings_fixture.yml', 'Extra inputs are not permitted'),
    ]
)
def test_invalid_settings_from_yaml(filepath, error):
    with pytest.raises(ValidationError) as e:
        load_yaml_settings(_get_absolute_filepath(filepath))

    assert error in str(e.value)


def test_settings_are_frozen():
    settings = GdprSettings()

    with pytest.raises(ValidationError):
        settings.MAX_CONSENT_STRING_LENGTH = 1  # type: ignore[misc]
