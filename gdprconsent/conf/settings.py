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

from datetime import datetime

from pydantic import field_validator

from gdprconsent.encoding import PaddingMode
from gdprconsent.utils import pydantic


class GdprSettings(pydantic.BaseModel):
    # Padding used when a consent record is serialized to base64, decoding always accepts both
    BASE64_PADDING: PaddingMode = PaddingMode.UNPADDED

    # Instant at which GDPR enforcement begins, before it every vendor is allowed by GdprSwitch
    # Hamburg (Germany) Friday, 25 May 2018, 00:00:00 CEST UTC+2 hours
    GDPR_SWITCH_DATE: datetime = datetime.fromisoformat('2018-05-25T00:00:00+02:00')

    # Consent strings longer than this are rejected before base64 decoding, a bitmap for vendor id 65535 needs
    # a bit under 11k characters
    MAX_CONSENT_STRING_LENGTH: int = 16_384

    @field_validator('GDPR_SWITCH_DATE')
    @classmethod
    def _validate_switch_date(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError('GDPR_SWITCH_DATE must have a timezone')
        return value

    @field_validator('MAX_CONSENT_STRING_LENGTH')
    @classmethod
    def _validate_max_length(cls, value: int) -> int:
        if value <= 0:
            raise ValueError('MAX_CONSENT_STRING_LENGTH must be positive')
        return value
