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

from datetime import timedelta
from typing import Annotated, Any, Optional, Union

from pydantic import AwareDatetime, Field, InstanceOf, field_validator, model_validator
from typing_extensions import Self

from gdprconsent.bits import EPOCH, max_value_of_size
from gdprconsent.constants import (
    CMP_ID_SIZE,
    CMP_VERSION_SIZE,
    CONSENT_SCREEN_SIZE,
    CREATED_BIT_SIZE,
    MAX_VENDOR_ID_SIZE,
    MILLISECONDS_PER_DECISECOND,
    NUM_ENTRIES_SIZE,
    PURPOSES_SIZE,
    VENDOR_ID_SIZE,
    VENDOR_LIST_VERSION_SIZE,
    VERSION_BIT_SIZE,
)
from gdprconsent.consent import BitmapTail, RangeEntry, RangeTail, is_vendor_id
from gdprconsent.utils import pydantic


_DECISECOND = timedelta(milliseconds=MILLISECONDS_PER_DECISECOND)


def _uint(size: int) -> Any:
    return Field(ge=0, le=max_value_of_size(size))


class ConsentFields(pydantic.BaseModel):
    """Every field of a consent record, validated against its bit width in a single pass.

    Nothing is written before all fields are valid, see `VendorConsent.from_fields()`.
    """
    version: Annotated[int, _uint(VERSION_BIT_SIZE)] = 0
    created: AwareDatetime
    last_updated: AwareDatetime
    cmp_id: Annotated[int, _uint(CMP_ID_SIZE)] = 0
    cmp_version: Annotated[int, _uint(CMP_VERSION_SIZE)] = 0
    consent_screen: Annotated[int, _uint(CONSENT_SCREEN_SIZE)] = 0
    consent_language: Annotated[str, Field(pattern=r'^[A-Z]{2}$')]
    vendor_list_version: Annotated[int, _uint(VENDOR_LIST_VERSION_SIZE)] = 0
    max_vendor_id: Annotated[int, _uint(MAX_VENDOR_ID_SIZE)] = 0
    allowed_purposes: frozenset[Annotated[int, Field(ge=1, le=PURPOSES_SIZE)]] = frozenset()
    vendor_consents: Union[InstanceOf[BitmapTail], InstanceOf[RangeTail]]

    # When given it must match the number of range entries
    num_entries: Optional[int] = None

    @field_validator('created', 'last_updated')
    @classmethod
    def _validate_timestamp(cls, value: AwareDatetime) -> AwareDatetime:
        deciseconds = (value - EPOCH) // _DECISECOND
        if not 0 <= deciseconds <= max_value_of_size(CREATED_BIT_SIZE):
            raise ValueError(f'{value.isoformat()} cannot be encoded in {CREATED_BIT_SIZE} bits of deciseconds')
        return value

    @field_validator('vendor_consents')
    @classmethod
    def _validate_vendor_id_types(cls, tail: Union[BitmapTail, RangeTail]) -> Union[BitmapTail, RangeTail]:
        if isinstance(tail, RangeTail):
            invalid = [entry for entry in tail.entries if not isinstance(entry, RangeEntry)]
            if invalid:
                raise ValueError('range entries must be RangeEntry instances, got {!r}'.format(invalid))
            return tail
        invalid = [i for i in tail.allowed_vendor_ids if not is_vendor_id(i)]
        if invalid:
            raise ValueError('vendor ids must be integers, got {}'.format(', '.join(sorted(map(repr, invalid)))))
        return tail

    @model_validator(mode='after')
    def _validate_vendor_consents(self) -> Self:
        tail = self.vendor_consents
        if isinstance(tail, BitmapTail):
            if self.num_entries is not None:
                raise ValueError('num_entries is only valid for range encoding')
            out_of_range = sorted(i for i in tail.allowed_vendor_ids if not 1 <= i <= self.max_vendor_id)
            if out_of_range:
                raise ValueError(f'vendor ids {out_of_range} are outside of [1, {self.max_vendor_id}]')
        else:
            if self.num_entries is not None and self.num_entries != len(tail.entries):
                raise ValueError(f'num_entries is {self.num_entries} but {len(tail.entries)} entries were given')
            if len(tail.entries) > max_value_of_size(NUM_ENTRIES_SIZE):
                raise ValueError(f'too many range entries: {len(tail.entries)}')
            max_id = max_value_of_size(VENDOR_ID_SIZE)
            for entry in tail.entries:
                if entry.min_vendor_id < 0 or entry.max_vendor_id > max_id:
                    raise ValueError(f'range entry {entry} is outside of [0, {max_id}]')
        return self
