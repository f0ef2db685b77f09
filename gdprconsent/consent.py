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

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum
from functools import cached_property
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Optional, Union

from typing_extensions import assert_never

from gdprconsent.constants import NUM_ENTRIES_SIZE, PURPOSES_SIZE, VENDOR_ID_SIZE
from gdprconsent.encoding import PaddingMode, encode_base64
from gdprconsent.exception import VendorConsentCreateError

if TYPE_CHECKING:
    from gdprconsent.fields import ConsentFields


class VendorEncodingType(IntEnum):
    BITFIELD = 0
    RANGE = 1


def is_vendor_id(value: Any) -> bool:
    # bool is an int subclass but never a vendor id
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(slots=True, frozen=True)
class RangeEntry:
    """A single vendor id (min == max) or an inclusive range of vendor ids."""
    min_vendor_id: int
    max_vendor_id: int

    def __post_init__(self) -> None:
        if not is_vendor_id(self.min_vendor_id) or not is_vendor_id(self.max_vendor_id):
            raise VendorConsentCreateError(
                f'range entry ids must be integers, got {self.min_vendor_id!r} and {self.max_vendor_id!r}'
            )
        if self.min_vendor_id > self.max_vendor_id:
            raise VendorConsentCreateError(
                f'range entry min {self.min_vendor_id} is greater than max {self.max_vendor_id}'
            )

    @classmethod
    def single(cls, vendor_id: int) -> RangeEntry:
        return cls(vendor_id, vendor_id)

    @property
    def is_range(self) -> bool:
        return self.max_vendor_id > self.min_vendor_id

    @property
    def bit_size(self) -> int:
        """Encoded size: the is-range flag followed by one or two vendor ids."""
        return 1 + (2 * VENDOR_ID_SIZE if self.is_range else VENDOR_ID_SIZE)

    def contains(self, vendor_id: int) -> bool:
        return self.min_vendor_id <= vendor_id <= self.max_vendor_id


@dataclass(slots=True, frozen=True)
class BitmapTail:
    """Explicit consent bit for every vendor id from 1 to max_vendor_id."""
    encoding_type: ClassVar[VendorEncodingType] = VendorEncodingType.BITFIELD

    allowed_vendor_ids: frozenset[int]

    def bit_size(self, max_vendor_id: int) -> int:
        return max_vendor_id


@dataclass(slots=True, frozen=True)
class RangeTail:
    """Exception list to `default_consent`: listed vendors get the opposite of the default."""
    encoding_type: ClassVar[VendorEncodingType] = VendorEncodingType.RANGE

    default_consent: bool
    entries: tuple[RangeEntry, ...]

    def bit_size(self, max_vendor_id: int) -> int:
        return 1 + NUM_ENTRIES_SIZE + sum(entry.bit_size for entry in self.entries)

    def contains(self, vendor_id: int) -> bool:
        return any(entry.contains(vendor_id) for entry in self.entries)


VendorConsentTail = Union[BitmapTail, RangeTail]


@dataclass(frozen=True, kw_only=True, eq=False, repr=False)
class VendorConsent:
    """Decoded v1 consent record.

    Instances are immutable and always consistent with `raw_bytes`. Do not call the constructor directly, use
    `VendorConsent.from_base64_string()`, `VendorConsent.from_bytes()` or `VendorConsentBuilder`.
    """
    version: int
    created: datetime
    last_updated: datetime
    cmp_id: int
    cmp_version: int
    consent_screen: int
    consent_language: str
    vendor_list_version: int
    max_vendor_id: int
    purposes: tuple[bool, ...]
    vendor_consents: VendorConsentTail
    raw_bytes: bytes

    @classmethod
    def from_base64_string(cls, consent_string: Optional[str]) -> VendorConsent:
        """Parse a url-safe base64 consent string, padded or not."""
        from gdprconsent.parser import parse_consent_string
        return parse_consent_string(consent_string)

    @classmethod
    def from_bytes(cls, data: bytes) -> VendorConsent:
        from gdprconsent.parser import parse_vendor_consent
        return parse_vendor_consent(data)

    @classmethod
    def from_fields(cls, fields: ConsentFields) -> VendorConsent:
        """Build a record from already validated fields, serializing it right away."""
        from gdprconsent.serializer import serialize_vendor_consent
        return serialize_vendor_consent(fields)

    @property
    def vendor_encoding_type(self) -> VendorEncodingType:
        return self.vendor_consents.encoding_type

    @property
    def default_consent(self) -> Optional[bool]:
        """Consent applied to vendors missing from the range entries, None for bitmap encoded records."""
        if isinstance(self.vendor_consents, RangeTail):
            return self.vendor_consents.default_consent
        return None

    @property
    def range_entries(self) -> tuple[RangeEntry, ...]:
        if isinstance(self.vendor_consents, RangeTail):
            return self.vendor_consents.entries
        return ()

    @cached_property
    def allowed_purposes(self) -> tuple[int, ...]:
        """Ids of every allowed purpose, the lowest purpose id is 1."""
        return tuple(purpose_id for purpose_id in range(1, PURPOSES_SIZE + 1) if self.is_purpose_allowed(purpose_id))

    def is_purpose_allowed(self, purpose_id: int) -> bool:
        if not 1 <= purpose_id <= len(self.purposes):
            return False
        return self.purposes[purpose_id - 1]

    def are_purposes_allowed(self, purpose_ids: Iterable[int]) -> bool:
        return all(self.is_purpose_allowed(purpose_id) for purpose_id in purpose_ids)

    def is_vendor_allowed(self, vendor_id: int) -> bool:
        """Consent status of a vendor, the lowest vendor id is 1.

        Together with `is_purpose_allowed` this fully describes the consent for a given action by a given vendor.
        """
        tail = self.vendor_consents
        match tail:
            case BitmapTail():
                if not 1 <= vendor_id <= self.max_vendor_id:
                    return False
                return vendor_id in tail.allowed_vendor_ids
            case RangeTail():
                return tail.contains(vendor_id) != tail.default_consent
            case _:
                assert_never(tail)

    def are_vendors_allowed(self, vendor_ids: Iterable[int]) -> bool:
        return all(self.is_vendor_allowed(vendor_id) for vendor_id in vendor_ids)

    def to_base64_string(self, padding: Optional[PaddingMode] = None) -> str:
        """Serialized record as url-safe base64, padding defaults to the BASE64_PADDING setting."""
        if padding is None:
            from gdprconsent.conf import get_global_settings
            padding = get_global_settings().BASE64_PADDING
        return encode_base64(self.raw_bytes, padding)

    def binary_string(self) -> str:
        from gdprconsent.bits import Bits
        return Bits(self.raw_bytes).binary_string()

    def to_json_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            'version': self.version,
            'created': self.created.isoformat(),
            'last_updated': self.last_updated.isoformat(),
            'cmp_id': self.cmp_id,
            'cmp_version': self.cmp_version,
            'consent_screen': self.consent_screen,
            'consent_language': self.consent_language,
            'vendor_list_version': self.vendor_list_version,
            'allowed_purposes': list(self.allowed_purposes),
            'max_vendor_id': self.max_vendor_id,
            'vendor_encoding_type': self.vendor_encoding_type.name.lower(),
        }
        tail = self.vendor_consents
        match tail:
            case BitmapTail():
                data['allowed_vendor_ids'] = sorted(tail.allowed_vendor_ids)
            case RangeTail():
                data['default_consent'] = tail.default_consent
                data['range_entries'] = [[entry.min_vendor_id, entry.max_vendor_id] for entry in tail.entries]
            case _:
                assert_never(tail)
        return data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VendorConsent):
            return NotImplemented
        return self.raw_bytes == other.raw_bytes

    def __hash__(self) -> int:
        return hash(self.raw_bytes)

    def __repr__(self) -> str:
        return (
            f'VendorConsent(version={self.version}, created={self.created.isoformat()}, '
            f'last_updated={self.last_updated.isoformat()}, cmp_id={self.cmp_id}, cmp_version={self.cmp_version}, '
            f'consent_screen={self.consent_screen}, consent_language={self.consent_language}, '
            f'vendor_list_version={self.vendor_list_version}, allowed_purposes={list(self.allowed_purposes)}, '
            f'max_vendor_id={self.max_vendor_id}, vendor_encoding_type={self.vendor_encoding_type.name})'
        )
