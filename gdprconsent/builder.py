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
from typing import Iterable, Optional

from pydantic import ValidationError

from gdprconsent.consent import BitmapTail, RangeEntry, RangeTail, VendorConsent, VendorConsentTail, VendorEncodingType
from gdprconsent.exception import VendorConsentCreateError
from gdprconsent.fields import ConsentFields
from gdprconsent.utils.log import get_logger

logger = get_logger(__name__)


class VendorConsentBuilder:
    """VendorConsentBuilder builds a consent record from individual fields.

    Example:

        builder = VendorConsentBuilder()
        builder.set_created(now).set_last_updated(now).set_consent_language('EN')
        builder.set_max_vendor_id(5).set_allowed_vendor_ids([2, 4])
        consent = builder.build()

    The vendor encoding is RANGE when range entries were given and BITFIELD otherwise, unless it is set
    explicitly with `set_vendor_encoding_type()`.
    """
    def __init__(self) -> None:
        self.log = logger.new()
        self.consent: Optional[VendorConsent] = None

        self._version: int = 1
        self._created: Optional[datetime] = None
        self._last_updated: Optional[datetime] = None
        self._cmp_id: int = 0
        self._cmp_version: int = 0
        self._consent_screen: int = 0
        self._consent_language: Optional[str] = None
        self._vendor_list_version: int = 0
        self._max_vendor_id: int = 0
        self._vendor_encoding_type: Optional[VendorEncodingType] = None
        self._allowed_purposes: set[int] = set()
        self._allowed_vendor_ids: set[int] = set()
        self._range_entries: Optional[list[RangeEntry]] = None
        self._default_consent: bool = False
        self._num_entries: Optional[int] = None

    def build(self) -> VendorConsent:
        if self.consent is not None:
            raise ValueError('cannot call build twice')

        try:
            fields = ConsentFields(
                version=self._version,
                created=self._created,
                last_updated=self._last_updated,
                cmp_id=self._cmp_id,
                cmp_version=self._cmp_version,
                consent_screen=self._consent_screen,
                consent_language=self._consent_language,
                vendor_list_version=self._vendor_list_version,
                max_vendor_id=self._max_vendor_id,
                allowed_purposes=frozenset(self._allowed_purposes),
                vendor_consents=self._get_vendor_consents(),
                num_entries=self._num_entries,
            )
        except ValidationError as e:
            self.log.debug('invalid consent fields', errors=e.errors(include_url=False))
            raise VendorConsentCreateError(str(e)) from e

        self.consent = VendorConsent.from_fields(fields)
        return self.consent

    def check_if_can_modify(self) -> None:
        if self.consent is not None:
            raise ValueError('cannot modify after build() is called')

    def _get_vendor_encoding_type(self) -> VendorEncodingType:
        if self._vendor_encoding_type is not None:
            return self._vendor_encoding_type
        if self._range_entries is not None:
            return VendorEncodingType.RANGE
        return VendorEncodingType.BITFIELD

    def _get_vendor_consents(self) -> VendorConsentTail:
        encoding_type = self._get_vendor_encoding_type()
        match encoding_type:
            case VendorEncodingType.BITFIELD:
                if self._range_entries:
                    raise VendorConsentCreateError('range entries given for a bitfield encoded consent')
                return BitmapTail(frozenset(self._allowed_vendor_ids))
            case VendorEncodingType.RANGE:
                return RangeTail(self._default_consent, tuple(self._range_entries or ()))
            case _:
                raise VendorConsentCreateError(f'unknown vendor encoding type: {encoding_type}')

    def set_version(self, version: int) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._version = version
        return self

    def set_created(self, created: datetime) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._created = created
        return self

    def set_last_updated(self, last_updated: datetime) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._last_updated = last_updated
        return self

    def set_cmp_id(self, cmp_id: int) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._cmp_id = cmp_id
        return self

    def set_cmp_version(self, cmp_version: int) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._cmp_version = cmp_version
        return self

    def set_consent_screen(self, consent_screen: int) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._consent_screen = consent_screen
        return self

    def set_consent_language(self, consent_language: str) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._consent_language = consent_language
        return self

    def set_vendor_list_version(self, vendor_list_version: int) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._vendor_list_version = vendor_list_version
        return self

    def set_max_vendor_id(self, max_vendor_id: int) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._max_vendor_id = max_vendor_id
        return self

    def set_vendor_encoding_type(self, vendor_encoding_type: VendorEncodingType) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._vendor_encoding_type = VendorEncodingType(vendor_encoding_type)
        return self

    def set_allowed_purposes(self, purpose_ids: Iterable[int]) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._allowed_purposes = set(purpose_ids)
        return self

    def set_allowed_vendor_ids(self, vendor_ids: Iterable[int]) -> 'VendorConsentBuilder':
        """Vendors allowed by a bitfield encoded consent."""
        self.check_if_can_modify()
        self._allowed_vendor_ids = set(vendor_ids)
        return self

    def set_range_entries(self, range_entries: Iterable[RangeEntry]) -> 'VendorConsentBuilder':
        """Vendors that get the opposite of the default consent in a range encoded consent."""
        self.check_if_can_modify()
        self._range_entries = list(range_entries)
        return self

    def set_default_consent(self, default_consent: bool) -> 'VendorConsentBuilder':
        self.check_if_can_modify()
        self._default_consent = default_consent
        return self

    def set_num_entries(self, num_entries: int) -> 'VendorConsentBuilder':
        """Declared number of range entries, the build fails if it differs from the entries given."""
        self.check_if_can_modify()
        self._num_entries = num_entries
        return self
