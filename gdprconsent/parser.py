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

from typing import Callable, Optional, TypeVar

from gdprconsent.bits import Bits
from gdprconsent.constants import (
    CMP_ID_OFFSET,
    CMP_ID_SIZE,
    CMP_VERSION_OFFSET,
    CMP_VERSION_SIZE,
    CONSENT_LANGUAGE_OFFSET,
    CONSENT_LANGUAGE_SIZE,
    CONSENT_SCREEN_OFFSET,
    CONSENT_SCREEN_SIZE,
    CREATED_BIT_OFFSET,
    CREATED_BIT_SIZE,
    DEFAULT_CONSENT_OFFSET,
    ENCODING_TYPE_OFFSET,
    ENCODING_TYPE_SIZE,
    MAX_VENDOR_ID_OFFSET,
    MAX_VENDOR_ID_SIZE,
    NUM_ENTRIES_OFFSET,
    NUM_ENTRIES_SIZE,
    PURPOSES_OFFSET,
    PURPOSES_SIZE,
    RANGE_ENTRY_OFFSET,
    UPDATED_BIT_OFFSET,
    UPDATED_BIT_SIZE,
    VENDOR_BITFIELD_OFFSET,
    VENDOR_ID_SIZE,
    VENDOR_LIST_VERSION_OFFSET,
    VENDOR_LIST_VERSION_SIZE,
    VERSION_BIT_OFFSET,
    VERSION_BIT_SIZE,
)
from gdprconsent.consent import BitmapTail, RangeEntry, RangeTail, VendorConsent, VendorConsentTail, VendorEncodingType
from gdprconsent.encoding import decode_base64
from gdprconsent.exception import (
    BitsError,
    ConsentStringTooLongError,
    GdprConsentMissingError,
    VendorConsentParseError,
)
from gdprconsent.utils.log import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


def parse_consent_string(consent_string: Optional[str]) -> VendorConsent:
    """ Decode a url-safe base64 consent string into a VendorConsent.

    Missing, oversized or malformed strings raise a ConsentStringError, undecodable fields raise a
    VendorConsentParseError.
    """
    from gdprconsent.conf import get_global_settings

    if not consent_string:
        raise GdprConsentMissingError('consent string is empty or None')

    max_length = get_global_settings().MAX_CONSENT_STRING_LENGTH
    if len(consent_string) > max_length:
        raise ConsentStringTooLongError(f'consent string has {len(consent_string)} characters, max is {max_length}')

    return parse_vendor_consent(decode_base64(consent_string))


def parse_vendor_consent(data: bytes) -> VendorConsent:
    """ Decode the raw bytes of a consent record.

    Every field is read eagerly, so a buffer too short for any declared field (including the vendor bitmap
    implied by max_vendor_id) fails here instead of on a later query.
    """
    if not data:
        raise GdprConsentMissingError('consent data is empty')
    bits = Bits(data)

    version = _read_field('version', lambda: bits.get_int(VERSION_BIT_OFFSET, VERSION_BIT_SIZE))
    created = _read_field('created', lambda: bits.get_datetime(CREATED_BIT_OFFSET, CREATED_BIT_SIZE))
    last_updated = _read_field('last_updated', lambda: bits.get_datetime(UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE))
    cmp_id = _read_field('cmp_id', lambda: bits.get_int(CMP_ID_OFFSET, CMP_ID_SIZE))
    cmp_version = _read_field('cmp_version', lambda: bits.get_int(CMP_VERSION_OFFSET, CMP_VERSION_SIZE))
    consent_screen = _read_field('consent_screen', lambda: bits.get_int(CONSENT_SCREEN_OFFSET, CONSENT_SCREEN_SIZE))
    consent_language = _read_field(
        'consent_language',
        lambda: bits.get_letters(CONSENT_LANGUAGE_OFFSET, CONSENT_LANGUAGE_SIZE),
    )
    vendor_list_version = _read_field(
        'vendor_list_version',
        lambda: bits.get_int(VENDOR_LIST_VERSION_OFFSET, VENDOR_LIST_VERSION_SIZE),
    )
    purposes = _read_field(
        'purposes',
        lambda: tuple(bits.get_bit(PURPOSES_OFFSET + i) for i in range(PURPOSES_SIZE)),
    )
    max_vendor_id = _read_field('max_vendor_id', lambda: bits.get_int(MAX_VENDOR_ID_OFFSET, MAX_VENDOR_ID_SIZE))
    encoding_type = _read_field(
        'vendor_encoding_type',
        lambda: VendorEncodingType(bits.get_int(ENCODING_TYPE_OFFSET, ENCODING_TYPE_SIZE)),
    )

    vendor_consents: VendorConsentTail
    match encoding_type:
        case VendorEncodingType.RANGE:
            vendor_consents = _parse_range_tail(bits)
        case VendorEncodingType.BITFIELD:
            vendor_consents = _parse_bitmap_tail(bits, max_vendor_id)

    return VendorConsent(
        version=version,
        created=created,
        last_updated=last_updated,
        cmp_id=cmp_id,
        cmp_version=cmp_version,
        consent_screen=consent_screen,
        consent_language=consent_language,
        vendor_list_version=vendor_list_version,
        max_vendor_id=max_vendor_id,
        purposes=purposes,
        vendor_consents=vendor_consents,
        raw_bytes=bits.to_bytes(),
    )


def _read_field(field: str, read: Callable[[], T]) -> T:
    try:
        return read()
    except BitsError as e:
        logger.debug('consent field could not be decoded', field=field, error=str(e))
        raise VendorConsentParseError(str(e), field=field) from e


def _parse_range_tail(bits: Bits) -> RangeTail:
    default_consent = _read_field('default_consent', lambda: bits.get_bit(DEFAULT_CONSENT_OFFSET))
    num_entries = _read_field('num_entries', lambda: bits.get_int(NUM_ENTRIES_OFFSET, NUM_ENTRIES_SIZE))

    entries: list[RangeEntry] = []
    offset = RANGE_ENTRY_OFFSET
    for i in range(num_entries):
        field = f'range_entries[{i}]'
        is_range = _read_field(field, lambda: bits.get_bit(offset))
        offset += 1
        start_vendor_id = _read_field(field, lambda: bits.get_int(offset, VENDOR_ID_SIZE))
        offset += VENDOR_ID_SIZE
        if is_range:
            end_vendor_id = _read_field(field, lambda: bits.get_int(offset, VENDOR_ID_SIZE))
            offset += VENDOR_ID_SIZE
            if start_vendor_id > end_vendor_id:
                raise VendorConsentParseError(
                    f'range start {start_vendor_id} is greater than range end {end_vendor_id}',
                    field=field,
                )
            entries.append(RangeEntry(start_vendor_id, end_vendor_id))
        else:
            entries.append(RangeEntry.single(start_vendor_id))

    return RangeTail(default_consent=default_consent, entries=tuple(entries))


def _parse_bitmap_tail(bits: Bits, max_vendor_id: int) -> BitmapTail:
    available = bits.length() - VENDOR_BITFIELD_OFFSET
    if max_vendor_id > available:
        logger.debug('vendor bitmap is truncated', max_vendor_id=max_vendor_id, available=available)
        raise VendorConsentParseError(
            f'max_vendor_id {max_vendor_id} needs {max_vendor_id} bits but only {max(available, 0)} are available',
            field='vendor_bitmap',
        )
    allowed_vendor_ids = frozenset(
        vendor_id
        for vendor_id in range(1, max_vendor_id + 1)
        if bits.get_bit(VENDOR_BITFIELD_OFFSET + vendor_id - 1)
    )
    return BitmapTail(allowed_vendor_ids=allowed_vendor_ids)
