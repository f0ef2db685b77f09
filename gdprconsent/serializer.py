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
    HEADER_BIT_SIZE,
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
from gdprconsent.consent import BitmapTail, RangeTail, VendorConsent
from gdprconsent.exception import BitsError, VendorConsentCreateError
from gdprconsent.fields import ConsentFields
from gdprconsent.utils.log import get_logger

logger = get_logger(__name__)


def serialize_vendor_consent(fields: ConsentFields) -> VendorConsent:
    """ Write validated fields into a new zeroed buffer and return the resulting record.

    Fields are written in the same order and at the same offsets the parser reads them. Timestamps of the returned
    record are the decisecond-truncated values that were actually written.
    """
    tail = fields.vendor_consents
    bits = Bits.allocate(HEADER_BIT_SIZE + tail.bit_size(fields.max_vendor_id))

    try:
        bits.set_int(VERSION_BIT_OFFSET, VERSION_BIT_SIZE, fields.version)
        bits.set_datetime(CREATED_BIT_OFFSET, CREATED_BIT_SIZE, fields.created)
        bits.set_datetime(UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE, fields.last_updated)
        bits.set_int(CMP_ID_OFFSET, CMP_ID_SIZE, fields.cmp_id)
        bits.set_int(CMP_VERSION_OFFSET, CMP_VERSION_SIZE, fields.cmp_version)
        bits.set_int(CONSENT_SCREEN_OFFSET, CONSENT_SCREEN_SIZE, fields.consent_screen)
        bits.set_letters(CONSENT_LANGUAGE_OFFSET, CONSENT_LANGUAGE_SIZE, fields.consent_language)
        bits.set_int(VENDOR_LIST_VERSION_OFFSET, VENDOR_LIST_VERSION_SIZE, fields.vendor_list_version)
        for i in range(PURPOSES_SIZE):
            bits.put_bit(PURPOSES_OFFSET + i, (i + 1) in fields.allowed_purposes)
        bits.set_int(MAX_VENDOR_ID_OFFSET, MAX_VENDOR_ID_SIZE, fields.max_vendor_id)
        bits.set_int(ENCODING_TYPE_OFFSET, ENCODING_TYPE_SIZE, tail.encoding_type)

        match tail:
            case RangeTail():
                _write_range_tail(bits, tail)
            case BitmapTail():
                _write_bitmap_tail(bits, tail)

        created = bits.get_datetime(CREATED_BIT_OFFSET, CREATED_BIT_SIZE)
        last_updated = bits.get_datetime(UPDATED_BIT_OFFSET, UPDATED_BIT_SIZE)
    except BitsError as e:
        raise VendorConsentCreateError(str(e)) from e

    logger.debug('consent record serialized', n_bytes=bits.length() // 8, encoding_type=tail.encoding_type.name)

    return VendorConsent(
        version=fields.version,
        created=created,
        last_updated=last_updated,
        cmp_id=fields.cmp_id,
        cmp_version=fields.cmp_version,
        consent_screen=fields.consent_screen,
        consent_language=fields.consent_language,
        vendor_list_version=fields.vendor_list_version,
        max_vendor_id=fields.max_vendor_id,
        purposes=tuple(purpose_id in fields.allowed_purposes for purpose_id in range(1, PURPOSES_SIZE + 1)),
        vendor_consents=tail,
        raw_bytes=bits.to_bytes(),
    )


def _write_range_tail(bits: Bits, tail: RangeTail) -> None:
    bits.put_bit(DEFAULT_CONSENT_OFFSET, tail.default_consent)
    bits.set_int(NUM_ENTRIES_OFFSET, NUM_ENTRIES_SIZE, len(tail.entries))

    offset = RANGE_ENTRY_OFFSET
    for entry in tail.entries:
        bits.put_bit(offset, entry.is_range)
        offset += 1
        bits.set_int(offset, VENDOR_ID_SIZE, entry.min_vendor_id)
        offset += VENDOR_ID_SIZE
        if entry.is_range:
            bits.set_int(offset, VENDOR_ID_SIZE, entry.max_vendor_id)
            offset += VENDOR_ID_SIZE


def _write_bitmap_tail(bits: Bits, tail: BitmapTail) -> None:
    for vendor_id in tail.allowed_vendor_ids:
        bits.set_bit(VENDOR_BITFIELD_OFFSET + vendor_id - 1)
