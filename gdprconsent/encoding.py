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

r"""
This module implements the transport encoding of consent strings: url and filename safe base64.

Output padding is configurable, decoding accepts both padded and unpadded input:

>>> encode_base64(b'\x04\x43\x40\x01', PaddingMode.UNPADDED)
'BENAAQ'
>>> encode_base64(b'\x04\x43\x40\x01', PaddingMode.PADDED)
'BENAAQ=='
>>> decode_base64('BENAAQ') == decode_base64('BENAAQ==') == b'\x04\x43\x40\x01'
True
"""

import base64
import binascii
import re
from enum import Enum

from gdprconsent.exception import ConsentStringDecodeError

_URLSAFE_BASE64_RE = re.compile(r'[A-Za-z0-9_-]*={0,2}')


class PaddingMode(str, Enum):
    PADDED = 'padded'
    UNPADDED = 'unpadded'


def encode_base64(data: bytes, padding: PaddingMode) -> str:
    encoded = base64.urlsafe_b64encode(data).decode('ascii')
    match padding:
        case PaddingMode.PADDED:
            return encoded
        case PaddingMode.UNPADDED:
            return encoded.rstrip('=')
    raise ValueError(f'unknown padding mode: {padding}')


def decode_base64(consent_string: str) -> bytes:
    """ Decode a url-safe base64 string, with or without padding.

    Characters outside of the url-safe alphabet (including '+' and '/') are rejected.
    """
    if not _URLSAFE_BASE64_RE.fullmatch(consent_string):
        raise ConsentStringDecodeError('consent string has characters outside of the url-safe base64 alphabet')
    stripped = consent_string.rstrip('=')
    if len(stripped) % 4 == 1:
        raise ConsentStringDecodeError('consent string has an invalid base64 length')
    padded = stripped + '=' * (-len(stripped) % 4)
    if consent_string != stripped and consent_string != padded:
        raise ConsentStringDecodeError('consent string has invalid base64 padding')
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise ConsentStringDecodeError('consent string is not valid base64') from e
