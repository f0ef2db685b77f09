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

from typing import Optional


class GdprError(Exception):
    """General error class"""


class ConsentStringError(GdprError):
    """Base class for errors on the consent string itself, before any field is decoded"""


class GdprConsentMissingError(ConsentStringError):
    """Consent string is None or empty"""


class ConsentStringDecodeError(ConsentStringError):
    """Consent string is not valid url-safe base64"""


class ConsentStringTooLongError(ConsentStringError):
    """Consent string is longer than MAX_CONSENT_STRING_LENGTH"""


class VendorConsentError(GdprError):
    """Base class for errors when decoding or encoding a consent record"""


class VendorConsentParseError(VendorConsentError):
    """A field of the consent record could not be decoded.

    The `field` attribute names the offending field, it is `None` when the failure is not tied to a single field.
    """

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message if field is None else f'{field}: {message}')
        self.field = field


class VendorConsentCreateError(VendorConsentError):
    """A consent record could not be built from the given field values"""


class BitsError(GdprError):
    """Base class for bit buffer precondition failures"""


class BitIndexError(BitsError, IndexError):
    """Bit index is outside of the buffer"""


class BitWidthError(BitsError):
    """Requested bit width does not fit the target integer size"""


class BitValueError(BitsError, ValueError):
    """Value cannot be represented in the given bit width"""
