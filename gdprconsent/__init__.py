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

"""
Decoder and encoder of IAB GDPR v1 vendor consent strings.

Use `VendorConsent.from_base64_string()` to read a consent string and `VendorConsentBuilder` to create one.
"""

from gdprconsent.builder import VendorConsentBuilder
from gdprconsent.consent import BitmapTail, RangeEntry, RangeTail, VendorConsent, VendorEncodingType
from gdprconsent.encoding import PaddingMode
from gdprconsent.exception import (
    ConsentStringDecodeError,
    ConsentStringError,
    ConsentStringTooLongError,
    GdprConsentMissingError,
    GdprError,
    VendorConsentCreateError,
    VendorConsentError,
    VendorConsentParseError,
)
from gdprconsent.parser import parse_vendor_consent
from gdprconsent.switch import GdprSwitch
from gdprconsent.version import __version__

__all__ = [
    'BitmapTail',
    'ConsentStringDecodeError',
    'ConsentStringError',
    'ConsentStringTooLongError',
    'GdprConsentMissingError',
    'GdprError',
    'GdprSwitch',
    'PaddingMode',
    'RangeEntry',
    'RangeTail',
    'VendorConsent',
    'VendorConsentBuilder',
    'VendorConsentCreateError',
    'VendorConsentError',
    'VendorConsentParseError',
    'VendorEncodingType',
    'parse_vendor_consent',
    '__version__',
]
