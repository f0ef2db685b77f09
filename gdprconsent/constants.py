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

# Bit layout of the v1 consent record. Offsets are counted from the most significant bit of the first byte.

VERSION_BIT_OFFSET: int = 0
VERSION_BIT_SIZE: int = 6

CREATED_BIT_OFFSET: int = 6
CREATED_BIT_SIZE: int = 36

UPDATED_BIT_OFFSET: int = 42
UPDATED_BIT_SIZE: int = 36

CMP_ID_OFFSET: int = 78
CMP_ID_SIZE: int = 12

CMP_VERSION_OFFSET: int = 90
CMP_VERSION_SIZE: int = 12

CONSENT_SCREEN_OFFSET: int = 102
CONSENT_SCREEN_SIZE: int = 6

CONSENT_LANGUAGE_OFFSET: int = 108
CONSENT_LANGUAGE_SIZE: int = 12

VENDOR_LIST_VERSION_OFFSET: int = 120
VENDOR_LIST_VERSION_SIZE: int = 12

PURPOSES_OFFSET: int = 132
PURPOSES_SIZE: int = 24

MAX_VENDOR_ID_OFFSET: int = 156
MAX_VENDOR_ID_SIZE: int = 16

ENCODING_TYPE_OFFSET: int = 172
ENCODING_TYPE_SIZE: int = 1

# Bitmap tail: one bit per vendor id, vendor 1 at this offset.
VENDOR_BITFIELD_OFFSET: int = 173

# Range tail.
DEFAULT_CONSENT_OFFSET: int = 173
NUM_ENTRIES_OFFSET: int = 174
NUM_ENTRIES_SIZE: int = 12
RANGE_ENTRY_OFFSET: int = 186
VENDOR_ID_SIZE: int = 16

# Everything before the vendor tail.
HEADER_BIT_SIZE: int = ENCODING_TYPE_OFFSET + ENCODING_TYPE_SIZE

# Each six bit character encodes 'A' + code.
SIX_BIT_CHAR_SIZE: int = 6
SIX_BIT_CHAR_BASE: int = ord('A')

# Timestamps are stored as deciseconds since the unix epoch.
MILLISECONDS_PER_DECISECOND: int = 100

# Integer capacities of the two read/write variants.
INT_SIZE: int = 32
LONG_SIZE: int = 64
