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
This module implements the bit buffer that every consent record field is read from and written to.

The buffer is a big-endian bit string: bit 0 is the most significant bit of byte 0, bit 7 the least significant
bit of byte 0, bit 8 the most significant bit of byte 1 and so on. Fields have arbitrary widths and cross byte
boundaries freely. Integers are unsigned and written most significant bit first.

>>> bits = Bits.allocate(24)
>>> bits.set_int(0, 6, 1)
>>> bits.set_letters(6, 12, 'EN')
>>> bits.to_bytes().hex()
'044340'
>>> bits.binary_string()
'000001000100001101000000'
>>> bits.get_int(0, 6)
1
>>> bits.get_letters(6, 12)
'EN'

Values that don't fit the width are rejected instead of truncated:

>>> try:
...     bits.set_int(0, 6, 64)
... except BitValueError as e:
...     print(*e.args)
can't fit 64 into bit range of size 6
"""

from datetime import datetime, timedelta, timezone
from typing import Union

from gdprconsent.constants import INT_SIZE, LONG_SIZE, MILLISECONDS_PER_DECISECOND, SIX_BIT_CHAR_BASE, SIX_BIT_CHAR_SIZE
from gdprconsent.exception import BitIndexError, BitValueError, BitWidthError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_DECISECOND = timedelta(milliseconds=MILLISECONDS_PER_DECISECOND)

# 'A'..'Z' are the only representable characters
_MAX_CHAR_CODE = 25


def max_value_of_size(size: int) -> int:
    """ Largest unsigned value that fits in `size` bits.

    >>> max_value_of_size(6)
    63
    >>> max_value_of_size(64) == 2**64 - 1
    True
    """
    return (1 << size) - 1


class Bits:
    """Fixed size bit buffer, zero-initialized when allocated.

    The buffer is always copied on construction, a `Bits` instance never shares its memory with the caller.
    """

    __slots__ = ('_data',)

    def __init__(self, data: Union[bytes, bytearray, memoryview]) -> None:
        self._data = bytearray(data)

    @classmethod
    def allocate(cls, n_bits: int) -> 'Bits':
        """Create a zeroed buffer large enough to hold `n_bits`, rounded up to whole bytes."""
        if n_bits < 0:
            raise BitValueError(f'cannot allocate a negative number of bits: {n_bits}')
        return cls(bytes((n_bits + 7) // 8))

    def length(self) -> int:
        """Number of bits in the buffer."""
        return len(self._data) * 8

    def to_bytes(self) -> bytes:
        return bytes(self._data)

    def binary_string(self) -> str:
        """All bits as a string of '0's and '1's, for example b'\\x04' gives '00000100'."""
        return ''.join(f'{byte:08b}' for byte in self._data)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.length():
            raise BitIndexError(f'bit index {index} out of range, buffer has {self.length()} bits')

    def _check_range(self, start: int, size: int) -> None:
        if size < 0:
            raise BitWidthError(f'bit range size cannot be negative: {size}')
        if start < 0 or start + size > self.length():
            raise BitIndexError(f'bit range [{start}, {start + size}) out of range, buffer has {self.length()} bits')

    def get_bit(self, index: int) -> bool:
        self._check_index(index)
        byte_index, bit_exact = divmod(index, 8)
        return bool(self._data[byte_index] & (0x80 >> bit_exact))

    def set_bit(self, index: int) -> None:
        self._check_index(index)
        byte_index, bit_exact = divmod(index, 8)
        self._data[byte_index] |= 0x80 >> bit_exact

    def unset_bit(self, index: int) -> None:
        self._check_index(index)
        byte_index, bit_exact = divmod(index, 8)
        self._data[byte_index] &= ~(0x80 >> bit_exact) & 0xff

    def put_bit(self, index: int, value: bool) -> None:
        if value:
            self.set_bit(index)
        else:
            self.unset_bit(index)

    def get_int(self, start: int, size: int) -> int:
        """Interpret `size` bits from `start` as a big-endian unsigned int, at most 32 bits."""
        return self._get_uint(start, size, INT_SIZE)

    def get_long(self, start: int, size: int) -> int:
        """Interpret `size` bits from `start` as a big-endian unsigned long, at most 64 bits."""
        return self._get_uint(start, size, LONG_SIZE)

    def set_int(self, start: int, size: int, value: int) -> None:
        """Write `value` in `size` bits from `start`, at most 32 bits."""
        self._set_uint(start, size, value, INT_SIZE)

    def set_long(self, start: int, size: int, value: int) -> None:
        """Write `value` in `size` bits from `start`, at most 64 bits."""
        self._set_uint(start, size, value, LONG_SIZE)

    def _get_uint(self, start: int, size: int, capacity: int) -> int:
        if size > capacity:
            raise BitWidthError(f"can't fit bit range of size {size} in {capacity} bits")
        self._check_range(start, size)
        value = 0
        for index in range(start, start + size):
            value = (value << 1) | self.get_bit(index)
        return value

    def _set_uint(self, start: int, size: int, value: int, capacity: int) -> None:
        if size > capacity:
            raise BitWidthError(f"can't fit bit range of size {size} in {capacity} bits")
        if value < 0 or value > max_value_of_size(size):
            raise BitValueError(f"can't fit {value} into bit range of size {size}")
        self._check_range(start, size)
        for i in range(size):
            self.put_bit(start + i, bool((value >> (size - 1 - i)) & 1))

    def get_letters(self, start: int, size: int) -> str:
        """Interpret the bit range as six bit characters, where 0 is 'A' and 25 is 'Z'."""
        if size % SIX_BIT_CHAR_SIZE != 0:
            raise BitWidthError(f'string bit length must be multiple of six: {size}')
        chars = []
        for i in range(size // SIX_BIT_CHAR_SIZE):
            code = self.get_int(start + i * SIX_BIT_CHAR_SIZE, SIX_BIT_CHAR_SIZE)
            if code > _MAX_CHAR_CODE:
                raise BitValueError(f'six bit code {code} is not a letter')
            chars.append(chr(code + SIX_BIT_CHAR_BASE))
        return ''.join(chars)

    def set_letters(self, start: int, size: int, text: str) -> None:
        """Write uppercase letters as six bit characters, the text must fill the bit range exactly."""
        if size % SIX_BIT_CHAR_SIZE != 0:
            raise BitWidthError(f'string bit length must be multiple of six: {size}')
        if size // SIX_BIT_CHAR_SIZE != len(text):
            raise BitValueError(f'bit range of size {size} needs exactly {size // SIX_BIT_CHAR_SIZE} letters, '
                                f'got {text!r}')
        codes = [ord(char) - SIX_BIT_CHAR_BASE for char in text]
        if any(not 0 <= code <= _MAX_CHAR_CODE for code in codes):
            raise BitValueError(f'{text!r} must contain only uppercase letters A-Z')
        for i, code in enumerate(codes):
            self.set_int(start + i * SIX_BIT_CHAR_SIZE, SIX_BIT_CHAR_SIZE, code)

    def get_datetime(self, start: int, size: int) -> datetime:
        """Interpret the bit range as deciseconds since the unix epoch, returns an aware UTC datetime."""
        deciseconds = self.get_long(start, size)
        try:
            return EPOCH + deciseconds * _DECISECOND
        except OverflowError:
            raise BitValueError(f'{deciseconds} deciseconds is not a representable datetime')

    def set_datetime(self, start: int, size: int, value: datetime) -> None:
        """Write an aware datetime as deciseconds since the unix epoch.

        Anything finer than a decisecond is floored, so only decisecond aligned datetimes survive a round trip.
        """
        if value.tzinfo is None:
            raise BitValueError(f'datetime must be timezone aware: {value}')
        self.set_long(start, size, (value - EPOCH) // _DECISECOND)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bits):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f'Bits({self._data.hex()!r})'
