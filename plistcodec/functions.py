# encoding: utf-8
'''This file contains private functions for the plistcodec module.'''

from struct import pack


def regulate(data, min_width=1):
    '''
    Trim or pad the big-endian byte string data to the smallest width that
    still holds its value, but never below min_width. Leading zero bytes are
    stripped down to min_width and short input is left-padded with zeros.
    '''
    data = bytes(data)
    stripped = data.lstrip(b'\x00')
    if len(stripped) < min_width:
        return stripped.rjust(min_width, b'\x00')
    return stripped


def get_byte_width(value_to_store, min_width=1):
    '''
    Return the minimum number of bytes needed to store a non-negative value
    as an unsigned big-endian integer, never less than min_width. Raise
    ValueError for values outside the unsigned 64-bit range.
    '''
    if not 0 <= value_to_store < 1 << 64:
        raise ValueError('%r does not fit in an unsigned 64-bit field'
                         % (value_to_store,))
    return len(regulate(pack('>Q', value_to_store), min_width))


def encode_unsigned(value, width):
    '''Encode value as a big-endian unsigned integer exactly width bytes wide.'''
    encoded = regulate(pack('>Q', value), width)
    if len(encoded) != width:
        raise ValueError('%d does not fit in %d bytes' % (value, width))
    return encoded


def decode_unsigned(raw):
    '''Decode a big-endian unsigned integer of any width.'''
    return int.from_bytes(raw, 'big')


def round_up_width(width):
    '''Return the power-of-two exponent of the smallest of 1, 2, 4, 8 >= width.'''
    for exponent in range(4):
        if width <= 1 << exponent:
            return exponent
    raise ValueError('width %d is wider than 8 bytes' % width)
