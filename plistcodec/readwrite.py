# encoding: utf-8
'''This file contains private read/write functions for the plistcodec module.'''

import logging
from io import BytesIO
from .classes import BinaryPlistObjectHandler as ObjectHandler
from .classes import BinaryPlistObjectTable as ObjectTable
from .classes import BinaryPlistTableHandler as TableHandler
from .classes import BinaryPlistTrailerHandler as TrailerHandler
from .classes import MAGIC, TRAILER_SIZE
from .errors import FormatError
from .functions import get_byte_width


logger = logging.getLogger(__name__)


def read(data):
    '''
    Read a binary plist from the bytes in data and return the root object.
    Raise FormatError if data is not a well-formed binary plist.
    '''
    data = bytes(data)
    if len(data) < len(MAGIC) + TRAILER_SIZE:
        raise FormatError('binary plist needs at least %d bytes, got %d'
                          % (len(MAGIC) + TRAILER_SIZE, len(data)))
    if data[:len(MAGIC)] != MAGIC:
        raise FormatError('wrong magic %r, expecting %r'
                          % (data[:len(MAGIC)], MAGIC))
    trailer = read_trailer(data)
    offset_size, reference_size, length, root, table_offset = trailer
    offsets = read_table(data, offset_size, length, table_offset)
    return read_objects(data[:table_offset], offsets, reference_size, root)


def read_trailer(data):
    '''Read and return the final, "trailer", section of data.'''
    trailer_handler = TrailerHandler()
    trailer = trailer_handler.decode(data)
    logger.debug('trailer: offset size %d, reference size %d, %d objects, '
                 'top object %d, offset table at %d', *trailer)
    return trailer


def read_table(data, offset_size, length, table_offset):
    '''Read the offset table from data and return the decoded offsets.'''
    table_handler = TableHandler()
    return table_handler.decode(data, offset_size, length, table_offset)


def read_objects(object_table, offsets, reference_size, root):
    '''
    Resolve the root object from object_table, decoding the objects it
    references as they are reached.
    '''
    object_handler = ObjectHandler()
    object_handler.set_reference_size(reference_size)
    object_handler.set_offsets(BytesIO(object_table), offsets)
    return object_handler.resolve(root)


def write(root_object):
    '''
    Encode root_object as a binary plist and return the bytes. Raise
    UnsupportedValueError if it holds anything that has no plist form.
    '''
    object_table, offsets, reference_size = write_objects(root_object)
    table_offset = len(object_table)
    offset_size, table = write_table(offsets)
    trailer = write_trailer(offset_size, reference_size, len(offsets),
                            table_offset)
    return object_table + table + trailer


def write_objects(root_object):
    '''
    Count all objects, size the references, then emit every object into a
    fresh object table. Return the table, the offsets by reference and the
    reference size.
    '''
    object_handler = ObjectHandler()
    number_of_objects = object_handler.count_objects(root_object)
    reference_size = get_byte_width(number_of_objects - 1)
    object_handler.set_reference_size(reference_size)
    logger.debug('writing %d objects with %d byte references',
                 number_of_objects, reference_size)
    object_table = ObjectTable(number_of_objects)
    object_handler.emit(root_object, object_table)
    object_table.assign_reference()
    table, offsets = object_table.finalize()
    return table, offsets, reference_size


def write_table(offsets):
    '''Return the offset size and the encoded offset table.'''
    table_handler = TableHandler()
    offset_size = table_handler.get_offset_size(offsets)
    logger.debug('offset table: %d entries of %d bytes', len(offsets),
                 offset_size)
    return offset_size, table_handler.encode(offsets, offset_size)


def write_trailer(offset_size, reference_size, number_of_objects,
                  table_offset):
    '''Encode the trailer section.'''
    trailer_handler = TrailerHandler()
    return trailer_handler.encode(offset_size, reference_size,
                                  number_of_objects, table_offset)
