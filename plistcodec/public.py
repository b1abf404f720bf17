# encoding: utf-8
"""This file contains the public functions for the module plistcodec."""

import logging
import os
from .classes import MAGIC as BINARY_MAGIC
from .readwrite import read as read_binary, write as write_binary
from .xmlplist import read_xml, write_xml


logger = logging.getLogger(__name__)


#########
## API ##
#########

def is_binary_plist(data):
    '''Return True if data starts with the binary plist magic, "bplist00".'''
    return bytes(data[:len(BINARY_MAGIC)]) == BINARY_MAGIC


def dump(obj, fp, binary=False):
    '''Write obj to the binary file object fp as an XML or binary plist.'''
    fp.write(dumps(obj, binary))


def dumps(obj, binary=False):
    '''Return obj encoded as an XML plist, or a binary one if binary is True.'''
    if binary is True:
        return write_binary(obj)
    return write_xml(obj)


def load(fp, binary=None):
    '''Read a plist from the binary file object fp and return the root object.'''
    return loads(fp.read(), binary)


def loads(data, binary=None):
    '''
    Decode the plist in data and return the root object. With binary=None
    the format is detected from the first 8 bytes; True or False force the
    binary or the XML reader. A str is taken as XML source.
    '''
    if isinstance(data, str):
        data = data.encode('utf-8')
    if binary is None:
        binary = is_binary_plist(data)
        logger.debug('detected %s plist', 'binary' if binary else 'XML')
    if binary is True:
        return read_binary(data)
    return read_xml(data)


################
## Legacy API ##
################


def readPlist(path_or_file, binary=None):
    """
    Read a plist from path_or_file. If the named argument binary is set to
    True, then assume path_or_file is a binary plist. If it's set to false,
    then assume it's an xml plist. Otherwise, try to detect the type and act
    accordingly. Return the root object.
    """
    if isinstance(path_or_file, (str, os.PathLike)):
        with open(path_or_file, 'rb') as file_object:
            return load(file_object, binary)
    return load(path_or_file, binary)


def writePlist(root_object, path_or_file, binary=False):
    """
    Write root_object to path_or_file. If the named argument binary is set
    to True, write a binary plist, otherwise write an xml one.
    """
    if isinstance(path_or_file, (str, os.PathLike)):
        with open(path_or_file, 'wb') as file_object:
            dump(root_object, file_object, binary)
    else:
        dump(root_object, path_or_file, binary)


writePlistToString = dumps
readPlistFromString = loads
