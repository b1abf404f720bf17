# encoding: utf-8
"""
plistcodec: Read and write XML and binary .plist files.

Property lists hold None, booleans, integers, floats, datetimes, bytes,
strings, lists and dictionaries with string keys. They can be stored as XML
or in the compact "bplist00" binary format.

To write a plist use one of:

    dumps(root_object)
    dump(root_object, file_object)
    writePlist(root_object, path_or_file)

Called like this, these functions write an xml plist. To write a binary
plist, pass binary=True:

    dumps(root_object, binary=True)

To read a plist use one of:

    loads(data)
    load(file_object)
    readPlist(path_or_file)

Like this, these functions look at the first 8 bytes to determine whether the
plist is binary or xml. binary=True or binary=False skip the detection.

Dictionary order is kept in both directions. Datetimes are read back as
timezone-aware UTC values with whole seconds in binary plists. Malformed
input raises FormatError; values without a plist form raise
UnsupportedValueError. Both derive from PlistError.
"""


from .public import readPlist, readPlistFromString
from .public import writePlist, writePlistToString
from .public import dump, dumps, load, loads
from .public import is_binary_plist, BINARY_MAGIC
from .public import read_binary, write_binary, read_xml, write_xml
from .dates import to_apple_seconds, from_apple_seconds, APPLE_EPOCH
from .errors import PlistError, FormatError, UnsupportedValueError
from .functions import regulate
from .types import kind_of, values_equal


__all__ = ['readPlist', 'readPlistFromString',
           'writePlist', 'writePlistToString',
           'dump', 'dumps', 'load', 'loads',
           'is_binary_plist', 'BINARY_MAGIC',
           'read_binary', 'write_binary', 'read_xml', 'write_xml',
           'to_apple_seconds', 'from_apple_seconds', 'APPLE_EPOCH',
           'PlistError', 'FormatError', 'UnsupportedValueError',
           'regulate', 'kind_of', 'values_equal']

__packages__ = ['plistcodec']
__version__ = '0.3'
__author__ = 'The plistcodec developers'
__description__ = 'Read and write XML and binary .plist files.'
__license__ = 'BSD'
__platforms__ = 'any'
__classifiers__ = [
  'Development Status :: 4 - Beta',
  'Intended Audience :: Developers',
  'License :: OSI Approved :: BSD License',
  'Operating System :: OS Independent',
  'Programming Language :: Python',
  'Programming Language :: Python :: 3',
  'Topic :: Software Development :: Libraries :: Python Modules',
]
