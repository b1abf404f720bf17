# encoding: utf-8
"""
The plist value model: the closed set of python types that can be stored in a
property list, and the tag each of them is known by inside this package.

    None                    -> 'null'
    bool                    -> 'boolean'
    int                     -> 'integer'
    float                   -> 'real'
    datetime                -> 'date'
    bytes, bytearray        -> 'data'
    str                     -> 'string'
    list, tuple             -> 'array'
    dict, OrderedDict       -> 'dict'

Lookups are made on the exact type, so True is a boolean and never an integer.
"""

from collections import OrderedDict
from datetime import datetime
from .errors import UnsupportedValueError


NULL = 'null'
BOOLEAN = 'boolean'
INTEGER = 'integer'
REAL = 'real'
DATE = 'date'
DATA = 'data'
STRING = 'string'
ARRAY = 'array'
DICT = 'dict'

TYPES = {
    type(None): NULL,
    bool: BOOLEAN,
    int: INTEGER,
    float: REAL,
    datetime: DATE,
    bytes: DATA,
    bytearray: DATA,
    str: STRING,
    list: ARRAY,
    tuple: ARRAY,
    dict: DICT,
    OrderedDict: DICT,
}


def kind_of(value):
    '''
    Return the value model tag for value. Raise UnsupportedValueError if the
    type of value is not part of the model.
    '''
    try:
        return TYPES[type(value)]
    except KeyError:
        raise UnsupportedValueError('%s values cannot be stored in a plist'
                                    % type(value).__name__) from None


def values_equal(first, second):
    '''
    Compare two value trees, matching both for equality and kind at every
    level. Dictionaries must also agree on key order. Arrays compare equal
    regardless of whether they are lists or tuples, as do bytes and
    bytearray.
    '''
    kind = kind_of(first)
    if kind != kind_of(second):
        return False
    if kind == ARRAY:
        return (len(first) == len(second) and
                all(values_equal(a, b) for a, b in zip(first, second)))
    if kind == DICT:
        if list(first.keys()) != list(second.keys()):
            return False
        return all(values_equal(first[key], second[key]) for key in first)
    return first == second
