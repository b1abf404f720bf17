# encoding: utf-8
"""
Read and write XML property lists.

The markup itself is handled by xml.etree.ElementTree; this module only maps
between plist elements and values:

    <dict>      dict, alternating <key> and value elements
    <array>     list
    <string>    str
    <integer>   int
    <real>      float
    <true/>     True
    <false/>    False
    <null/>     None (dropped when it is an array item or dictionary value)
    <date>      datetime, ISO 8601 in UTC
    <data>      bytes, base64
"""

import re
from base64 import b64decode, b64encode
from binascii import Error as Base64Error
from datetime import datetime
from xml.etree import ElementTree as etree
from .dates import as_utc
from .errors import FormatError, UnsupportedValueError
from .types import kind_of, NULL, BOOLEAN, INTEGER, REAL, DATE, DATA
from .types import STRING, ARRAY, DICT


PLIST_DOCTYPE = ('<!DOCTYPE plist PUBLIC "-//Apple Computer//DTD PLIST 1.0//EN"'
                 ' "http://www.apple.com/DTDs/PropertyList-1.0.dtd">')
PLIST_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n' + PLIST_DOCTYPE + '\n'

INTEGER_RE = re.compile(r'^[+-]?\d+$')
# characters XML 1.0 documents cannot hold, not even as references
ILLEGAL_RE = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')


# Reading

def read_xml(data):
    '''
    Parse an XML plist from data (bytes or str) and return the root object.
    Raise FormatError if it is not a well-formed plist document.
    '''
    if isinstance(data, str):
        data = data.encode('utf-8')
    try:
        root = etree.fromstring(data)
    except etree.ParseError as error:
        raise FormatError('malformed XML: %s' % error) from error
    return fromtree(root)


def fromtree(tree):
    '''Convert a plist ElementTree element to a python object.'''
    if tree.tag != 'plist':
        raise FormatError('root element is <%s>, expecting <plist>' % tree.tag)
    children = list(tree)
    if len(children) != 1:
        raise FormatError('<plist> must hold exactly one value, found %d'
                          % len(children))
    return deserialize(children[0])


def parse_integer(text):
    text = text.strip()
    if not INTEGER_RE.match(text):
        raise FormatError('invalid integer %r' % text)
    return int(text)


def parse_real(text):
    try:
        return float(text.strip())
    except ValueError as error:
        raise FormatError('invalid real %r' % text) from error


def parse_date(text):
    text = text.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError as error:
        raise FormatError('invalid date %r' % text) from error


def parse_data(text):
    try:
        return b64decode(text.encode('ascii'))
    except (Base64Error, UnicodeEncodeError) as error:
        raise FormatError('invalid base64 data') from error


TAGS_STATIC = {
    'true': True,
    'false': False,
    'null': None,
}

TAGS_TEXT = {
    'string': str,
    'integer': parse_integer,
    'real': parse_real,
    'date': parse_date,
    'data': parse_data,
}


def deserialize(element):
    '''Convert a plist value element to a python object.'''
    tag = element.tag
    if tag in TAGS_STATIC:
        return TAGS_STATIC[tag]
    elif tag in TAGS_TEXT:
        return TAGS_TEXT[tag](element.text or '')
    elif tag == 'array':
        items = (deserialize(child) for child in element)
        return [item for item in items if item is not None]
    elif tag == 'dict':
        return deserialize_dict(element)
    raise FormatError('plist element <%s> is not supported' % tag)


def deserialize_dict(element):
    children = list(element)
    if len(children) % 2 != 0:
        raise FormatError('<dict> must have an even number of children, '
                          'found %d' % len(children))
    dictionary = {}
    pairs = iter(children)
    for key, value in zip(pairs, pairs):
        if key.tag != 'key':
            raise FormatError('expected <key>, found <%s>' % key.tag)
        name = key.text or ''
        if name in dictionary:
            raise FormatError('duplicate dictionary key %r' % name)
        value = deserialize(value)
        if value is not None:
            dictionary[name] = value
    return dictionary


# Writing

def write_xml(root_object):
    '''
    Encode root_object as an XML plist and return the UTF-8 bytes. Raise
    UnsupportedValueError if it holds anything that has no plist form.
    '''
    tree = totree(root_object)
    etree.indent(tree, space='\t')
    body = etree.tostring(tree, encoding='unicode')
    # parsers turn a literal carriage return into a newline
    body = body.replace('\r', '&#13;')
    return (PLIST_HEADER + body + '\n').encode('utf-8')


def totree(root_object):
    '''Convert a python object to a plist ElementTree element.'''
    return PlistBuilder(root_object).close()


def format_date(date):
    '''Return date in the plist form, UTC with whole seconds.'''
    date = as_utc(date).replace(tzinfo=None, microsecond=0)
    return date.isoformat() + 'Z'


def check_text(text):
    match = ILLEGAL_RE.search(text)
    if match:
        raise UnsupportedValueError('character %r cannot be stored in an XML '
                                    'plist' % match.group())
    return text


class PlistBuilder(etree.TreeBuilder):
    '''Used to convert an object hierarchy to a plist ElementTree element.'''

    def __init__(self, root_object):
        etree.TreeBuilder.__init__(self)
        self.start('plist', {'version': '1.0'})
        self.serialize(root_object)
        self.end('plist')

    def tag(self, name, text=None):
        self.start(name, {})
        if text:
            self.data(text)
        return self.end(name)

    def serialize(self, value):
        kind = kind_of(value)
        if kind == NULL:
            return self.tag('null')
        elif kind == BOOLEAN:
            return self.tag('true' if value else 'false')
        elif kind == INTEGER:
            return self.tag('integer', str(value))
        elif kind == REAL:
            return self.tag('real', repr(value))
        elif kind == DATE:
            return self.tag('date', format_date(value))
        elif kind == DATA:
            return self.tag('data', b64encode(bytes(value)).decode('ascii'))
        elif kind == STRING:
            return self.tag('string', check_text(value))
        elif kind == ARRAY:
            self.start('array', {})
            for item in value:
                self.serialize(item)
            return self.end('array')
        elif kind == DICT:
            self.start('dict', {})
            for key, item in value.items():
                if type(key) is not str:
                    raise UnsupportedValueError(
                        'dictionary key %r is not a string' % (key,))
                self.tag('key', check_text(key))
                self.serialize(item)
            return self.end('dict')
        raise UnsupportedValueError('no XML form for %s' % kind)
