# encoding: utf-8
'''Exceptions raised by the plistcodec package.'''


class PlistError(Exception):
    '''Base class for every error raised while reading or writing a plist.'''


class FormatError(PlistError, ValueError):
    '''
    The input is not a well-formed plist: truncated or inconsistent binary
    tables, an unknown object marker, or XML that does not follow the plist
    document structure.
    '''


class UnsupportedValueError(PlistError, TypeError):
    '''A value that has no plist representation was handed to an encoder.'''
