# encoding: utf-8
'''
Handler classes for the binary plist format.

Every object handler knows how to encode and decode one kind of object. The
object handler dispatches between them and carries the per-call state: the
reference size, and either the offsets being resolved (read) or nothing at
all (write, where the state lives in a BinaryPlistObjectTable). The table and
trailer handlers deal with the offset table and the 32 byte trailer.
'''

from struct import pack, unpack, error as struct_error
from .dates import to_apple_seconds, from_apple_seconds
from .errors import FormatError, UnsupportedValueError
from .functions import regulate, encode_unsigned, decode_unsigned
from .functions import get_byte_width, round_up_width
from .types import kind_of, NULL, BOOLEAN, INTEGER, REAL, DATE, DATA
from .types import STRING, ARRAY, DICT


MAGIC = b'bplist00'
TRAILER_SIZE = 32
INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1


def read_exactly(file_object, length):
    '''Read length bytes from file_object, or raise FormatError.'''
    raw = file_object.read(length)
    if len(raw) != length:
        raise FormatError('object table truncated: wanted %d bytes, got %d'
                          % (length, len(raw)))
    return raw


class BinaryPlistBaseHandler(object):
    def __init__(self):
        self.type_number = None
        self.kinds = ()
        self.extended_length = False
        self.object_handler = None

    def set_object_handler(self, object_handler):
        self.object_handler = object_handler

    def encode(self, object_):
        object_ = self.encode_preprocess(object_)
        object_length = self.get_object_length(object_)
        first_byte = self.encode_first_byte(self.type_number, object_length)
        body = self.encode_body(object_, object_length)
        return first_byte + body

    def encode_preprocess(self, object_):
        return object_

    def get_object_length(self, object_):
        return len(object_)

    def encode_first_byte(self, type_number, length):
        '''
        Encode the first byte (or bytes if length is greater than 14) of an
        encoded object. This encodes the type and length of the object.
        '''
        if length >= 15:
            real_length = self.object_handler.encode_integer(length)
            return pack('B', (type_number << 4) | 0xF) + real_length
        return pack('B', (type_number << 4) | length)

    def encode_body(self, object_, object_length):
        return b''

    def decode(self, file_object, object_length):
        byte_length = self.get_byte_length(object_length)
        raw = read_exactly(file_object, byte_length)
        raw = self.decode_preprocess(raw)
        object_ = self.decode_body(raw, object_length)
        object_ = self.decode_postprocess(object_)
        return object_

    def get_byte_length(self, object_length):
        return object_length

    def decode_preprocess(self, raw):
        return raw

    def decode_body(self, raw, object_length):
        return raw

    def decode_postprocess(self, object_):
        return object_

    def count_objects(self, object_):
        '''Return the number of table slots object_ and its children use.'''
        return 1

    def emit_children(self, object_, object_table):
        '''
        Emit the children of object_ into object_table and return what
        encode() should be called with.
        '''
        return object_


class BinaryPlistBooleanHandler(BinaryPlistBaseHandler):
    def __init__(self):
        BinaryPlistBaseHandler.__init__(self)
        self.type_number = 0
        self.kinds = (NULL, BOOLEAN)
        self.integer_to_boolean = {0: None, 8: False, 9: True}
        self.boolean_to_integer = dict(zip(self.integer_to_boolean.values(),
                                           self.integer_to_boolean.keys()))

    def get_object_length(self, boolean):
        '''Return the object length for a boolean or None.'''
        return self.boolean_to_integer[boolean]

    def get_byte_length(self, object_length):
        return 0

    def decode_body(self, raw, object_length):
        try:
            return self.integer_to_boolean[object_length]
        except KeyError:
            raise FormatError('unsupported simple object 0x%02x'
                              % object_length) from None


class BinaryPlistNumberHandler(BinaryPlistBaseHandler):
    def __init__(self):
        BinaryPlistBaseHandler.__init__(self)
        self.formats = ()

    def encode_body(self, number, object_length):
        return pack(self.formats[object_length], number)

    def decode_body(self, raw, object_length):
        return unpack(self.formats[object_length], raw)[0]

    def get_byte_length(self, object_length):
        if object_length >= len(self.formats):
            raise FormatError('unsupported %d byte number'
                              % (1 << object_length))
        return 1 << object_length


class BinaryPlistIntegerHandler(BinaryPlistNumberHandler):
    def __init__(self):
        BinaryPlistNumberHandler.__init__(self)
        self.type_number = 1
        self.kinds = (INTEGER,)
        # 1, 2 and 4 byte integers are unsigned, 8 byte ones are signed
        self.formats = ('>B', '>H', '>L', '>q')

    def get_object_length(self, integer):
        '''
        Return log2 of the byte width for an integer: the regulated width of
        its signed 64-bit form, rounded up to 1, 2, 4 or 8. Non-negative
        values keep room for a sign bit, negative ones always take 8 bytes.
        '''
        if not INT64_MIN <= integer <= INT64_MAX:
            raise UnsupportedValueError('integer %d does not fit in 64 bits'
                                        % integer)
        regulated = regulate(pack('>q', integer))
        width = len(regulated)
        if integer >= 0 and regulated[0] & 0x80:
            width += 1
        return round_up_width(width)


class BinaryPlistFloatHandler(BinaryPlistNumberHandler):
    def __init__(self):
        BinaryPlistNumberHandler.__init__(self)
        self.type_number = 2
        self.kinds = (REAL,)
        self.formats = (None, None, None, '>d')

    def get_object_length(self, float_):
        '''
        Return log2 of the byte width for a float: its big-endian double
        regulated to at least 4 bytes, rounded up to 4 or 8.
        '''
        return round_up_width(len(regulate(pack('>d', float_), 4)))

    def encode_body(self, float_, object_length):
        return regulate(pack('>d', float_), 1 << object_length)

    def decode_preprocess(self, raw):
        return regulate(raw, 8)

    def decode_body(self, raw, object_length):
        return unpack('>d', raw)[0]


class BinaryPlistDateHandler(BinaryPlistFloatHandler):
    def __init__(self):
        BinaryPlistFloatHandler.__init__(self)
        self.type_number = 3
        self.kinds = (DATE,)

    def encode_preprocess(self, date):
        return to_apple_seconds(date)

    def get_object_length(self, seconds):
        return 3

    def encode_body(self, seconds, object_length):
        return pack('>d', seconds)

    def get_byte_length(self, object_length):
        if object_length != 3:
            raise FormatError('dates are 8 byte floats, got marker length %d'
                              % object_length)
        return 8

    def decode_postprocess(self, seconds):
        try:
            return from_apple_seconds(seconds)
        except (OverflowError, ValueError) as error:
            raise FormatError('date %r out of range' % seconds) from error


class BinaryPlistDataHandler(BinaryPlistBaseHandler):
    def __init__(self):
        BinaryPlistBaseHandler.__init__(self)
        self.type_number = 4
        self.kinds = (DATA,)
        self.extended_length = True

    def encode_body(self, data, object_length):
        return bytes(data)

    def decode_body(self, raw, object_length):
        return bytes(raw)


class BinaryPlistStringHandler(BinaryPlistBaseHandler):
    def __init__(self):
        BinaryPlistBaseHandler.__init__(self)
        self.type_number = 5
        self.kinds = (STRING,)
        self.extended_length = True
        self.encoding = 'ascii'

    def encode_body(self, string, object_length):
        return string.encode(self.encoding)

    def decode_body(self, raw, object_length):
        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as error:
            raise FormatError('invalid %s string' % self.encoding) from error


class BinaryPlistUnicodeStringHandler(BinaryPlistStringHandler):
    def __init__(self):
        BinaryPlistStringHandler.__init__(self)
        self.type_number = 6
        self.encoding = 'utf_16_be'

    def get_object_length(self, string):
        '''Return the length of a string in UTF-16 code units.'''
        return len(self.encode_body(string, None)) // 2

    def encode_body(self, string, object_length):
        return string.encode(self.encoding, 'surrogatepass')

    def get_byte_length(self, object_length):
        return object_length * 2

    def decode_body(self, raw, object_length):
        try:
            return raw.decode(self.encoding, 'surrogatepass')
        except UnicodeDecodeError as error:
            raise FormatError('invalid %s string' % self.encoding) from error


class BinaryPlistContainerObjectHandler(BinaryPlistBaseHandler):
    def __init__(self):
        BinaryPlistBaseHandler.__init__(self)
        self.extended_length = True
        self.reference_size = None

    def set_reference_size(self, reference_size):
        self.reference_size = reference_size

    def encode_reference_list(self, references):
        '''
        Return an encoded list of reference values. Used in encoding arrays and
        dictionaries.
        '''
        return b''.join(encode_unsigned(reference, self.reference_size)
                        for reference in references)

    def decode_reference_list(self, raw, object_length):
        size = self.reference_size
        return [decode_unsigned(raw[index:index + size])
                for index in range(0, object_length * size, size)]

    def emit_object_list(self, object_list, object_table):
        '''
        Emit each object of object_list, last one first, and return their
        references in the original order.
        '''
        references = []
        for object_ in reversed(object_list):
            self.object_handler.emit(object_, object_table)
            references.append(object_table.assign_reference())
        references.reverse()
        return references

    def resolve_reference_list(self, references):
        return [self.object_handler.resolve(reference)
                for reference in references]


class BinaryPlistArrayHandler(BinaryPlistContainerObjectHandler):
    def __init__(self):
        BinaryPlistContainerObjectHandler.__init__(self)
        self.type_number = 0xa
        self.kinds = (ARRAY,)

    def get_byte_length(self, object_length):
        return object_length * self.reference_size

    def encode_body(self, references, object_length):
        return self.encode_reference_list(references)

    def decode_body(self, raw, object_length):
        return self.decode_reference_list(raw, object_length)

    def decode_postprocess(self, references):
        return self.resolve_reference_list(references)

    def count_objects(self, array):
        return 1 + sum(self.object_handler.count_objects(item)
                       for item in array)

    def emit_children(self, array, object_table):
        return self.emit_object_list(array, object_table)


class BinaryPlistDictionaryHandler(BinaryPlistContainerObjectHandler):
    def __init__(self):
        BinaryPlistContainerObjectHandler.__init__(self)
        self.type_number = 0xd
        self.kinds = (DICT,)

    def get_object_length(self, flattened):
        keys, values = flattened
        return len(keys)

    def get_byte_length(self, object_length):
        return object_length * self.reference_size * 2

    def encode_body(self, flattened, object_length):
        keys, values = flattened
        return (self.encode_reference_list(keys) +
                self.encode_reference_list(values))

    def decode_body(self, raw, object_length):
        half = object_length * self.reference_size
        keys = self.decode_reference_list(raw[:half], object_length)
        values = self.decode_reference_list(raw[half:], object_length)
        return keys, values

    def decode_postprocess(self, flattened):
        key_references, value_references = flattened
        keys = self.resolve_reference_list(key_references)
        for key in keys:
            if type(key) is not str:
                raise FormatError('dictionary key %r is not a string' % (key,))
        if len(set(keys)) != len(keys):
            raise FormatError('duplicate dictionary key')
        values = self.resolve_reference_list(value_references)
        return dict(zip(keys, values))

    def count_objects(self, dictionary):
        return 1 + len(dictionary) + sum(
            self.object_handler.count_objects(value)
            for value in dictionary.values())

    def emit_children(self, dictionary, object_table):
        keys = list(dictionary.keys())
        for key in keys:
            if type(key) is not str:
                raise UnsupportedValueError('dictionary key %r is not a string'
                                            % (key,))
        values = self.emit_object_list([dictionary[key] for key in keys],
                                       object_table)
        keys = self.emit_object_list(keys, object_table)
        return keys, values


class BinaryPlistObjectHandler(object):
    def __init__(self):
        handlers = [BinaryPlistBooleanHandler(), BinaryPlistIntegerHandler(),
                    BinaryPlistFloatHandler(), BinaryPlistDateHandler(),
                    BinaryPlistDataHandler(), BinaryPlistStringHandler(),
                    BinaryPlistUnicodeStringHandler(),
                    BinaryPlistArrayHandler(), BinaryPlistDictionaryHandler()]
        self.handlers_by_type_number = {}
        self.handlers_by_kind = {}
        for handler in handlers:
            handler.set_object_handler(self)
            self.handlers_by_type_number[handler.type_number] = handler
            for kind in handler.kinds:
                self.handlers_by_kind.setdefault(kind, handler)
        self.unicode_handler = self.handlers_by_type_number[6]
        self.containers = (self.handlers_by_kind[ARRAY],
                           self.handlers_by_kind[DICT])
        self.file_object = None
        self.offsets = None
        self.resolving = set()

    def set_reference_size(self, reference_size):
        for handler in self.containers:
            handler.set_reference_size(reference_size)

    def set_offsets(self, file_object, offsets):
        '''Prepare to resolve references against offsets into file_object.'''
        self.file_object = file_object
        self.offsets = offsets

    def get_handler(self, object_):
        kind = kind_of(object_)
        if kind == STRING and not object_.isascii():
            return self.unicode_handler
        return self.handlers_by_kind[kind]

    def count_objects(self, object_):
        return self.get_handler(object_).count_objects(object_)

    def encode_integer(self, integer):
        return self.handlers_by_kind[INTEGER].encode(integer)

    def emit(self, object_, object_table):
        '''
        Emit object_ into object_table, its children first. The caller
        assigns the reference of object_ itself.
        '''
        handler = self.get_handler(object_)
        flattened = handler.emit_children(object_, object_table)
        object_table.prepend(handler.encode(flattened))

    def decode(self, file_object):
        handler, object_length = self.decode_first_byte(file_object)
        return handler.decode(file_object, object_length)

    def decode_first_byte(self, file_object):
        value = read_exactly(file_object, 1)[0]
        object_type = value >> 4
        object_length = value & 0xF
        try:
            handler = self.handlers_by_type_number[object_type]
        except KeyError:
            raise FormatError('unsupported object marker 0x%02x'
                              % value) from None
        if handler.extended_length and object_length == 15:
            object_length = self.decode_length(file_object)
        return handler, object_length

    def decode_length(self, file_object):
        '''Decode the integer object that follows a 0xF length nibble.'''
        handler, object_length = self.decode_first_byte(file_object)
        if handler.type_number != 1:
            raise FormatError('object length is not an integer')
        length = handler.decode(file_object, object_length)
        if length < 0:
            raise FormatError('negative object length %d' % length)
        return length

    def resolve(self, reference):
        '''Decode and return the object reference points to.'''
        if not 0 <= reference < len(self.offsets):
            raise FormatError('reference %d outside of the offset table'
                              % reference)
        if reference in self.resolving:
            raise FormatError('object %d contains itself' % reference)
        self.resolving.add(reference)
        try:
            self.file_object.seek(self.offsets[reference])
            return self.decode(self.file_object)
        finally:
            self.resolving.discard(reference)


class BinaryPlistObjectTable(object):
    '''
    The object table of a binary plist under construction. Objects are
    prepended: the table always holds a suffix of the final file, so every
    logged position is a distance from the end. References are handed out
    counting down from the last one, matching that back-to-front order.
    '''

    def __init__(self, number_of_objects):
        self.chunks = []
        self.length = 0
        self.distances = []
        self.next_reference = number_of_objects - 1

    def prepend(self, encoded):
        self.chunks.append(encoded)
        self.length += len(encoded)

    def assign_reference(self):
        '''
        Log the position of the object most recently prepended and return its
        reference.
        '''
        if self.next_reference < 0:
            raise ValueError('more objects emitted than counted')
        self.distances.append(self.length)
        reference = self.next_reference
        self.next_reference -= 1
        return reference

    def finalize(self):
        '''Return the complete object table and its offsets, by reference.'''
        if self.next_reference != -1:
            raise ValueError('%d counted objects were never emitted'
                             % (self.next_reference + 1))
        self.chunks.append(MAGIC)
        table = b''.join(reversed(self.chunks))
        offsets = [len(table) - distance
                   for distance in reversed(self.distances)]
        return table, offsets


class BinaryPlistTableHandler(object):
    def get_offset_size(self, offsets):
        '''
        Return the width of the offset table entries: the regulated width of
        the largest offset, rounded up to 1, 2, 4 or 8 bytes.
        '''
        return 1 << round_up_width(get_byte_width(max(offsets)))

    def decode(self, data, offset_size, length, table_offset):
        end = table_offset + offset_size * length
        if end > len(data) - TRAILER_SIZE:
            raise FormatError('offset table runs into the trailer')
        raw = data[table_offset:end]
        offsets = [decode_unsigned(raw[index:index + offset_size])
                   for index in range(0, len(raw), offset_size)]
        for offset in offsets:
            if not len(MAGIC) <= offset < table_offset:
                raise FormatError('object offset %d outside of the object '
                                  'table' % offset)
        return offsets

    def encode(self, offsets, offset_size):
        return b''.join(encode_unsigned(offset, offset_size)
                        for offset in offsets)


class BinaryPlistTrailerHandler(object):
    def __init__(self):
        self.format = '>6xBBQQQ'

    def decode(self, data):
        '''
        Return offset size, reference size, object count, top object and
        offset table offset from the last 32 bytes of data.
        '''
        try:
            trailer = unpack(self.format, data[-TRAILER_SIZE:])
        except struct_error as error:
            raise FormatError('truncated trailer') from error
        offset_size, reference_size, length, root, table_offset = trailer
        if not 1 <= offset_size <= 8:
            raise FormatError('invalid offset size %d' % offset_size)
        if not 1 <= reference_size <= 8:
            raise FormatError('invalid reference size %d' % reference_size)
        if length < 1:
            raise FormatError('plist contains no objects')
        if root >= length:
            raise FormatError('top object %d outside of %d objects'
                              % (root, length))
        if not len(MAGIC) < table_offset <= len(data) - TRAILER_SIZE:
            raise FormatError('invalid offset table offset %d' % table_offset)
        return trailer

    def encode(self, offset_size, reference_size, number_of_objects,
               table_offset):
        root_object = 0
        return pack(self.format, offset_size, reference_size,
                    number_of_objects, root_object, table_offset)
