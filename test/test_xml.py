#!/usr/bin/env python
# encoding: utf-8
"""Tests for the XML plist reader and writer."""

from datetime import datetime, timezone
import plistlib
import unittest
import plistcodec as pc


UTC = timezone.utc


def document(body):
    return ('<?xml version="1.0" encoding="UTF-8"?>\n'
            '<!DOCTYPE plist PUBLIC "-//Apple Computer//DTD PLIST 1.0//EN" '
            '"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
            '<plist version="1.0">%s</plist>\n' % body).encode('utf-8')


class ReadTests(unittest.TestCase):

    def test_integer_dictionary(self):
        result = pc.read_xml(b'<plist version="1.0"><dict><key>n</key>'
                             b'<integer>42</integer></dict></plist>')
        self.assertEqual({'n': 42}, result)

    def test_scalars(self):
        cases = [
            ('<string>hello</string>', 'hello'),
            ('<string></string>', ''),
            ('<string/>', ''),
            ('<string> padded </string>', ' padded '),
            ('<integer>-17</integer>', -17),
            ('<integer> 8 </integer>', 8),
            ('<real>2.5</real>', 2.5),
            ('<real>1e3</real>', 1000.0),
            ('<true/>', True),
            ('<false/>', False),
            ('<null/>', None),
            ('<data>AAEC/w==</data>', b'\x00\x01\x02\xff'),
            ('<data>\n\tAAEC\n\t/w==\n</data>', b'\x00\x01\x02\xff'),
            ('<data></data>', b''),
        ]
        for body, expected in cases:
            result = pc.read_xml(document(body))
            self.assertEqual(expected, result, body)
            self.assertIs(type(expected), type(result), body)

    def test_dates(self):
        cases = [
            ('2001-01-01T00:00:00Z', datetime(2001, 1, 1, tzinfo=UTC)),
            ('2038-01-19T00:00:00Z', datetime(2038, 1, 19, tzinfo=UTC)),
            ('2010-06-01T12:00:00+02:00',
             datetime(2010, 6, 1, 10, 0, tzinfo=UTC)),
            ('2010-06-01T12:00:00', datetime(2010, 6, 1, 12, 0, tzinfo=UTC)),
        ]
        for text, expected in cases:
            result = pc.read_xml(document('<date>%s</date>' % text))
            self.assertEqual(expected, result)
            self.assertEqual(UTC, result.tzinfo)

    def test_nested(self):
        body = ('<dict>'
                '  <key>list</key>'
                '  <array><integer>1</integer><string>two</string>'
                '    <array/></array>'
                '  <key>inner</key>'
                '  <dict><key>flag</key><true/></dict>'
                '</dict>')
        result = pc.read_xml(document(body))
        self.assertEqual({'list': [1, 'two', []], 'inner': {'flag': True}},
                         result)

    def test_key_order(self):
        body = ('<dict><key>z</key><integer>1</integer>'
                '<key>a</key><integer>2</integer>'
                '<key>m</key><integer>3</integer></dict>')
        self.assertEqual(['z', 'a', 'm'], list(pc.read_xml(document(body))))

    def test_nulls_are_dropped(self):
        body = ('<dict><key>a</key><null/><key>b</key>'
                '<array><null/><integer>1</integer><null/></array></dict>')
        self.assertEqual({'b': [1]}, pc.read_xml(document(body)))

    def test_str_source(self):
        result = pc.read_xml('<plist version="1.0"><string>ünï</string>'
                             '</plist>')
        self.assertEqual('ünï', result)

    def test_plistlib_output(self):
        value = {'name': 'x', 'items': [1, 2.5, True, False, b'\x00\x01'],
                 'when': datetime(2015, 10, 21, 7, 28),
                 'nested': {'deep': ['a', 'b']}}
        result = pc.read_xml(plistlib.dumps(value, sort_keys=False))
        value['when'] = value['when'].replace(tzinfo=UTC)
        self.assertTrue(pc.values_equal(value, result))


class MalformedInputTests(unittest.TestCase):

    def test_odd_dictionary(self):
        body = ('<dict><key>a</key><integer>1</integer>'
                '<key>b</key></dict>')
        self.assertRaises(pc.FormatError, pc.read_xml, document(body))

    def test_missing_key(self):
        body = '<dict><string>a</string><integer>1</integer></dict>'
        self.assertRaises(pc.FormatError, pc.read_xml, document(body))

    def test_duplicate_key(self):
        body = ('<dict><key>a</key><integer>1</integer>'
                '<key>a</key><integer>2</integer></dict>')
        self.assertRaises(pc.FormatError, pc.read_xml, document(body))

    def test_unknown_tag(self):
        with self.assertRaises(pc.FormatError) as context:
            pc.read_xml(document('<set><integer>1</integer></set>'))
        self.assertIn('set', str(context.exception))

    def test_bad_values(self):
        for body in ('<integer>4x2</integer>', '<integer>1.5</integer>',
                     '<integer></integer>', '<real>one</real>',
                     '<date>yesterday</date>', '<data>a</data>'):
            self.assertRaises(pc.FormatError, pc.read_xml, document(body))

    def test_bad_documents(self):
        for data in (b'', b'not xml at all', b'<plist><string>x</plist>',
                     b'<dict></dict>', b'<plist version="1.0"></plist>',
                     b'<plist><true/><false/></plist>'):
            self.assertRaises(pc.FormatError, pc.read_xml, data)


class WriteTests(unittest.TestCase):

    def test_header(self):
        data = pc.write_xml('x')
        self.assertTrue(data.startswith(
            b'<?xml version="1.0" encoding="UTF-8"?>\n'
            b'<!DOCTYPE plist PUBLIC "-//Apple Computer//DTD PLIST 1.0//EN" '
            b'"http://www.apple.com/DTDs/PropertyList-1.0.dtd">\n'
            b'<plist version="1.0">'))
        self.assertIn(b'<string>x</string>', data)

    def test_elements(self):
        data = pc.write_xml([True, False, None, 7, 1.5, b'\x00\x01\x02\xff',
                             datetime(2001, 1, 1, tzinfo=UTC)])
        for fragment in (b'<true', b'<false', b'<null', b'<integer>7</integer>',
                         b'<real>1.5</real>', b'<data>AAEC/w==</data>',
                         b'<date>2001-01-01T00:00:00Z</date>'):
            self.assertIn(fragment, data)

    def test_dictionary_order(self):
        data = pc.write_xml({'b': 1, 'a': 2})
        self.assertLess(data.index(b'<key>b</key>'), data.index(b'<key>a</key>'))

    def test_escaping(self):
        value = {'<&>': 'a < b & "c"'}
        self.assertEqual(value, through_string(value))

    def test_unsupported(self):
        for value in (object(), {1, 2}, [1, 1j], {'a': object()}):
            self.assertRaises(pc.UnsupportedValueError, pc.write_xml, value)

    def test_non_string_key(self):
        self.assertRaises(pc.UnsupportedValueError, pc.write_xml, {1: 'a'})

    def test_control_characters(self):
        for value in ('a\x01b', '\x00', ['\x1f'], {'k\x0b': 'v'},
                      {'k': '\x0c'}, '\ufffe'):
            self.assertRaises(pc.UnsupportedValueError, pc.write_xml, value)
            self.assertRaises(pc.UnsupportedValueError, pc.dumps, value)

    def test_lone_surrogate(self):
        self.assertRaises(pc.UnsupportedValueError, pc.write_xml, '\ud800')
        self.assertRaises(pc.UnsupportedValueError, pc.write_xml,
                          {'\udfff': 1})

    def test_allowed_whitespace(self):
        value = {'a\rb': 'line\r\nbreak\ttab\rend'}
        data = pc.write_xml(value)
        self.assertNotIn(b'\r', data)
        self.assertIn(b'&#13;', data)
        self.assertEqual(value, through_string(value))
        self.assertEqual(value, plistlib.loads(data))

    def test_date_whole_seconds(self):
        value = datetime(2001, 1, 1, 0, 0, 0, 500000, tzinfo=UTC)
        data = pc.write_xml(value)
        self.assertIn(b'<date>2001-01-01T00:00:00Z</date>', data)
        self.assertEqual(value.replace(microsecond=0), pc.read_xml(data))
        self.assertEqual(datetime(2001, 1, 1), plistlib.loads(data))

    def test_read_by_plistlib(self):
        value = {'name': 'wörld', 'items': [1, -2, 2.5, True, b'\x00'],
                 'when': datetime(2020, 2, 29, 12, 0, 0, tzinfo=UTC)}
        result = plistlib.loads(pc.write_xml(value))
        value['when'] = value['when'].replace(tzinfo=None)
        self.assertEqual(value, result)


class RoundTripTests(unittest.TestCase):

    def test_values(self):
        values = [
            'text', '', 'ünïcödé 😀', 0, -1, 2 ** 40, 0.1, -2.5e-10, True,
            False, b'', b'\x00\xff' * 50,
            datetime(2001, 1, 1, tzinfo=UTC),
            datetime(1969, 7, 20, 20, 17, 40, tzinfo=UTC),
            [], {}, [1, [2, [3, [4]]]],
            {'z': {'y': {'x': 'w'}}, 'list': ['a', {'b': b'c'}]},
        ]
        for value in values:
            result = through_string(value)
            self.assertTrue(pc.values_equal(value, result), value)

    def test_top_level_null(self):
        self.assertIsNone(through_string(None))


def through_string(value):
    return pc.loads(pc.dumps(value), binary=False)


if __name__ == '__main__':
    unittest.main()
