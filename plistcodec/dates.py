# encoding: utf-8
'''
Conversion between datetimes and Apple timestamps, the seconds elapsed since
2001-01-01T00:00:00Z that both plist formats are based on.
'''

from datetime import datetime, timedelta, timezone


APPLE_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)
# seconds between 1 Jan 1970 and 1 Jan 2001
APPLE_EPOCH_OFFSET = 978307200


def as_utc(date):
    '''Return date as an aware UTC datetime. Naive values are taken as UTC.'''
    if date.tzinfo is None:
        return date.replace(tzinfo=timezone.utc)
    return date.astimezone(timezone.utc)


def to_apple_seconds(date):
    '''
    Return the whole seconds between the Apple epoch and date, as a float.
    Sub-second precision is floored away.
    '''
    return float((as_utc(date) - APPLE_EPOCH) // timedelta(seconds=1))


def from_apple_seconds(seconds):
    '''Return the aware UTC datetime lying seconds after the Apple epoch.'''
    return APPLE_EPOCH + timedelta(seconds=seconds)


def unix_to_apple(unix_time):
    '''Convert seconds since the Unix epoch to seconds since the Apple one.'''
    return unix_time - APPLE_EPOCH_OFFSET


def apple_to_unix(apple_time):
    '''Convert seconds since the Apple epoch to seconds since the Unix one.'''
    return apple_time + APPLE_EPOCH_OFFSET
