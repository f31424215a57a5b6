#!/usr/bin/env python3
"""
Exception types for bili-dl
Every failure in the extraction core is terminal for the current resolution
"""


class BiliError(Exception):
    """Base class of all bili-dl errors"""


class TransportError(BiliError):
    """Network failure or HTTP error status on a required fetch"""

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class RemoteError(BiliError):
    """The remote API answered with a non-zero code"""

    def __init__(self, code, message=""):
        super().__init__(f"{code} {message}".strip())
        self.code = code
        self.message = message


class MalformedResponse(BiliError):
    """A response (or embedded page data) does not have the expected shape"""


class ConsistencyError(BiliError):
    """The part list we built disagrees with the count reported by the site"""

    def __init__(self, expected, actual, message=None):
        if message is None:
            message = (f"Video information say there are {expected} parts, "
                       f"but only get {actual} parts.")
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class DecodeError(BiliError, ValueError):
    """Invalid short code or video id"""


class PartRangeError(BiliError, ValueError):
    """Invalid part selection"""


class PartRangeSyntaxError(PartRangeError):
    """Part selection does not match the range grammar"""


class PartRangeOrderError(PartRangeError):
    """Range start is bigger than range end"""

    def __init__(self, start, end):
        super().__init__(f"Part range start {start} is bigger than end {end}")
        self.start = start
        self.end = end


class SettingsError(BiliError):
    pass


class CookieFileError(BiliError):
    pass


class LoginError(BiliError):
    pass


class DownloadError(BiliError):
    pass


class ProviderError(BiliError):
    pass
