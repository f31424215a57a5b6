#!/usr/bin/env python3
"""
Cookie jars and the cookies file

The cookies file keeps one jar per name (usually per site):
    {"bili": [{"name": "SESSDATA", "value": "...", "domain": ".bilibili.com", "path": "/"}]}
"""

import json
import logging
import os
from http.cookiejar import LoadError, MozillaCookieJar
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel

from .errors import CookieFileError
from .utils import get_data_dir

logger = logging.getLogger(__name__)

COOKIES_FILE_NAME = "bili.cookies.json"


def get_default_cookies_path():
    return os.path.join(get_data_dir(), COOKIES_FILE_NAME)


class Cookie(BaseModel):
    name: str
    value: str
    domain: Optional[str] = None
    path: Optional[str] = None

    def match(self, host, path):
        """Check whether this cookie should be sent to ``host`` + ``path``"""
        if self.domain:
            if self.domain.startswith('.'):
                d = self.domain[1:]
                if not host or not (host == d or host.endswith('.' + d)):
                    return False
            elif host != self.domain:
                return False
        if self.path and not self._path_match(path or '/'):
            return False
        return True

    def _path_match(self, path):
        if path == self.path or self.path.endswith('/'):
            return path.startswith(self.path)
        return path.startswith(self.path + '/')

    def to_json(self):
        return self.model_dump(exclude_none=True)


class CookieJar:
    """Cookies keyed by name, a later cookie replaces an earlier one"""

    def __init__(self, cookies=None):
        self.cookies = {}
        for c in cookies or []:
            self.add(c)

    def add(self, cookie):
        self.cookies[cookie.name] = cookie

    def get(self, name):
        return self.cookies.get(name)

    def __iter__(self):
        return iter(self.cookies.values())

    def __len__(self):
        return len(self.cookies)

    def update(self, other):
        for c in other:
            self.add(c)

    def matches(self, url):
        """Return cookies which apply to ``url``"""
        parsed = urlparse(url)
        host = parsed.hostname or ""
        path = parsed.path or "/"
        return [c for c in self if c.match(host, path)]

    def header(self, url):
        """Build the value of the Cookie header for ``url``"""
        return "; ".join(f"{c.name}={c.value}" for c in self.matches(url))

    def to_json(self):
        return [c.to_json() for c in self]

    @classmethod
    def from_json(cls, value):
        if not isinstance(value, list):
            raise CookieFileError("Cookie jar must be an array.")
        jar = cls()
        for item in value:
            if not isinstance(item, dict):
                raise CookieFileError(f"Unknown cookie: {item!r}")
            if 'name' not in item or 'value' not in item:
                raise CookieFileError(f"Cookie must have name and value: {item!r}")
            if not isinstance(item['name'], str) or not isinstance(item['value'], str):
                raise CookieFileError(f"Cookie's name or value is non-string: {item!r}")
            for key in ('domain', 'path'):
                if key in item and not isinstance(item[key], str):
                    raise CookieFileError(f"Cookie's {key} is non-string: {item!r}")
            jar.add(Cookie(name=item['name'], value=item['value'],
                           domain=item.get('domain'), path=item.get('path')))
        return jar

    @classmethod
    def from_netscape(cls, file_path):
        """Load a Netscape (cookies.txt) cookie file"""
        mozilla = MozillaCookieJar(file_path)
        try:
            mozilla.load(ignore_discard=True, ignore_expires=True)
        except (OSError, LoadError) as e:
            raise CookieFileError(f"Can not load cookie file {file_path}: {e}") from e
        jar = cls()
        for c in mozilla:
            jar.add(Cookie(name=c.name, value=c.value or "",
                           domain=c.domain or None, path=c.path or None))
        return jar


class CookiesFile:
    """All cookie jars stored in the cookies file"""

    def __init__(self):
        self.jars = {}

    def get(self, name):
        return self.jars.get(name)

    def add(self, name, jar):
        self.jars[name] = jar

    def read(self, file_path=None):
        """Read the cookies file, a missing default file gives no jars"""
        self.jars = {}
        path = file_path or get_default_cookies_path()
        if not os.path.exists(path):
            if file_path:
                raise CookieFileError(f"Can not load custom cookies file: {path}")
            return self
        try:
            with open(path, 'r', encoding='utf-8') as f:
                obj = json.load(f)
        except OSError as e:
            raise CookieFileError(f"Can not open cookies file: {path}") from e
        except ValueError as e:
            raise CookieFileError(f"Can not parse cookies file: {path}") from e
        if not isinstance(obj, dict):
            raise CookieFileError(f"Unknown cookies file: {path}")
        for name, value in obj.items():
            if not name:
                raise CookieFileError(f"The provider name should not be empty in cookies file: {path}")
            self.jars[name] = CookieJar.from_json(value)
        logger.debug("Loaded %d cookie jars from %s", len(self.jars), path)
        return self

    def save(self, file_path=None):
        path = file_path or get_default_cookies_path()
        data = {name: jar.to_json() for name, jar in self.jars.items()}
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise CookieFileError(f"Can not save cookies file: {path}") from e
        return path
