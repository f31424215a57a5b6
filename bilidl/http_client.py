#!/usr/bin/env python3
"""
HTTP client which sends cookies from our own cookie jar
"""

import json
import logging
import random
from urllib.parse import urlparse

from curl_cffi import CurlError
from curl_cffi import requests as cffi_requests

from .cookies import Cookie, CookieJar
from .errors import MalformedResponse, RemoteError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "zh-CN,zh;q=0.8",
    "Connection": "keep-alive",
}


def parse_envelope(response):
    """Check an API response ``{code, message, data}`` and return ``data``

    Raises:
        TransportError: HTTP status is 400 or above
        MalformedResponse: body is not a JSON object with an integer code
        RemoteError: code is not 0
    """
    if response.status_code >= 400:
        raise TransportError(f"HTTP {response.status_code} from {getattr(response, 'url', 'API')}",
                             status=response.status_code)
    try:
        obj = json.loads(response.text)
    except ValueError as e:
        raise MalformedResponse(f"Can not parse as JSON: {e}") from e
    if not isinstance(obj, dict):
        raise MalformedResponse("API response is not an object.")
    code = obj.get('code')
    if isinstance(code, bool) or not isinstance(code, int):
        raise MalformedResponse("Error: code return from API is not an integer.")
    if code != 0:
        raise RemoteError(code, obj.get('message') or "")
    return obj.get('data')


def _param_value(v):
    return v if isinstance(v, str) else json.dumps(v, ensure_ascii=False)


class CookieClient:
    """curl_cffi session + CookieJar

    Every request carries the Cookie header built from the jar entries
    matching the request URL.
    """

    def __init__(self, jar=None, headers=None, timeout=30, capture_cookies=False):
        self.jar = CookieJar(jar or [])
        self.capture_cookies = capture_cookies
        self.timeout = timeout
        self.headers = dict(DEFAULT_HEADERS)
        if headers:
            self.headers.update(headers)
        self.session = cffi_requests.Session(
            impersonate=random.choice(["chrome124", "chrome119", "chrome104"]),
            headers=self.headers,
        )

    def set_cookie_jar(self, jar):
        self.jar = CookieJar(jar)

    def get_cookie(self, name):
        """Get a cookie's value from the jar"""
        c = self.jar.get(name)
        return c.value if c else None

    def handle_set_cookie(self, response):
        """Merge cookies set by ``response`` into the jar"""
        parsed = urlparse(str(response.url))
        for c in response.cookies.jar:
            self.jar.add(Cookie(
                name=c.name,
                value=c.value or "",
                domain=c.domain or parsed.hostname,
                path=c.path or parsed.path or "/",
            ))

    def get(self, url, params=None, headers=None):
        """Send a GET request

        Raises:
            TransportError: the request could not be completed
        """
        request_headers = dict(headers or {})
        cookie = self.jar.header(url)
        if cookie:
            request_headers["Cookie"] = cookie
        logger.debug("GET %s %s", url, params or "")
        try:
            response = self.session.get(url, params=params, headers=request_headers,
                                        timeout=self.timeout)
        except CurlError as e:
            raise TransportError(f"Error when request: {e}") from e
        if self.capture_cookies:
            self.handle_set_cookie(response)
        return response

    def get_with_params(self, url, params):
        """Send a GET request with query parameters

        Non-string values are dumped as JSON, e.g. ``{"a": {"b": 1}}`` becomes ``a=%7B%22b%22%3A+1%7D``.
        """
        return self.get(url, params={k: _param_value(v) for k, v in params.items()})

    def get_text(self, url, headers=None):
        response = self.get(url, headers=headers)
        if response.status_code >= 400:
            raise TransportError(f"Error when getting {url}: HTTP {response.status_code}",
                                 status=response.status_code)
        return response.text

    def get_json(self, url, params):
        return parse_envelope(self.get_with_params(url, params))
