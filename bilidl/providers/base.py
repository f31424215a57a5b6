#!/usr/bin/env python3
"""
Base class of video providers
"""

from ..cookies import CookieJar


class Provider:
    """A site which can turn a URL into an ExtractInfo

    Lifecycle: ``match_url`` -> ``init`` -> ``check_logined`` / ``login`` -> ``extract``
    """

    name = "Provider"
    default_cookie_jar_name = None
    can_login = False
    login_required = False

    def __init__(self):
        self.jar = CookieJar()
        self.options = {}
        self.settings = None

    @classmethod
    def match_url(cls, url):
        raise NotImplementedError

    def init(self, jar=None, options=None, settings=None):
        """Give the provider its cookies, command line options and settings"""
        if jar is not None:
            self.jar = jar
        self.options = options or {}
        self.settings = settings

    @property
    def logined(self):
        return False

    def check_logined(self):
        """True or False when known, None when it can not be told"""
        return None

    def login(self, jar):
        """Log in and put the new cookies into ``jar``"""
        raise NotImplementedError(f"{self.name} does not support login.")

    def extract(self, url):
        raise NotImplementedError
