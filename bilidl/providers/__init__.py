from .base import Provider
from .bilibili import BiliBaseProvider, BiliNormalVideoProvider
from .tiktok import TiktokVideoProvider

PROVIDERS = [BiliNormalVideoProvider, TiktokVideoProvider]


def match_provider(url):
    """Return the first provider class which accepts ``url``, or None"""
    for provider in PROVIDERS:
        if provider.match_url(url):
            return provider
    return None


__all__ = ['Provider', 'BiliBaseProvider', 'BiliNormalVideoProvider', 'TiktokVideoProvider',
           'PROVIDERS', 'match_provider']
