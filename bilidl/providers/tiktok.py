#!/usr/bin/env python3
"""
TikTok video provider
"""

import json
import logging
import re
from datetime import datetime, timezone

from ..errors import MalformedResponse, ProviderError, TransportError
from ..http_client import USER_AGENT, CookieClient
from ..metadata import ExtractInfo, VideoInfo, VideoMetadata
from ..scrape import extract_next_data
from ..utils import first_present
from .base import Provider

logger = logging.getLogger(__name__)

HOME_PAGE = "https://www.tiktok.com"
BLOCKED_PAGE = "https://www.tiktok.com/hk/notfound"

RE = re.compile(r'^(?:https?://)?(?:[a-z0-9-]+\.)*tiktok\.com/@(?P<name>[^\\/?]+)/video/(?P<id>\d+)(\?.*)?$',
                re.IGNORECASE)
RE2 = re.compile(r'^(?:https?://)?(?:[a-z0-9-]+\.)*tiktok\.com/i18n/share/video/(?P<id>\d+)(\?.*)?$',
                 re.IGNORECASE)


def parse_url(url):
    """Return (user name or None, video id), or None for other URLs"""
    url = url.strip()
    m = RE.match(url)
    if m:
        return m.group('name'), m.group('id')
    m = RE2.match(url)
    if m:
        return None, m.group('id')
    return None


def _str(obj, key):
    value = obj.get(key) if isinstance(obj, dict) else None
    return value if isinstance(value, str) else None


class TiktokVideoProvider(Provider):
    name = "TiktokVideoProvider"

    def __init__(self):
        super().__init__()
        self.client = None
        self.user_name = None
        self.video_id = None
        self.video_info = None

    @classmethod
    def match_url(cls, url):
        return parse_url(url) is not None

    def init(self, jar=None, options=None, settings=None):
        super().init(jar, options, settings)
        self.client = CookieClient(self.jar, capture_cookies=True)
        try:
            self.client.get(HOME_PAGE)
        except TransportError as e:
            logger.warning("Can not get cookies from %s: %s", HOME_PAGE, e)

    def page_url(self):
        if self.user_name is None:
            return f"https://t.tiktok.com/i18n/share/video/{self.video_id}"
        return f"https://www.tiktok.com/@{self.user_name}/video/{self.video_id}"

    def get_info(self):
        response = self.client.get(self.page_url())
        if str(response.url) == BLOCKED_PAGE:
            raise ProviderError("Hong Kong was blocked by tiktok.")
        if response.status_code >= 400:
            raise TransportError(f"Can not get video page: {response.status_code}",
                                 status=response.status_code)
        text = extract_next_data(response.text)
        if text is None:
            raise MalformedResponse("Can not get video information from page.")
        try:
            self.video_info = json.loads(text)
        except ValueError as e:
            raise MalformedResponse(f"Can not parse video information: {e}") from e

    @property
    def page_props(self):
        props = (self.video_info or {}).get('props')
        page_props = props.get('pageProps') if isinstance(props, dict) else None
        if not isinstance(page_props, dict):
            raise MalformedResponse("Can not get metadata from video information.")
        return page_props

    @property
    def item_struct(self):
        item = self.page_props.get('itemInfo')
        item = item.get('itemStruct') if isinstance(item, dict) else None
        return item if isinstance(item, dict) else {}

    def gen_metadata(self):
        props = self.page_props
        m = VideoMetadata()
        seo = props.get('seoProps')
        title = _str(seo.get('metaParams') if isinstance(seo, dict) else None, 'title')
        item = self.item_struct
        if title is None:
            title = _str(item, 'desc')
        m.title = title
        m.description = title
        create_time = item.get('createTime')
        if isinstance(create_time, str) and create_time.isdigit():
            create_time = int(create_time)
        if isinstance(create_time, int) and not isinstance(create_time, bool):
            m.date = datetime.fromtimestamp(create_time, tz=timezone.utc)
            m.extra['createTime'] = m.date.isoformat()
        author = item.get('author')
        m.author = _str(author, 'nickname')
        for key, name in (('uniqueId', 'authorUniqueId'), ('id', 'authorId'), ('signature', 'authorSignature')):
            value = _str(author, key)
            if value is not None:
                m.extra[name] = value
        m.video_id = _str(item, 'id')
        challenges = item.get('challenges')
        for c in challenges if isinstance(challenges, list) else []:
            t = _str(c, 'title')
            if t is not None:
                m.tags.append(t)
        return m

    def extract_play_info(self, info):
        video = self.item_struct.get('video')
        if not isinstance(video, dict):
            raise MalformedResponse("Can not get playback url from video information.")
        cover = first_present(video, ['originCover', 'cover'])
        if isinstance(cover, str):
            info.cover = cover
        url = first_present(video, ['downloadAddr', 'playAddr'])
        if not isinstance(url, str) or not url:
            raise MalformedResponse("Can not get playback url from video information.")
        info.url = url

    def extract(self, url):
        parsed = parse_url(url)
        if parsed is None:
            raise ProviderError(f"Not a tiktok video: {url}")
        self.user_name, self.video_id = parsed
        self.get_info()
        info = VideoInfo(
            meta=self.gen_metadata(),
            headers={"Referer": HOME_PAGE + "/", "User-Agent": USER_AGENT},
            cookies=self.client.jar,
        )
        self.extract_play_info(info)
        return ExtractInfo(videos=[info])
