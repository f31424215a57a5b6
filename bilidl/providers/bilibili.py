#!/usr/bin/env python3
"""
bilibili providers
Normal video pages, including multi part and interactive videos
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from ..codec import av_to_bv, bv_to_av, normalize_bv
from ..errors import DecodeError, MalformedResponse, ProviderError, TransportError
from ..http_client import USER_AGENT, CookieClient
from ..interaction import InteractionVideoParser
from ..metadata import ExtractInfo, NoInTotal, VideoInfo, VideoMetadata
from ..part_info import PartInfoList
from ..parts import PartRange, parse_json, parse_list, select_parts
from ..scrape import extract_script_vars, load_leading_json
from ..utils import to_uint
from ..webdriver import WebDriverLogin
from .base import Provider

logger = logging.getLogger(__name__)

NAV_API = "https://api.bilibili.com/x/web-interface/nav"
PAGELIST_API = "https://api.bilibili.com/x/player/pagelist"
PLAYER_API = "https://api.bilibili.com/x/player/v2"
PLAYURL_API = "https://api.bilibili.com/x/player/playurl"
VIDEO_PAGE = "https://www.bilibili.com/video/{}"
PLAYINFO = "window.__playinfo__"
INITIAL_STATE = "window.__INITIAL_STATE__"
# 1080P
DEFAULT_QUALITY = 80

RE = re.compile(r'^(av(?P<av>\d+)|(?P<bv>bv[a-z0-9]{9,10}))$', re.IGNORECASE)
RE2 = re.compile(
    r'^(?:https?://)?(?:[a-z0-9-]+\.)*bilibili\.com(?:/s)?/video/(av(?P<av>\d+)|(?P<bv>bv[a-z0-9]{9,10}))'
    r'(\?.*?p=(?P<part>[^&]+)&?.*)?$', re.IGNORECASE)
RE3 = re.compile(
    r'^(?:https?://)?(?:[a-z0-9-]+\.)*b23\.tv/(av(?P<av>\d+)|(?P<bv>bv[a-z0-9]{9,10}))'
    r'(\?.*?p=(?P<part>[^&]+)&?.*)?$', re.IGNORECASE)


class UrlInfo(BaseModel):
    """Video identity taken from a URL"""
    av: int
    bv: str
    part: Optional[int] = None

    @classmethod
    def from_av(cls, av, part=None):
        return cls(av=av, bv=av_to_bv(av), part=part)

    @classmethod
    def from_bv(cls, bv, part=None):
        return cls(av=bv_to_av(bv), bv=normalize_bv(bv), part=part)


def _parse_part(value, strict):
    part = to_uint(value)
    if part is None or part == 0:
        if strict:
            raise DecodeError(f"Invalid part number: {value!r}")
        logger.warning("Ignored invalid part number in URL: %r", value)
        return None
    return part


def parse_url(url, strict_part=False):
    """Get the AV number, BV code and part number from a URL or a bare id

    Returns:
        UrlInfo or None if the URL is not a bilibili video

    Raises:
        DecodeError: only when ``strict_part`` is set and ``p=`` is not a positive integer
    """
    url = url.strip()
    for pattern in (RE, RE2, RE3):
        m = pattern.match(url)
        if not m:
            continue
        part = None
        if 'part' in m.groupdict() and m.group('part') is not None:
            part = _parse_part(m.group('part'), strict_part)
        try:
            if m.group('av') is not None:
                return UrlInfo.from_av(int(m.group('av')), part)
            return UrlInfo.from_bv(m.group('bv'), part)
        except DecodeError as e:
            logger.debug("Not a valid video id %s: %s", url, e)
            return None
    return None


def _timestamp(value):
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


class BiliBaseProvider(Provider):
    """Login state and HTTP client shared by bilibili providers"""

    name = "BiliBaseProvider"
    default_cookie_jar_name = "bili"
    can_login = True

    def __init__(self):
        super().__init__()
        self.client = None
        self.user_info = None

    def init(self, jar=None, options=None, settings=None):
        super().init(jar, options, settings)
        self.client = CookieClient(self.jar, headers={"Referer": "https://www.bilibili.com/"})

    def check_logined(self):
        try:
            response = self.client.get(NAV_API)
        except TransportError as e:
            logger.warning("Can not check login state: %s", e)
            return None
        if response.status_code != 200:
            return None
        try:
            obj = json.loads(response.text)
        except ValueError:
            return None
        code = obj.get('code') if isinstance(obj, dict) else None
        if isinstance(code, bool) or not isinstance(code, int):
            logger.warning("Error: code return from API is not an integer.")
            return None
        if code == 0:
            self.user_info = obj.get('data')
            return True
        if code == -101:
            return False
        logger.warning("Unknown condition: %s", response.text)
        return None

    @property
    def logined(self):
        return isinstance(self.user_info, dict) and self.user_info.get('isLogin') is True

    def login(self, jar):
        driver = WebDriverLogin(self.settings, self.options)
        for cookie in driver.login_bilibili():
            jar.add(cookie)
        self.jar = jar
        self.client.set_cookie_jar(jar)
        self.check_logined()
        return self.logined


class BiliNormalVideoProvider(BiliBaseProvider):
    name = "BiliNormalVideoProvider"

    def __init__(self):
        super().__init__()
        self.url = None
        # window.__INITIAL_STATE__
        self.video_info = None
        # window.__playinfo__
        self.play_info = None
        self.part_info = None
        # player/v2 data by cid
        self.cid_info = {}

    @classmethod
    def match_url(cls, url):
        return parse_url(url) is not None

    @property
    def video_data(self):
        return self.video_info.get('videoData') or {}

    def part_count(self):
        return to_uint(self.video_data.get('videos'))

    def use_story_list(self):
        value = self.options.get("no-use-storylist")
        if value is None and self.settings is not None:
            value = self.settings.get_bool(self.name, "no-use-storylist")
        return not value

    def fetch_page(self, bv):
        html = self.client.get_text(VIDEO_PAGE.format(bv))
        found = extract_script_vars(html, [PLAYINFO, INITIAL_STATE])
        if INITIAL_STATE not in found:
            raise MalformedResponse("Can not find video information in webpage.")
        info = load_leading_json(found[INITIAL_STATE])
        if not isinstance(info, dict) or not isinstance(info.get('videoData'), dict):
            raise MalformedResponse("Video information has no videoData.")
        self.video_info = info
        if PLAYINFO in found:
            try:
                self.play_info = load_leading_json(found[PLAYINFO])
            except MalformedResponse as e:
                logger.warning("Ignored %s: %s", PLAYINFO, e)

    def fetch_part_list(self, bv):
        try:
            return PartInfoList.from_api_array(self.video_data.get('pages'))
        except MalformedResponse as e:
            logger.info("Page list in webpage is unusable (%s), using API", e)
        pages = self.client.get_json(PAGELIST_API, {"bvid": bv, "jsonp": "jsonp"})
        return PartInfoList.from_api_array(pages)

    def get_cid_info(self, cid):
        data = self.client.get_json(PLAYER_API, {"aid": self.url.av, "bvid": self.url.bv, "cid": cid})
        if not isinstance(data, dict):
            raise MalformedResponse("Player information is not an object.")
        self.cid_info[cid] = data
        return data

    def is_interaction_video(self):
        info = self.cid_info.get(self.part_info.first_cid())
        return isinstance(info, dict) and isinstance(info.get('interaction'), dict)

    def basic_info(self, url):
        """Fetch the page, the part list and walk interactive videos"""
        self.url = url
        self.fetch_page(url.bv)
        self.part_info = self.fetch_part_list(url.bv)
        fcid = self.part_info.first_cid()
        self.get_cid_info(fcid)
        if self.is_interaction_video():
            graph_version = self.cid_info[fcid]['interaction'].get('graph_version')
            if to_uint(graph_version) is None:
                raise MalformedResponse("Interactive video has no graph version.")
            logger.info("%s is an interactive video", url.bv)
            parser = InteractionVideoParser(
                self.client,
                url.bv,
                to_uint(graph_version),
                part_list=self.part_info,
                buvid3=self.client.get_cookie("buvid3"),
                part_count=self.part_count(),
                use_story_list=self.use_story_list(),
            )
            self.part_info = parser.parse()

    def part_ranges(self):
        """--part > p= in URL > part setting > first part"""
        value = self.options.get("part")
        if value is not None:
            return parse_list(value)
        if self.url.part is not None:
            return [PartRange.of(self.url.part, self.url.part)]
        if self.settings is not None:
            value = self.settings.get(self.name, "part")
            if value is not None:
                return parse_json(value)
        return [PartRange.of(1, 1)]

    def gen_video_metadata(self, part):
        vd = self.video_data
        md = VideoMetadata()
        count = self.part_count()
        if count is not None:
            md.track = NoInTotal.create(part.page, count)
        md.extra['part'] = part.part
        title = vd.get('title')
        if isinstance(title, str):
            md.title = title if count is None or count == 1 else f"{title} - {part.part}"
            md.album = title
        if isinstance(vd.get('desc'), str):
            md.description = vd['desc']
        owner = vd.get('owner')
        if isinstance(owner, dict) and isinstance(owner.get('name'), str):
            md.author = owner['name']
            md.album_artist = owner['name']
        if isinstance(vd.get('bvid'), str):
            md.video_id = vd['bvid']
            md.extra['bvid'] = vd['bvid']
        pubdate = _timestamp(vd.get('pubdate'))
        if pubdate is not None:
            md.date = pubdate
            md.extra['pubdate'] = pubdate.isoformat()
        ctime = _timestamp(vd.get('ctime'))
        if ctime is not None:
            if md.date is None:
                md.date = ctime
            md.extra['ctime'] = ctime.isoformat()
        tags = self.video_info.get('tags')
        for tag in tags if isinstance(tags, list) else []:
            if isinstance(tag, dict) and isinstance(tag.get('tag_name'), str):
                md.tags.append(tag['tag_name'])
        aid = vd.get('aid')
        if isinstance(aid, int) and not isinstance(aid, bool):
            md.extra['aid'] = f"AV{aid}"
        return md

    def durl_from_play_info(self, cid):
        """Use window.__playinfo__ for the part shown by the page"""
        if cid != self.part_info.first_cid() or not isinstance(self.play_info, dict):
            return None
        data = self.play_info.get('data')
        if not isinstance(data, dict) or not isinstance(data.get('durl'), list):
            return None
        return data['durl']

    def get_play_urls(self, cid):
        durl = self.durl_from_play_info(cid)
        if durl is None:
            data = self.client.get_json(PLAYURL_API, {
                "bvid": self.url.bv,
                "cid": cid,
                "qn": DEFAULT_QUALITY,
                "fnval": 0,
                "fourk": 1,
            })
            durl = data.get('durl') if isinstance(data, dict) else None
        if not isinstance(durl, list) or not durl:
            raise MalformedResponse(f"Can not get playback url of cid {cid}.")
        urls = []
        for segment in durl:
            if not isinstance(segment, dict) or not isinstance(segment.get('url'), str):
                raise MalformedResponse(f"Unknown playback segment of cid {cid}.")
            urls.append(segment['url'])
        return urls

    def download_headers(self):
        return {
            "Referer": VIDEO_PAGE.format(self.url.bv),
            "User-Agent": self.client.headers.get("User-Agent", USER_AGENT),
        }

    def extract(self, url):
        info = parse_url(url)
        if info is None:
            raise ProviderError(f"Not a bilibili video: {url}")
        self.basic_info(info)
        selected = select_parts(self.part_info, self.part_ranges())
        if not selected:
            raise ProviderError("No part is selected.")
        cover = self.video_data.get('pic')
        result = ExtractInfo()
        for part in selected:
            meta = self.gen_video_metadata(part)
            urls = self.get_play_urls(part.cid)
            for i, play_url in enumerate(urls, start=1):
                m = meta
                if len(urls) > 1:
                    m = meta.model_copy(deep=True)
                    m.title = f"{meta.title or self.url.bv} - {i}"
                result.videos.append(VideoInfo(
                    meta=m,
                    url=play_url,
                    cover=cover if isinstance(cover, str) else None,
                    headers=self.download_headers(),
                    cookies=self.client.jar,
                ))
        return result
