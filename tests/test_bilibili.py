import json

import pytest

from bilidl.errors import DecodeError, MalformedResponse, ProviderError
from bilidl.interaction import EDGE_INFO_API
from bilidl.providers import BiliNormalVideoProvider, TiktokVideoProvider, match_provider
from bilidl.providers.bilibili import (PAGELIST_API, PLAYER_API, PLAYURL_API, UrlInfo,
                                       parse_url)
from bilidl.settings import SettingStore

from fakes import FakeResponse, envelope


class TestParseUrl:
    def test_bare_ids(self):
        assert parse_url("av170001") == UrlInfo(av=170001, bv="BV17x411w7KC")
        assert parse_url("BV1xx411c7mC") == UrlInfo(av=9, bv="BV1xx411c7mC")

    def test_malformed_code(self):
        assert parse_url("BV2331") is None

    def test_full_url(self):
        assert parse_url("https://www.bilibili.com/video/BV1nh411B7G5") == \
            UrlInfo(av=207281893, bv="BV1nh411B7G5")

    def test_part_query(self):
        info = parse_url("https://www.bilibili.com/video/av170001?test3&p=2&d")
        assert info == UrlInfo(av=170001, bv="BV17x411w7KC", part=2)

    def test_unparseable_part_is_dropped(self):
        info = parse_url("https://www.bilibili.com/video/av170001?test3&p=3f&d")
        assert info == UrlInfo(av=170001, bv="BV17x411w7KC", part=None)
        info = parse_url("https://www.bilibili.com/video/av170001?p=²")
        assert info == UrlInfo(av=170001, bv="BV17x411w7KC", part=None)

    def test_unparseable_part_strict(self):
        with pytest.raises(DecodeError):
            parse_url("https://www.bilibili.com/video/av170001?p=3f", strict_part=True)

    def test_short_link(self):
        assert parse_url("https://b23.tv/av170001?test3&p=2&d") == \
            UrlInfo(av=170001, bv="BV17x411w7KC", part=2)

    def test_other_sites(self):
        assert parse_url("https://www.youtube.com/watch?v=abc") is None
        assert parse_url("https://www.bilibili.com/bangumi/play/ep1") is None


def test_match_provider():
    assert match_provider("av170001") is BiliNormalVideoProvider
    assert match_provider("https://www.tiktok.com/@someone/video/6900000000000000000") is TiktokVideoProvider
    assert match_provider("https://example.com/") is None
    assert match_provider("https://www.bilibili.com/video/av170001?p=²") is BiliNormalVideoProvider


def page_html(video_data, tags=None, playinfo=None):
    state = {"videoData": video_data, "tags": tags or []}
    scripts = [f"<script>window.__INITIAL_STATE__={json.dumps(state)};"
               "(function(){var s;(s=document.currentScript).parentNode.removeChild(s);}());</script>"]
    if playinfo is not None:
        scripts.append(f"<script>window.__playinfo__={json.dumps(playinfo)}</script>")
    return f"<html><head>{''.join(scripts)}</head><body></body></html>"


class FakeBiliClient:
    def __init__(self, html, api, edges=None):
        self.html = html
        self.api = api
        self.edges = edges or {}
        self.jar = None
        self.headers = {"User-Agent": "test-agent"}
        self.json_calls = []
        self.edge_calls = []

    def get_text(self, url, headers=None):
        return self.html

    def get_json(self, url, params):
        self.json_calls.append((url, dict(params)))
        value = self.api[url]
        if callable(value):
            value = value(params)
        return value

    def get_with_params(self, url, params):
        assert url == EDGE_INFO_API
        self.edge_calls.append(dict(params))
        return envelope(self.edges[params.get("edge_id")])

    def get_cookie(self, name):
        return "buvid" if name == "buvid3" else None


VIDEO_DATA = {
    "bvid": "BV17x411w7KC",
    "aid": 170001,
    "videos": 2,
    "title": "Title",
    "desc": "Description",
    "pic": "https://i0.hdslb.com/cover.jpg",
    "owner": {"name": "Owner"},
    "pubdate": 1600000000,
    "ctime": 1500000000,
    "pages": [
        {"cid": 11, "page": 1, "part": "First", "duration": 10},
        {"cid": 12, "page": 2, "part": "Second", "duration": 20},
    ],
}


def playurl(params):
    return {"durl": [{"url": f"https://upos.example.com/{params['cid']}.flv"}]}


def make_provider(html, api, edges=None, options=None, settings=None):
    provider = BiliNormalVideoProvider()
    provider.options = options or {}
    provider.settings = settings
    provider.client = FakeBiliClient(html, api, edges)
    return provider


def test_extract_selected_part_from_url():
    provider = make_provider(page_html(VIDEO_DATA, tags=[{"tag_name": "game"}]),
                             {PLAYER_API: {}, PLAYURL_API: playurl})
    info = provider.extract("https://www.bilibili.com/video/av170001?p=2")
    assert len(info.videos) == 1
    video = info.videos[0]
    assert video.url == "https://upos.example.com/12.flv"
    assert video.cover == "https://i0.hdslb.com/cover.jpg"
    assert video.headers["Referer"] == "https://www.bilibili.com/video/BV17x411w7KC"
    meta = video.meta
    assert meta.title == "Title - Second"
    assert meta.album == "Title"
    assert meta.author == meta.album_artist == "Owner"
    assert meta.video_id == "BV17x411w7KC"
    assert (meta.track.no, meta.track.total) == (2, 2)
    assert meta.tags == ["game"]
    assert meta.date.year == 2020
    assert meta.extra["aid"] == "AV170001"
    assert meta.extra["part"] == "Second"
    assert "ctime" in meta.extra
    playurl_call = [c for c in provider.client.json_calls if c[0] == PLAYURL_API][0]
    assert playurl_call[1]["cid"] == 12
    assert playurl_call[1]["fnval"] == 0


def test_part_option_wins():
    provider = make_provider(page_html(VIDEO_DATA), {PLAYER_API: {}, PLAYURL_API: playurl},
                             options={"part": "-"})
    info = provider.extract("https://www.bilibili.com/video/av170001?p=2")
    assert [v.url for v in info.videos] == ["https://upos.example.com/11.flv",
                                            "https://upos.example.com/12.flv"]


def test_part_setting_and_default():
    settings = SettingStore()
    settings.set_value("BiliNormalVideoProvider", "part", [2])
    provider = make_provider(page_html(VIDEO_DATA), {PLAYER_API: {}, PLAYURL_API: playurl},
                             settings=settings)
    assert provider.extract("av170001").videos[0].meta.extra["part"] == "Second"
    provider = make_provider(page_html(VIDEO_DATA), {PLAYER_API: {}, PLAYURL_API: playurl})
    assert provider.extract("av170001").videos[0].meta.extra["part"] == "First"


def test_no_part_selected():
    provider = make_provider(page_html(VIDEO_DATA), {PLAYER_API: {}, PLAYURL_API: playurl},
                             options={"part": "5"})
    with pytest.raises(ProviderError):
        provider.extract("av170001")


def test_single_part_title_and_segments():
    data = dict(VIDEO_DATA, videos=1, pages=[{"cid": 11, "page": 1, "part": "Only"}])
    api = {PLAYER_API: {}, PLAYURL_API: {"durl": [{"url": "https://a/1.flv"}, {"url": "https://a/2.flv"}]}}
    info = make_provider(page_html(data), api).extract("av170001")
    assert [v.meta.title for v in info.videos] == ["Title - 1", "Title - 2"]
    assert info.videos[0].meta.album == "Title"


def test_playinfo_of_first_part_saves_request():
    playinfo = {"code": 0, "data": {"durl": [{"url": "https://a/page.flv"}]}}
    provider = make_provider(page_html(VIDEO_DATA, playinfo=playinfo), {PLAYER_API: {}})
    info = provider.extract("av170001")
    assert info.videos[0].url == "https://a/page.flv"


def test_page_list_fallback_api():
    data = dict(VIDEO_DATA, pages=None)
    api = {
        PLAYER_API: {},
        PLAYURL_API: playurl,
        PAGELIST_API: [{"cid": 21, "page": 1, "part": "From API"}],
    }
    provider = make_provider(page_html(data), api)
    info = provider.extract("av170001")
    assert info.videos[0].url == "https://upos.example.com/21.flv"


def test_missing_initial_state():
    provider = make_provider("<html><script>var a=1;</script></html>", {})
    with pytest.raises(MalformedResponse):
        provider.extract("av170001")


def test_interactive_video():
    data = dict(VIDEO_DATA, videos=2, pages=[{"cid": 11, "page": 1, "part": "Start"}])
    root = {
        "title": "Start",
        "edge_id": 1,
        "story_list": [{"edge_id": 1, "cid": 11, "title": "Start"}],
        "edges": {"questions": [{"choices": [{"id": 2, "cid": 12, "option": "go", "native_action": "x"}]}]},
    }
    second = {
        "title": "End",
        "edge_id": 2,
        "story_list": [{"edge_id": 1, "cid": 11}, {"edge_id": 2, "cid": 12}],
        "edges": {},
    }
    api = {PLAYER_API: {"interaction": {"graph_version": 7}}, PLAYURL_API: playurl}
    provider = make_provider(page_html(data), api, edges={None: root, 2: second},
                             options={"part": "-"})
    info = provider.extract("av170001")
    assert [v.meta.extra["part"] for v in info.videos] == ["Start", "End"]
    assert provider.client.edge_calls[0]["graph_version"] == 7
    assert provider.client.edge_calls[0]["buvid3"] == "buvid"


def test_not_a_bilibili_url():
    with pytest.raises(ProviderError):
        BiliNormalVideoProvider().extract("https://example.com/")


class NavClient:
    def __init__(self, response):
        self.response = response

    def get(self, url, params=None, headers=None):
        return self.response


@pytest.mark.parametrize("body, expected, logined", [
    ({"code": 0, "data": {"isLogin": True, "uname": "me"}}, True, True),
    ({"code": -101, "message": "not logged in", "data": {"isLogin": False}}, False, False),
    ({"code": -412, "message": "blocked"}, None, False),
    ({"code": "0"}, None, False),
])
def test_check_logined(body, expected, logined):
    provider = BiliNormalVideoProvider()
    provider.client = NavClient(FakeResponse(body))
    assert provider.check_logined() is expected
    assert provider.logined is logined


def test_check_logined_http_error():
    provider = BiliNormalVideoProvider()
    provider.client = NavClient(FakeResponse("", status_code=503))
    assert provider.check_logined() is None
