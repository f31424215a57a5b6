from bilidl.metadata import ExtractInfo, NoInTotal, VideoInfo, VideoMetadata


def test_no_in_total():
    assert NoInTotal.create(0, 3) is None
    assert NoInTotal.create(4, 3) is None
    track = NoInTotal.create(3, 3)
    assert (track.no, track.total) == (3, 3)


def test_check():
    assert not ExtractInfo().check()
    assert not ExtractInfo(videos=[VideoInfo()]).check()
    assert ExtractInfo(videos=[VideoInfo(url="https://a/1.mp4")]).check()


def test_summary_leaves_out_cookies():
    info = ExtractInfo(videos=[VideoInfo(
        meta=VideoMetadata(title="t", tags=["a"]),
        url="https://a/1.mp4",
        cookies=object(),
    )])
    summary = info.summary()
    assert summary[0]["title"] == "t"
    assert summary[0]["meta"]["tags"] == ["a"]
    assert "cookies" not in summary[0]
