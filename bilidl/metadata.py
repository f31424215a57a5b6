#!/usr/bin/env python3
"""
Extraction results handed to the downloaders
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NoInTotal(BaseModel):
    """Current number in a total, e.g. part 2 of 5"""
    no: int
    total: int

    @classmethod
    def create(cls, no, total):
        """Return None unless 1 <= no <= total"""
        if no < 1 or no > total:
            return None
        return cls(no=no, total=total)


class VideoMetadata(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    # Series name
    album: Optional[str] = None
    album_artist: Optional[str] = None
    video_id: Optional[str] = None
    track: Optional[NoInTotal] = None
    tags: List[str] = Field(default_factory=list)
    date: Optional[datetime] = None
    comment: Optional[str] = None
    extra: Dict[str, str] = Field(default_factory=dict)


class VideoInfo(BaseModel):
    """A single playable URL and what the downloader needs to fetch it"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    meta: VideoMetadata = Field(default_factory=VideoMetadata)
    url: Optional[str] = None
    cover: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    # CookieJar
    cookies: Optional[Any] = None


class ExtractInfo(BaseModel):
    videos: List[VideoInfo] = Field(default_factory=list)

    def check(self):
        """Every video needs a URL"""
        return bool(self.videos) and all(v.url for v in self.videos)

    def summary(self):
        """JSON friendly description, cookies left out"""
        return [
            {
                'title': v.meta.title,
                'url': v.url,
                'cover': v.cover,
                'headers': v.headers,
                'meta': v.meta.model_dump(mode='json', exclude_none=True),
            }
            for v in self.videos
        ]
