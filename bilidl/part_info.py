#!/usr/bin/env python3
"""
Part information of a video page
"""

from typing import Optional

from pydantic import BaseModel

from .errors import MalformedResponse
from .utils import to_uint


class PartInfo(BaseModel):
    """One playable part of a video"""
    cid: int
    page: int
    part: str
    duration: Optional[int] = None


class PartInfoList(list):
    """Ordered list of PartInfo, in the order shown on the site"""

    @classmethod
    def from_api_array(cls, value):
        """Build from ``videoData.pages`` or the page list API

        Args:
            value: JSON array of {cid, part, page?, duration?}.
                   cid/page/duration may be numbers or digit strings.

        Raises:
            MalformedResponse: if the array or any element is unusable
        """
        if not isinstance(value, list):
            raise MalformedResponse("The page list must be an array.")
        result = cls()
        for pn, item in enumerate(value, start=1):
            if not isinstance(item, dict):
                raise MalformedResponse("The object in page list must be an object.")
            if item.get('cid') is None:
                raise MalformedResponse("Cid not exists.")
            cid = to_uint(item['cid'])
            if cid is None:
                raise MalformedResponse(f"Unknown cid: {item['cid']!r}")
            part = item.get('part')
            if part is None:
                raise MalformedResponse("part is not exists.")
            if not isinstance(part, str):
                raise MalformedResponse("part is not a string.")
            page = to_uint(item.get('page'))
            result.append(PartInfo(
                cid=cid,
                page=page if page is not None else pn,
                part=part,
                duration=to_uint(item.get('duration')),
            ))
        if not result:
            raise MalformedResponse("Empty page list.")
        return result

    def first_cid(self):
        return self[0].cid if self else None

    def by_page(self, page):
        for p in self:
            if p.page == page:
                return p
        return None
