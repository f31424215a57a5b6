#!/usr/bin/env python3
"""
Interactive video support

An interactive video only lists its first part on the page. The real part
list is a graph of nodes linked by viewer choices (edges), served one node
at a time by the edge info API. This module walks that graph and rebuilds a
linear part list in discovery order.
"""

import logging
import sys

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConsistencyError, MalformedResponse
from .http_client import parse_envelope
from .part_info import PartInfo, PartInfoList

logger = logging.getLogger(__name__)

EDGE_INFO_API = "https://api.bilibili.com/x/stein/edgeinfo_v2"
MAX_DEPTH = 256


def _is_id(value):
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


class EdgeInfo(BaseModel):
    """One choice of a question in an interactive video node"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    cid: int = sys.maxsize
    edge_id: int = Field(default=sys.maxsize, alias='id')
    option: str = ""
    # Token the edge info API expects as ``choice``
    native_action: str = ""
    is_default: bool = False
    condition: str = ""

    @field_validator('is_default', mode='before')
    @classmethod
    def _number_to_bool(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)):
            return v != 0
        return False

    @field_validator('option', 'native_action', 'condition', mode='before')
    @classmethod
    def _string_or_empty(cls, v):
        return v if isinstance(v, str) else ""

    @classmethod
    def from_choice(cls, choice):
        """Parse a choice object from the edge info API

        Raises:
            MalformedResponse: if ``cid`` or ``id`` is missing or not a number
        """
        if not isinstance(choice, dict):
            raise MalformedResponse("Choice must be an object.")
        if not _is_id(choice.get('cid')):
            raise MalformedResponse("CID is needed.")
        if not _is_id(choice.get('id')):
            raise MalformedResponse("Edge ID is needed.")
        try:
            return cls.model_validate(choice)
        except ValidationError as e:
            raise MalformedResponse(f"Invalid choice: {e}") from e


def _members(value):
    return value if isinstance(value, list) else []


class InteractionVideoParser:
    """Rebuild the part list of an interactive video

    Args:
        client: HTTP client providing ``get_with_params(url, params)``
        bvid: BV code of the video
        graph_version: ``interaction.graph_version`` from the player info API
        part_list: parts already known (the page list), new nodes are appended
        buvid3: optional ``buvid3`` cookie value, some choices need it
        part_count: part count reported by the video information
        use_story_list: allow taking ``story_list`` of the first node as is
    """

    def __init__(self, client, bvid, graph_version, part_list=None, buvid3=None,
                 part_count=None, use_story_list=True):
        self.client = client
        self.bvid = bvid
        self.graph_version = graph_version
        self.buvid3 = buvid3
        self.part_count = part_count
        self.use_story_list = use_story_list
        self.part_list = PartInfoList(part_list or [])
        self.edge_list = set()

    def get_edge_info(self, edge=None):
        """Fetch one node from the edge info API

        Args:
            edge: EdgeInfo of the choice leading to the node, None for the first node
        """
        params = {
            "bvid": self.bvid,
            "graph_version": self.graph_version,
            "platform": "pc",
            "portal": 0,
            "screen": 0,
        }
        if self.buvid3 is not None:
            params["buvid3"] = self.buvid3
        if edge is not None:
            params["edge_id"] = edge.edge_id
            params["choice"] = edge.native_action
        logger.debug("Fetching edge info: %s", params)
        data = parse_envelope(self.client.get_with_params(EDGE_INFO_API, params))
        if not isinstance(data, dict):
            raise MalformedResponse("Edge info data is not an object.")
        return data

    def add_node(self, data):
        """Append the node described by ``data`` to the part list"""
        title = data.get('title')
        if not isinstance(title, str):
            raise MalformedResponse("Node title is missing.")
        edge_id = data.get('edge_id')
        if not _is_id(edge_id):
            raise MalformedResponse("Node edge_id is missing.")
        for story in _members(data.get('story_list')):
            if isinstance(story, dict) and story.get('edge_id') == edge_id:
                cid = story.get('cid')
                if not _is_id(cid):
                    raise MalformedResponse(f"Story of edge {edge_id} has no cid.")
                self.part_list.append(PartInfo(cid=cid, page=len(self.part_list) + 1, part=title))
                return
        raise MalformedResponse(f"Edge {edge_id} is not in its own story list.")

    def deal_question(self, data, depth=0):
        """Visit every unseen choice of a node, depth first"""
        if depth > MAX_DEPTH:
            raise ConsistencyError(self.part_count, len(self.part_list),
                                   f"Interactive video graph is deeper than {MAX_DEPTH} nodes.")
        edges = data.get('edges')
        questions = edges.get('questions') if isinstance(edges, dict) else None
        for question in _members(questions):
            if not isinstance(question, dict):
                continue
            for choice in _members(question.get('choices')):
                edge = EdgeInfo.from_choice(choice)
                if edge.edge_id in self.edge_list:
                    logger.debug("Skip visited edge %d", edge.edge_id)
                    continue
                node = self.get_edge_info(edge)
                self.add_node(node)
                self.edge_list.add(edge.edge_id)
                self.deal_question(node, depth + 1)

    def parse_list_from_story_list(self, story_list):
        """Build a part list from the first node's story list

        Returns None if the story list is unusable.
        """
        if not isinstance(story_list, list):
            return None
        result = PartInfoList()
        seen = set()
        for story in story_list:
            if not isinstance(story, dict) or not _is_id(story.get('cid')):
                return None
            cid = story['cid']
            if cid in seen:
                continue
            title = story.get('title')
            if not isinstance(title, str):
                return None
            seen.add(cid)
            result.append(PartInfo(cid=cid, page=len(result) + 1, part=title))
        return result

    def parse(self):
        """Build the full part list

        Returns:
            PartInfoList: the final part list (also kept in ``part_list``)

        Raises:
            TransportError, RemoteError, MalformedResponse: a fetch failed or no part was found
            ConsistencyError: the part count does not match ``part_count``
        """
        data = self.get_edge_info()
        if self.part_count is not None and self.use_story_list:
            story_parts = self.parse_list_from_story_list(data.get('story_list'))
            if story_parts and len(story_parts) == self.part_count:
                logger.info("Story list already has all %d parts", self.part_count)
                self.part_list = story_parts
                return self.part_list
        if _is_id(data.get('edge_id')):
            # The first node is already in the page list
            self.edge_list.add(data['edge_id'])
        self.deal_question(data)
        if not self.part_list:
            raise MalformedResponse("Interactive video has no parts.")
        if self.part_count is not None and len(self.part_list) != self.part_count:
            raise ConsistencyError(self.part_count, len(self.part_list))
        logger.info("Found %d parts in interactive video %s", len(self.part_list), self.bvid)
        return self.part_list
