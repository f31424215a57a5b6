#!/usr/bin/env python3
"""
Get JSON data embedded in HTML pages
"""

import json

from bs4 import BeautifulSoup

from .errors import MalformedResponse


def extract_script_vars(html, keys):
    """Find ``<script>key=value</script>`` assignments

    Args:
        html: page content
        keys: names to look for, e.g. ``window.__INITIAL_STATE__``

    Returns:
        dict: key -> raw text after ``key=``, only for keys found
    """
    soup = BeautifulSoup(html, 'html.parser')
    result = {}
    for script in soup.find_all('script'):
        text = script.string
        if not text:
            continue
        for key in keys:
            prefix = f"{key}="
            if text.startswith(prefix):
                result[key] = text[len(prefix):]
    return result


def load_leading_json(text):
    """Parse the JSON value at the start of ``text``

    Page blobs are followed by JavaScript like ``;(function(){...}());``,
    everything after the first JSON value is ignored.
    """
    try:
        value, _ = json.JSONDecoder().raw_decode(text.lstrip())
    except ValueError as e:
        raise MalformedResponse(f"Can not parse as JSON: {e}") from e
    return value


def extract_next_data(html):
    """Get the text of ``<script id="__NEXT_DATA__">``"""
    soup = BeautifulSoup(html, 'html.parser')
    script = soup.find('script', {'id': '__NEXT_DATA__'})
    if not script or not script.string:
        return None
    return script.string.strip()
