#!/usr/bin/env python3
"""
Download backends
aria2c (external process) or a plain streaming GET with requests
"""

import logging
import os
import shutil
import subprocess

import requests

from .errors import DownloadError
from .utils import filter_file_name, parse_size, to_uint

logger = logging.getLogger(__name__)

FILE_ALLOCATIONS = ("none", "prealloc", "trunc", "falloc")
MIN_SPLIT_SIZE_RANGE = (1048576, 1073741824)


def check_min_split_size(value):
    size = parse_size(value)
    return size is not None and MIN_SPLIT_SIZE_RANGE[0] <= size <= MIN_SPLIT_SIZE_RANGE[1]


def check_split(value):
    n = to_uint(value)
    return n is not None and n >= 1


check_max_connection_per_server = check_split


def check_file_allocation(value):
    return isinstance(value, str) and value.lower() in FILE_ALLOCATIONS


def aria2c_available(exe="aria2c"):
    """Check that aria2c can be started"""
    if not shutil.which(exe):
        return False
    try:
        result = subprocess.run([exe, "-h"], capture_output=True, timeout=5)
    except (OSError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def output_file_name(title):
    return filter_file_name(title or "video") + ".mp4"


class Aria2c:
    """aria2c command line interface"""

    def __init__(self, exe="aria2c"):
        self.exe = exe
        self.min_split_size = 20971520
        self.split = 5
        self.file_allocation = "prealloc"
        self.max_connection_per_server = 1

    def available(self):
        return aria2c_available(self.exe)

    def set_min_split_size(self, value):
        if not check_min_split_size(value):
            raise DownloadError("aria2c-min-split-size should be 1048576(1MiB)-1073741824(1GiB).")
        self.min_split_size = parse_size(value)

    def set_split(self, value):
        if not check_split(value):
            raise DownloadError("aria2c-split should be a positive integer.")
        self.split = to_uint(value)

    def set_max_connection_per_server(self, value):
        if not check_max_connection_per_server(value):
            raise DownloadError("aria2c-max-connection-per-server should be a positive integer.")
        self.max_connection_per_server = to_uint(value)

    def set_file_allocation(self, value):
        if not check_file_allocation(value):
            raise DownloadError(f"aria2c-file-allocation should be one of: {', '.join(FILE_ALLOCATIONS)}.")
        self.file_allocation = value.lower()

    def build_command(self, url, headers=None, output=None, output_dir=None):
        cmd = [self.exe]
        for k, v in (headers or {}).items():
            cmd.append(f"--header={k}: {v}")
        cmd += [
            "-k", str(self.min_split_size),
            "-s", str(self.split),
            f"--file-allocation={self.file_allocation}",
            "-x", str(self.max_connection_per_server),
        ]
        if output_dir:
            cmd += ["-d", output_dir]
        if output:
            cmd += ["-o", filter_file_name(output)]
        cmd += [url, "--auto-file-renaming", "false"]
        return cmd

    def download(self, url, headers=None, output=None, output_dir=None):
        cmd = self.build_command(url, headers, output, output_dir)
        logger.debug("Running %s", cmd)
        try:
            result = subprocess.run(cmd)
        except OSError as e:
            raise DownloadError(f"Can not start aria2c: {e}") from e
        if result.returncode != 0:
            raise DownloadError(f"aria2c failed (exit code: {result.returncode})")


class SingleUrlDownloader:
    """Download a VideoInfo which has one URL"""

    def __init__(self, video, output_dir="./", aria2c=None):
        self.video = video
        self.output_dir = output_dir
        self.aria2c = aria2c

    def request_headers(self):
        headers = dict(self.video.headers)
        if self.video.cookies is not None:
            cookie = self.video.cookies.header(self.video.url)
            if cookie:
                headers["Cookie"] = cookie
        return headers

    def download(self):
        url = self.video.url
        headers = self.request_headers()
        name = output_file_name(self.video.meta.title)
        if self.aria2c is not None:
            self.aria2c.download(url, headers=headers, output=name, output_dir=self.output_dir)
            return os.path.join(self.output_dir, name)
        return self.download_with_requests(url, headers, name)

    def download_with_requests(self, url, headers, name):
        os.makedirs(self.output_dir, exist_ok=True)
        target = os.path.join(self.output_dir, name)
        try:
            with requests.get(url, headers=headers, stream=True, timeout=30) as resp:
                resp.raise_for_status()
                with open(target, 'wb') as f:
                    for chunk in resp.iter_content(chunk_size=8192):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            if os.path.exists(target):
                os.remove(target)
            raise DownloadError(f"Failed to download {url}: {e}") from e
        return target


class MDownloader:
    """Download every video of an ExtractInfo

    Args:
        settings: SettingStore
        options: dict of command line options (None for not given)
        info: ExtractInfo
        output_dir: directory to write to
    """

    def __init__(self, settings, options, info, output_dir="./"):
        self.settings = settings
        self.options = options
        self.info = info
        self.output_dir = output_dir
        self.aria2c = None
        if self.enable_aria2c():
            aria2c = self.create_aria2c()
            if aria2c.available():
                self.aria2c = aria2c
            else:
                logger.warning("aria2c is not available, downloading with requests")

    def option_or_setting(self, name):
        value = self.options.get(name)
        if value is None:
            value = self.settings.get("basic", name)
        return value

    def enable_aria2c(self):
        value = self.options.get("aria2c")
        if value is not None:
            return value
        value = self.settings.get_bool("basic", "aria2c")
        if value is not None:
            return value
        return True

    def create_aria2c(self):
        a2 = Aria2c()
        value = self.option_or_setting("aria2c-min-split-size")
        if value is not None:
            a2.set_min_split_size(value)
        value = self.option_or_setting("aria2c-split")
        if value is not None:
            a2.set_split(value)
        value = self.option_or_setting("aria2c-max-connection-per-server")
        if value is not None:
            a2.set_max_connection_per_server(value)
        value = self.option_or_setting("aria2c-file-allocation")
        if value is not None:
            a2.set_file_allocation(value)
        return a2

    def run(self):
        """Download sequentially, the first failure stops everything

        Returns:
            list: paths of the written files
        """
        written = []
        total = len(self.info.videos)
        for i, video in enumerate(self.info.videos, start=1):
            print(f"✓ [{i}/{total}] Downloading: {video.meta.title}")
            written.append(SingleUrlDownloader(video, self.output_dir, self.aria2c).download())
        return written
