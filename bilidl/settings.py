#!/usr/bin/env python3
"""
Settings file for bili-dl

The file is a JSON object of sections, each section an object of values:
    {"basic": {"aria2c": true}, "BiliNormalVideoProvider": {"part": "1-3"}}
Known keys are validated when the file is read or changed.
"""

import json
import logging
import os

from .downloader import (check_file_allocation, check_max_connection_per_server,
                         check_min_split_size, check_split)
from .errors import PartRangeError, SettingsError
from .parts import parse_json as parse_part_json
from .utils import get_data_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE_NAME = "bili.settings.json"
BASIC = "basic"


def get_default_settings_path():
    return os.path.join(get_data_dir(), SETTINGS_FILE_NAME)


def is_bool(value):
    return isinstance(value, bool)


def is_str(value):
    return isinstance(value, str)


def check_part(value):
    try:
        parse_part_json(value)
    except PartRangeError:
        return False
    return True


class SettingDes:
    """Description of one known setting"""

    def __init__(self, name, description, type_name, check):
        self.name = name
        self.description = description
        self.type_name = type_name
        self.check = check

    def is_valid(self, value):
        return bool(self.check(value))


SETTING_DESCRIPTIONS = {
    BASIC: [
        SettingDes("aria2c", "Whether to enable aria2c.", "boolean", is_bool),
        SettingDes("aria2c-file-allocation",
                   "The file allocation method used by aria2c. Available value: none, prealloc, trunc, falloc.",
                   "string", check_file_allocation),
        SettingDes("aria2c-max-connection-per-server",
                   "The maximum number of connections to one server for each download when using aria2c to download.",
                   "multiple", check_max_connection_per_server),
        SettingDes("aria2c-min-split-size", "Let aria2 does not split less than 2*SIZE byte range.",
                   "multiple", check_min_split_size),
        SettingDes("aria2c-split", "The number of connections used when downloading a file.",
                   "multiple", check_split),
        SettingDes("cookies", "The location of cookies file.", "string", is_str),
    ],
    "BiliNormalVideoProvider": [
        SettingDes("part",
                   "The video part number of a page.\nExample: \n2\tSelect part 2\n"
                   "\"2-34\"\tSelect from part 2 to part 34.\n"
                   "\"3, 5-10\" or [3, \"5-10\"]\tSelect part 3 and from part 5 to part 10.\n"
                   "\"3-\"\tSelect from part 3 to last part.\n"
                   "\"-10\"\tSelect from first part to part 10.\n\"-\"\tSelect all parts.",
                   "multiple", check_part),
        SettingDes("no-use-storylist",
                   "Do not trust the story list of interactive videos, always walk every choice.",
                   "boolean", is_bool),
    ],
    "WebDriver": [
        SettingDes("chrome", "Start browser with chromedriver", "boolean", is_bool),
    ],
}


class SettingStore:
    def __init__(self, descriptions=None):
        self.descriptions = descriptions if descriptions is not None else SETTING_DESCRIPTIONS
        self.maps = {}

    def describe(self, section, key):
        for des in self.descriptions.get(section, []):
            if des.name == key:
                return des
        return None

    def check_valid(self, section, key, value):
        """True/False for known keys, None for unknown ones"""
        des = self.describe(section, key)
        if des is None:
            return None
        return des.is_valid(value)

    def read(self, file_path=None, fix_invalid=False):
        """Read the settings file

        A missing default file is an empty store, a missing custom file is an error.
        """
        self.maps = {}
        path = file_path or get_default_settings_path()
        if not os.path.exists(path):
            if file_path:
                raise SettingsError(f"Can not load custom settings file: {path}")
            return self
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise SettingsError(f"Can not open settings file: {path}") from e
        if not content.strip():
            raise SettingsError(f"Settings file is empty: {path}")
        try:
            obj = json.loads(content)
        except ValueError as e:
            raise SettingsError(f"Can not parse settings file: {path}") from e
        if not isinstance(obj, dict):
            raise SettingsError(f"Unknown settings file: {path}")
        for section, values in obj.items():
            if not isinstance(values, dict):
                raise SettingsError(f"Key \"{section}\" in settings file is not a object.")
            jar = {}
            for key, value in values.items():
                if self.check_valid(section, key, value) is False:
                    if not fix_invalid:
                        raise SettingsError(
                            f"\"{section}.{key}\" is invalid, you can use \"bili config fix\" "
                            "to remove all invalid value.")
                    logger.warning("Removed invalid setting %s.%s", section, key)
                    continue
                jar[key] = value
            self.maps[section] = jar
        return self

    def save(self, file_path=None):
        path = file_path or get_default_settings_path()
        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(self.maps, f, ensure_ascii=False, indent=2)
        except OSError as e:
            raise SettingsError(f"Can not save to settings file: {path}") from e
        return path

    def get(self, section, key, default=None):
        return self.maps.get(section, {}).get(key, default)

    def get_bool(self, section, key):
        value = self.get(section, key)
        return value if isinstance(value, bool) else None

    def set_value(self, section, key, value):
        if self.check_valid(section, key, value) is False:
            raise SettingsError(f"Invalid value for {section}.{key}: {json.dumps(value, ensure_ascii=False)}")
        self.maps.setdefault(section, {})[key] = value

    def add_value(self, section, key, value, force=False):
        if not force and key in self.maps.get(section, {}):
            raise SettingsError(f"{section}.{key} already exists, use --force to overwrite it.")
        self.set_value(section, key, value)

    def delete(self, section, key):
        values = self.maps.get(section)
        if not values or key not in values:
            raise SettingsError("Key not found.")
        del values[key]
        if not values:
            del self.maps[section]

    def help_text(self):
        lines = []
        for section, descriptions in self.descriptions.items():
            lines.append(f"{section}:")
            for des in descriptions:
                lines.append(f"  {des.name}: {des.type_name}".ljust(40) + des.description.replace("\n", "\n" + " " * 40))
        return "\n".join(lines)
