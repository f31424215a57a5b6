#!/usr/bin/env python3
"""
bili-dl v1.0.0
bilibili video extractor and downloader
Multi part and interactive videos, aria2c or plain HTTP download
"""

import os
import sys
import json
import logging
import argparse

from bilidl import __version__
from bilidl.cookies import CookieJar, CookiesFile
from bilidl.downloader import MDownloader
from bilidl.errors import BiliError
from bilidl.providers import match_provider
from bilidl.settings import SettingStore

logger = logging.getLogger("bili")


def str_to_bool(value):
    v = value.strip().lower()
    if v in ('true', 'yes', '1', 'on'):
        return True
    if v in ('false', 'no', '0', 'off'):
        return False
    raise argparse.ArgumentTypeError(f"Expected true or false, got: {value}")


def setup_logging(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )


def build_parser():
    parser = argparse.ArgumentParser(prog='bili', description='bilibili video extractor and downloader')
    parser.add_argument('url', help='Video URL, AV number or BV code')
    parser.add_argument('-c', '--config', help='Location of settings file')
    parser.add_argument('--cookies', help='Location of cookies file')
    parser.add_argument('-j', '--cookie-jar', help='Name of cookie jar in cookies file')
    parser.add_argument('--login', action='store_true', help='Log in even if already logged in')
    parser.add_argument('-p', '--part', help='Parts to download, e.g. "1-3, 5"')
    parser.add_argument('--no-use-storylist', action='store_true', default=None,
                        help='Always walk every choice of interactive videos')
    parser.add_argument('-o', '--output', default='./', help='Output directory')
    parser.add_argument('--json', action='store_true', help='Print extracted information instead of downloading')
    parser.add_argument('--aria2c', type=str_to_bool, metavar='true|false', help='Whether to enable aria2c')
    parser.add_argument('--aria2c-split', help='The number of connections used when downloading a file')
    parser.add_argument('--aria2c-max-connection-per-server',
                        help='The maximum number of connections to one server for each download')
    parser.add_argument('--aria2c-min-split-size', help='aria2c does not split less than 2*SIZE byte range')
    parser.add_argument('--aria2c-file-allocation', help='File allocation method: none, prealloc, trunc, falloc')
    parser.add_argument('--chrome', action='store_true', default=None, help='Log in with Chrome')
    parser.add_argument('--chromedriver', help='Location of chromedriver')
    parser.add_argument('--chromedriver-server', help='URL of a running chromedriver server')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def build_config_parser():
    parser = argparse.ArgumentParser(prog='bili config', description='Manage the settings file')
    parser.add_argument('-c', '--config', help='Location of settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    sub = parser.add_subparsers(dest='action', required=True)
    p = sub.add_parser('get', help='Print a value')
    p.add_argument('section')
    p.add_argument('key')
    for name, text in (('set', 'Set a value'), ('add', 'Add a new value')):
        p = sub.add_parser(name, help=text)
        p.add_argument('section')
        p.add_argument('key')
        p.add_argument('value')
        p.add_argument('-s', '--str', action='store_true', help='Store value as a string instead of JSON')
        if name == 'add':
            p.add_argument('-f', '--force', action='store_true', help='Overwrite an existing value')
    p = sub.add_parser('delete', help='Remove a value')
    p.add_argument('section')
    p.add_argument('key')
    sub.add_parser('fix', help='Remove every invalid value')
    sub.add_parser('help', help='List known settings')
    return parser


def build_cookie_parser():
    parser = argparse.ArgumentParser(prog='bili cookie', description='Manage the cookies file')
    parser.add_argument('--cookies', help='Location of cookies file')
    parser.add_argument('-c', '--config', help='Location of settings file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Show debug output')
    sub = parser.add_subparsers(dest='action', required=True)
    p = sub.add_parser('load', help='Import a Netscape cookies.txt into a cookie jar')
    p.add_argument('jar', help='Name of cookie jar, e.g. bili')
    p.add_argument('file', help='Netscape cookie file')
    return parser


def parse_config_value(value, as_str):
    if as_str:
        return value
    try:
        return json.loads(value)
    except ValueError:
        raise BiliError(f"Value is not JSON, use --str to store it as a string: {value}")


def config_main(argv):
    args = build_config_parser().parse_args(argv)
    store = SettingStore()
    if args.action == 'help':
        print(store.help_text())
        return 0
    if args.config is None or os.path.exists(args.config):
        store.read(args.config, fix_invalid=args.action == 'fix')
    if args.action == 'get':
        value = store.get(args.section, args.key)
        if value is None:
            print("✗ Key not found.")
            return 1
        print(json.dumps(value, ensure_ascii=False))
        return 0
    if args.action == 'set':
        store.set_value(args.section, args.key, parse_config_value(args.value, args.str))
    elif args.action == 'add':
        store.add_value(args.section, args.key, parse_config_value(args.value, args.str), force=args.force)
    elif args.action == 'delete':
        store.delete(args.section, args.key)
    path = store.save(args.config)
    print(f"✓ Saved settings to: {path}")
    return 0


def cookies_path(args, settings):
    return args.cookies or settings.get('basic', 'cookies')


def cookie_main(argv):
    args = build_cookie_parser().parse_args(argv)
    settings = SettingStore().read(args.config)
    path = cookies_path(args, settings)
    cookies = CookiesFile()
    if path is None or os.path.exists(path):
        cookies.read(path)
    jar = cookies.get(args.jar) or CookieJar()
    loaded = CookieJar.from_netscape(args.file)
    jar.update(loaded)
    cookies.add(args.jar, jar)
    saved = cookies.save(path)
    print(f"✓ Loaded {len(loaded)} cookies into \"{args.jar}\": {saved}")
    return 0


def collect_options(args):
    """Command line values providers and downloaders look up, None when not given"""
    return {
        'part': args.part,
        'no-use-storylist': args.no_use_storylist,
        'aria2c': args.aria2c,
        'aria2c-split': args.aria2c_split,
        'aria2c-max-connection-per-server': args.aria2c_max_connection_per_server,
        'aria2c-min-split-size': args.aria2c_min_split_size,
        'aria2c-file-allocation': args.aria2c_file_allocation,
        'chrome': args.chrome,
        'chromedriver': args.chromedriver,
        'chromedriver-server': args.chromedriver_server,
    }


def run(args):
    provider_cls = match_provider(args.url)
    if provider_cls is None:
        print(f"✗ Unsupported URL: {args.url}")
        return 1
    settings = SettingStore().read(args.config)
    path = cookies_path(args, settings)
    cookies = CookiesFile().read(path)
    jar_name = args.cookie_jar or provider_cls.default_cookie_jar_name
    jar = (cookies.get(jar_name) if jar_name else None) or CookieJar()
    options = collect_options(args)

    provider = provider_cls()
    provider.init(jar, options, settings)
    if provider.can_login:
        state = provider.check_logined()
        logger.debug("Login state: %s", state)
        if args.login or (provider.login_required and state is not True):
            if not provider.login(jar):
                print("✗ Login failed")
                return 1
            print("✓ Logged in")
            if jar_name:
                cookies.add(jar_name, jar)
                print(f"✓ Saved cookies to: {cookies.save(path)}")

    if not args.json:
        print(f"✓ Extracting: {args.url}")
    info = provider.extract(args.url)
    if not info.check():
        print("✗ Extracted information is incomplete")
        return 1

    if args.json:
        print(json.dumps(info.summary(), indent=2, ensure_ascii=False))
        return 0

    os.makedirs(args.output, exist_ok=True)
    written = MDownloader(settings, options, info, args.output).run()
    for f in written:
        print(f"✓ Saved: {f}")
    return 0


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    verbose = '-v' in argv or '--verbose' in argv
    setup_logging(verbose)
    try:
        if argv and argv[0] == 'config':
            return config_main(argv[1:])
        if argv and argv[0] == 'cookie':
            return cookie_main(argv[1:])
        return run(build_parser().parse_args(argv))
    except BiliError as e:
        print(f"✗ Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\n\n✗ Cancelled by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
