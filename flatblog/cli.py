from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Optional

from . import __version__
from .cache import ThemeCache
from .config import BuildOptions, load_blog_config, load_config, load_locale
from .content import PAGE, POST, collect_records
from .index import build_index as build_blog_index
from .pages import build_index, build_pages, build_posts, build_rss, build_tags, copy_stylesheet
from .render import ThemeRenderer
from .utils import PROG, BuildError, make_directories, parse_bool, parse_int, warn


def build_site(blogdir: Path, destdir: Path, options: BuildOptions) -> bool:
    """Generate the whole site; return ``False`` when there was nothing to do."""
    options = options.normalized()
    if not (options.with_posts or options.with_pages):
        if options.verbose:
            print("Nothing to do.")
        return False
    if not blogdir.is_dir():
        raise BuildError(f"Blog directory not found: {blogdir}")

    config = load_blog_config(blogdir)
    locale = load_locale(blogdir, config.lang)
    if options.with_rss and not config.url:
        # Leave the feed link out of the theme as well.
        warn("Missing blog.url option. Skipping the RSS feed.")
        options = replace(options, with_rss=False)

    posts = collect_records(blogdir, POST, config, with_bodies=options.with_posts)
    pages = collect_records(blogdir, PAGE, config, with_bodies=options.with_pages)
    index = build_blog_index(posts, pages, locale)

    renderer = ThemeRenderer(blogdir, config, locale, options, index, ThemeCache())
    make_directories(destdir)

    if options.with_rss:
        build_rss(renderer, destdir)
    if options.with_css:
        copy_stylesheet(renderer, destdir)
    if options.with_index:
        build_index(renderer, destdir)
    if options.with_posts:
        build_posts(renderer, destdir)
    if options.with_tags:
        build_tags(renderer, destdir)
    if options.with_pages:
        build_pages(renderer, destdir)
    return True


def main(argv: Optional[list[str]] = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="flatblog.toml",
        help="Path to build settings file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = load_config(Path(pre_args.config))
    except BuildError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        sys.exit(1)

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        value = cfg_value(key, default)
        return default if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = cfg_value(key, default)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        value = cfg_value(key, default)
        return parse_int(value, default)

    parser = argparse.ArgumentParser(
        prog=PROG, description="Generate a static website from a flat-file blog repository."
    )
    parser.add_argument("--config", default=pre_args.config, help="Path to build settings file (TOML/YAML/JSON).")
    parser.add_argument(
        "-b",
        "--blogdir",
        default=cfg_str("blogdir", "."),
        help="Directory where the blog repository is placed.",
    )
    parser.add_argument(
        "-d",
        "--destdir",
        default=cfg_str("destdir", "."),
        help="Directory where the generated static content is placed.",
    )
    parser.add_argument(
        "--index",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("with_index", True),
        help="Generate the index page.",
    )
    parser.add_argument(
        "--posts",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("with_posts", True),
        help="Generate blog posts and their archives (disabling also drops tags and RSS).",
    )
    parser.add_argument(
        "--pages",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("with_pages", True),
        help="Generate pages.",
    )
    parser.add_argument(
        "--tags",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("with_tags", True),
        help="Generate tag pages.",
    )
    parser.add_argument(
        "--rss",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("with_rss", True),
        help="Generate the RSS feed.",
    )
    parser.add_argument(
        "--css",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("with_css", True),
        help="Copy the stylesheet.",
    )
    for flag, dest in (("-i", "index"), ("-p", "posts"), ("-P", "pages"), ("-t", "tags"), ("-r", "rss"), ("-c", "css")):
        parser.add_argument(
            flag,
            dest=dest,
            action="store_false",
            default=argparse.SUPPRESS,
            help=f"Same as --no-{dest}.",
        )
    parser.add_argument(
        "-F",
        "--full-paths",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("full_paths", False),
        help="Always include the index file name in generated links.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        dest="verbose",
        action="store_const",
        const=0,
        default=cfg_int("verbose", 1),
        help="Avoid displaying unnecessary messages.",
    )
    parser.add_argument(
        "-V",
        "--verbose",
        dest="verbose",
        action="store_const",
        const=2,
        help="Display all messages including the list of created files.",
    )
    parser.add_argument("-v", "--version", action="version", version=f"{PROG} {__version__}")
    args = parser.parse_args(argv)

    options = BuildOptions(
        with_index=args.index,
        with_posts=args.posts,
        with_pages=args.pages,
        with_tags=args.tags,
        with_rss=args.rss,
        with_css=args.css,
        full_paths=args.full_paths,
        verbose=args.verbose,
    )
    start = time.perf_counter()
    try:
        built = build_site(Path(args.blogdir), Path(args.destdir), options)
    except BuildError as exc:
        print(f"{PROG}: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    if built and args.verbose:
        print(f"Done. Build completed in {elapsed:.2f}s.")
