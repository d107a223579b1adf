from __future__ import annotations

import html
from pathlib import Path

from pygments.formatters import HtmlFormatter

from . import __version__
from .content import Record, strip_tags
from .paginate import ArchivePage, Paginator, page_filename, paginate
from .render import ThemeRenderer, copy_file, write_text
from .utils import BuildError, rfc822_date, warn


def root_for(path: str) -> str:
    depth = len([part for part in path.split("/") if part])
    return "../" * depth if depth else "./"


def write_page(
    renderer: ThemeRenderer,
    output_dir: Path,
    rel_path: str,
    content: str,
    page_title: str = "",
) -> Path:
    """Render ``content`` into the theme and write it under ``output_dir``."""
    parent = Path(rel_path).parent.as_posix()
    root = root_for("" if parent == "." else parent)
    path = output_dir / rel_path
    write_text(path, renderer.render(content, root, page_title), renderer.config.encoding)
    if renderer.options.verbose > 1:
        print(f"Created {path}")
    return path


def format_tags(renderer: ThemeRenderer, tags: tuple[str, ...], root: str) -> str:
    links = []
    for name in tags:
        info = renderer.index.tags.get(name)
        if info is None:
            continue
        href = renderer.dir_url(root, "tags/" + info.slug)
        links.append(f'<a href="{href}">{html.escape(name)}</a>')
    return ", ".join(links)


def format_heading(renderer: ThemeRenderer, title: str, post: Record, root: str) -> str:
    locale = renderer.locale
    tags = format_tags(renderer, post.tags, root) if renderer.options.with_tags else ""
    tail = f", {locale.text('taggedas')} <span class=\"tags\">{tags}</span>.\n" if tags else ".\n"
    return (
        f'<h2 class="post">{title}</h2>\n\n'
        '<div class="information">\n  '
        f'<span class="date">{post.date.isoformat()}</span> '
        f'{locale.text("postedby")} <span class="author">{post.author}</span>'
        f"{tail}</div>\n\n"
    )


def format_entry(renderer: ThemeRenderer, post: Record, root: str) -> str:
    """Linked heading with the excerpt, as shown on index and archive pages."""
    link = renderer.dir_url(root, post.path)
    heading = format_heading(renderer, f'<a href="{link}">{post.title}</a>', post, root)
    if post.excerpt is None:
        return heading + post.body
    more = renderer.locale.text("more")
    return heading + post.excerpt + f'<p><a href="{link}">{more}</a></p>\n'


def format_navigation(renderer: ThemeRenderer, page: ArchivePage) -> str:
    ext = renderer.config.extension
    links = []
    if page.has_older:
        links.append(f'  <a href="{page_filename(page.index + 1, ext)}">{renderer.locale.text("previous")}</a>\n')
    if page.has_newer:
        links.append(f'  <a href="{page_filename(page.index - 1, ext)}">{renderer.locale.text("next")}</a>\n')
    if not links:
        return ""
    return '<div class="navigation">\n' + "".join(links) + "</div>\n"


def format_archive(renderer: ThemeRenderer, page: ArchivePage, heading: str, root: str) -> str:
    body = "".join(format_entry(renderer, post, root) for post in page.items)
    section = f'<div class="section">{heading}</div>\n\n' if heading else ""
    return section + body + format_navigation(renderer, page)


def build_index(renderer: ThemeRenderer, output_dir: Path) -> int:
    ext = renderer.config.extension
    posts = renderer.index.posts if renderer.options.with_posts else []
    written = 0
    for page in paginate(posts, renderer.config.page_size):
        content = format_archive(renderer, page, "", "./")
        write_page(renderer, output_dir, page_filename(page.index, ext), content)
        written += 1
    if not written:
        write_page(renderer, output_dir, page_filename(0, ext), "")
        written = 1
    return written


def write_month(renderer: ThemeRenderer, output_dir: Path, page: ArchivePage) -> None:
    year, month = page.key
    locale = renderer.locale
    label = f"{locale.month_name(month)} {year}"
    content = format_archive(renderer, page, f"{locale.text('archive')} {label}", "../../")
    rel_path = f"{year:04d}/{month:02d}/{page_filename(page.index, renderer.config.extension)}"
    write_page(renderer, output_dir, rel_path, content, label)


def build_posts(renderer: ThemeRenderer, output_dir: Path) -> None:
    """Write post pages together with the yearly and monthly archives."""
    ext = renderer.config.extension
    locale = renderer.locale
    for year in renderer.index.years():
        content = (
            f'<div class="section">{locale.text("archive")} {year}</div>\n\n'
            f"<ul>\n{renderer.list_of_months('../', year)}\n</ul>"
        )
        write_page(renderer, output_dir, f"{year:04d}/{page_filename(0, ext)}", content, str(year))

    pager: Paginator[Record] = Paginator(renderer.config.page_size)
    for post in renderer.index.posts:
        root = root_for(post.path)
        content = format_heading(renderer, post.title, post, root) + post.body
        write_page(renderer, output_dir, f"{post.path}/{renderer.config.index_name}", content, post.title)

        page = pager.feed((post.date.year, post.date.month), post)
        if page is not None:
            write_month(renderer, output_dir, page)
    page = pager.close()
    if page is not None:
        write_month(renderer, output_dir, page)


def build_tags(renderer: ThemeRenderer, output_dir: Path) -> None:
    ext = renderer.config.extension
    locale = renderer.locale
    tags = renderer.index.sorted_tags()
    for info in tags:
        heading = f"{locale.text('tags')} {html.escape(info.name)}"
        posts = renderer.index.posts_tagged(info.name)
        for page in paginate(posts, renderer.config.page_size):
            content = format_archive(renderer, page, heading, "../../")
            rel_path = f"tags/{info.slug}/{page_filename(page.index, ext)}"
            write_page(renderer, output_dir, rel_path, content, info.name)
    if tags:
        content = (
            f'<div class="section">{locale.text("taglist")}</div>\n\n'
            f"<ul>\n{renderer.list_of_tags('../')}\n</ul>"
        )
        write_page(renderer, output_dir, f"tags/{page_filename(0, ext)}", content, locale.text("taglist"))


def build_pages(renderer: ThemeRenderer, output_dir: Path) -> None:
    for page in renderer.index.pages:
        content = f'<h2 class="post">{page.title}</h2>\n\n{page.body}'
        write_page(renderer, output_dir, f"{page.path}/{renderer.config.index_name}", content, page.title)


def build_rss(renderer: ThemeRenderer, output_dir: Path) -> bool:
    config = renderer.config
    if not config.url:
        warn("Missing blog.url option. Skipping the RSS feed.")
        return False
    base = config.url.rstrip("/")
    root = base + "/"
    items = []
    for post in renderer.index.posts[: config.feed_size]:
        link = renderer.dir_url(root, post.path)
        text = post.body if config.feed_full else post.summary
        description = renderer.resolve_inline(text, root)
        items.append(
            "\n".join(
                [
                    "  <item>",
                    f"    <title>{html.escape(strip_tags(post.title))}</title>",
                    f"    <link>{link}</link>",
                    f'    <guid isPermaLink="true">{link}</guid>',
                    f"    <pubDate>{rfc822_date(post.date)}</pubDate>",
                    f"    <description>{html.escape(description)}</description>",
                    "  </item>",
                ]
            )
        )
    rss = "\n".join(
        [
            f'<?xml version="1.0" encoding="{config.encoding}"?>',
            '<rss version="2.0">',
            "<channel>",
            f"  <title>{html.escape(strip_tags(config.title))}</title>",
            f"  <link>{base}/</link>",
            f"  <description>{html.escape(strip_tags(config.subtitle))}</description>",
            f"  <generator>flatblog {__version__}</generator>",
            *items,
            "</channel>",
            "</rss>",
            "",
        ]
    )
    path = output_dir / "index.rss"
    write_text(path, rss, config.encoding)
    if renderer.options.verbose > 1:
        print(f"Created {path}")
    return True


def copy_stylesheet(renderer: ThemeRenderer, output_dir: Path) -> Path:
    config = renderer.config
    source = renderer.blogdir / "style" / config.style_file
    dest = output_dir / config.style_file
    if config.processor != "markdown":
        copy_file(source, dest)
    else:
        try:
            stylesheet = source.read_text(encoding=config.encoding)
        except (OSError, LookupError, UnicodeDecodeError) as exc:
            raise BuildError(f"Unable to read stylesheet `{source}': {exc}") from exc
        highlight = HtmlFormatter().get_style_defs(".codehilite")
        write_text(dest, f"{stylesheet.rstrip()}\n\n{highlight}\n", config.encoding)
    if renderer.options.verbose > 1:
        print(f"Created {dest}")
    return dest
