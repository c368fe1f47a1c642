"""Jinja2 rendering — shared-advice post bodies and the static HTML feed export."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from catcircle.schemas.feed import Community, Post
from catcircle.schemas.profiles import DEFAULT_OWNER, OwnerProfile

_TEMPLATE_DIR = Path(__file__).parent / "templates"

_text_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)
_html_env = Environment(loader=FileSystemLoader(str(_TEMPLATE_DIR)), autoescape=True)


def render_advice_post(*, summary: str, steps: list[str]) -> str:
    """Body of a post created from an assistant reply."""
    return _text_env.get_template("advice_post.txt.j2").render(summary=summary, steps=steps).rstrip()


def _format_ts(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def render_feed_html(
    posts: list[Post],
    owners: list[OwnerProfile],
    communities: list[Community] | None = None,
    *,
    title: str = "Feed",
) -> str:
    """Render posts into a self-contained HTML page.

    Posts whose owner no longer exists render with the default profile.
    """
    by_id = {o.id: o for o in owners}
    community_names = {c.id: c.name for c in communities or []}

    def author(owner_id: str) -> str:
        return by_id.get(owner_id, DEFAULT_OWNER).account_name

    posts_data = [
        {
            "owner": by_id.get(p.owner_id, DEFAULT_OWNER),
            "type": p.type.value.replace("_", " "),
            "community": community_names.get(p.community_id) if p.community_id else None,
            "content": p.content,
            "media_url": p.media_url,
            "tags": p.tags,
            "likes": p.likes,
            "tips": p.tips,
            "posted_at": _format_ts(p.timestamp),
            "comments": [{"author": author(c.owner_id), "text": c.text} for c in p.comments],
        }
        for p in posts
    ]
    return _html_env.get_template("feed.html.j2").render(title=title, posts=posts_data)
