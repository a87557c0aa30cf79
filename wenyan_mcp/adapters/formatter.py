"""Markdown to WeChat-ready HTML formatter.

Markdown 원문을 公众号 편집기에 붙여넣을 수 있는 HTML로 변환합니다.
- frontmatter에서 title/cover/description 추출 (python-frontmatter)
- Markdown 렌더링 (markdown + Pygments 코드 하이라이트)
- 테마 CSS를 각 요소의 style 속성으로 인라인 처리 (css-inline)

公众号는 <style> 태그를 제거하므로 모든 스타일은 인라인이어야 합니다.
"""
from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import css_inline
import frontmatter
import markdown
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

_IMG_SRC = re.compile(r"<img\b[^>]*?\bsrc=[\"']([^\"']+)[\"']", re.IGNORECASE)

_BASE_CSS = """
#wenyan { font-size: 16px; line-height: 1.75; color: #333; letter-spacing: 0.5px; word-break: break-word; }
#wenyan p { margin: 1em 0; }
#wenyan img { display: block; max-width: 100%; margin: 1em auto; }
#wenyan table { border-collapse: collapse; width: 100%; margin: 1em 0; }
#wenyan th, #wenyan td { border: 1px solid #dfdfdf; padding: 6px 10px; }
#wenyan pre { overflow-x: auto; padding: 12px; border-radius: 6px; font-size: 13px; line-height: 1.5; }
#wenyan code { font-family: Menlo, Consolas, monospace; }
#wenyan p code, #wenyan li code { padding: 2px 4px; border-radius: 3px; background: #f3f3f3; color: #d14; }
#wenyan ul, #wenyan ol { padding-left: 2em; margin: 1em 0; }
"""


@dataclass(frozen=True)
class Theme:
    """Theme entry in the catalog."""
    id: str
    name: str
    description: str
    css: str


@dataclass
class FormattedContent:
    """Result of formatting a Markdown article.

    Attributes:
        title: frontmatter의 title (없으면 None)
        cover: 표지 이미지 경로/URL (없으면 None)
        description: frontmatter의 description (없으면 None)
        content: 인라인 스타일이 적용된 HTML 본문
    """
    title: Optional[str]
    cover: Optional[str]
    description: Optional[str]
    content: str


THEMES: Dict[str, Theme] = {
    theme.id: theme
    for theme in [
        Theme(
            id="default",
            name="Default",
            description="A clean, classic layout ideal for long-form reading.",
            css="""
#wenyan h1 { font-size: 1.6em; text-align: center; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.4em; border-bottom: 1px solid #eaecef; padding-bottom: 0.3em; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.2em; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 0 1em; color: #6a737d; border-left: 4px solid #dfe2e5; }
#wenyan a { color: #0366d6; text-decoration: none; }
""",
        ),
        Theme(
            id="orangeheart",
            name="Orange Heart",
            description="A vibrant and elegant theme in warm orange tones.",
            css="""
#wenyan h1 { font-size: 1.6em; text-align: center; color: #ef7060; margin: 1.2em 0 0.8em; }
#wenyan h2 { display: inline-block; font-size: 1.3em; color: #fff; background: #ef7060; padding: 3px 10px; border-radius: 3px; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; color: #ef7060; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 10px 12px; color: #666; background: #fff9f9; border-left: 3px solid #ef7060; }
#wenyan a { color: #ef7060; text-decoration: none; border-bottom: 1px solid #ef7060; }
#wenyan strong { color: #ef7060; }
""",
        ),
        Theme(
            id="rainbow",
            name="Rainbow",
            description="A colorful, lively theme with a clean layout.",
            css="""
#wenyan h1 { font-size: 1.6em; text-align: center; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.35em; background: #f4f0ff; border-left: 6px solid #9b6dff; padding: 4px 10px; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; border-left: 4px solid #3cc3ff; padding-left: 8px; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 10px 12px; color: #555; background: #fffbe6; border-left: 4px solid #ffcb2e; }
#wenyan a { color: #ff6b6b; text-decoration: none; }
""",
        ),
        Theme(
            id="lapis",
            name="Lapis",
            description="A minimal and refreshing theme in cool blue tones.",
            css="""
#wenyan h1 { font-size: 1.6em; color: #4870ac; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.35em; color: #4870ac; border-bottom: 2px solid #4870ac; padding-bottom: 4px; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; color: #4870ac; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 8px 12px; color: #555; background: #f0f5fc; border-left: 4px solid #4870ac; }
#wenyan a { color: #4870ac; text-decoration: none; }
#wenyan strong { color: #4870ac; }
""",
        ),
        Theme(
            id="pie",
            name="Pie",
            description="Inspired by sspai.com and Misty. Modern, sharp, and stylish.",
            css="""
#wenyan h1 { font-size: 1.6em; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.35em; border-left: 4px solid #da282a; padding-left: 10px; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 8px 12px; color: #7a7a7a; background: #f7f7f7; border-left: 3px solid #bdbdbd; }
#wenyan a { color: #da282a; text-decoration: none; }
""",
        ),
        Theme(
            id="maize",
            name="Maize",
            description="A crisp, light theme with a soft maize palette.",
            css="""
#wenyan h1 { font-size: 1.6em; text-align: center; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.35em; background: #fbf1c7; padding: 4px 10px; border-radius: 4px; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; color: #b57614; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 8px 12px; color: #665c54; background: #fdf6e3; border-left: 4px solid #d79921; }
#wenyan a { color: #b57614; text-decoration: none; }
""",
        ),
        Theme(
            id="purple",
            name="Purple",
            description="Clean and minimalist, with a subtle purple accent.",
            css="""
#wenyan h1 { font-size: 1.6em; color: #8064a9; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.35em; color: #8064a9; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; color: #8064a9; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 8px 12px; color: #666; background: #f8f5fc; border-left: 3px solid #8064a9; }
#wenyan a { color: #8064a9; text-decoration: none; }
""",
        ),
        Theme(
            id="phycat",
            name="物理猫-薄荷",
            description="A mint-green theme with clear structure and hierarchy.",
            css="""
#wenyan h1 { font-size: 1.6em; text-align: center; color: #009874; margin: 1.2em 0 0.8em; }
#wenyan h2 { font-size: 1.35em; color: #fff; background: #3eb370; padding: 4px 12px; border-radius: 6px; margin: 1.2em 0 0.8em; }
#wenyan h3 { font-size: 1.15em; color: #009874; border-bottom: 1px dashed #3eb370; margin: 1em 0 0.6em; }
#wenyan blockquote { margin: 1em 0; padding: 8px 12px; color: #555; background: #effaf4; border-left: 4px solid #3eb370; }
#wenyan a { color: #009874; text-decoration: none; }
""",
        ),
    ]
}

DEFAULT_THEME_ID = "default"


def list_themes() -> List[Theme]:
    """Return the theme catalog in declaration order."""
    return list(THEMES.values())


def get_theme(theme_id: Optional[str]) -> Theme:
    """Look up a theme, falling back to the default theme for unknown ids."""
    if theme_id and theme_id in THEMES:
        return THEMES[theme_id]
    if theme_id:
        logger.warning("Unknown theme '%s', falling back to '%s'", theme_id, DEFAULT_THEME_ID)
    return THEMES[DEFAULT_THEME_ID]


def _resolve_highlight_style(highlight_style: str) -> str:
    try:
        get_style_by_name(highlight_style)
    except ClassNotFound:
        logger.warning("Unknown highlight style '%s', using 'default'", highlight_style)
        return "default"
    return highlight_style


def _render_markdown(body: str, highlight_style: str) -> str:
    return markdown.markdown(
        body,
        extensions=["fenced_code", "tables", "footnotes", "sane_lists", "codehilite"],
        extension_configs={
            "codehilite": {
                "noclasses": True,
                "pygments_style": _resolve_highlight_style(highlight_style),
                "guess_lang": False,
            },
        },
        output_format="html",
    )


def _metadata_str(metadata: Dict[str, Any], key: str) -> Optional[str]:
    value = metadata.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def find_image_sources(markup: str) -> List[str]:
    """Return every <img> src in document order.

    HTML 엔티티(&amp; 등)는 디코딩된 실제 경로/URL로 반환합니다.
    """
    return [html.unescape(src) for src in _IMG_SRC.findall(markup)]


def format_content(
    markdown_text: str,
    theme_id: Optional[str] = None,
    highlight_style: str = "solarized-light",
    preserve_frontmatter: bool = True,
    extract_cover: bool = True,
) -> FormattedContent:
    """Render Markdown into themed, inline-styled HTML.

    Args:
        markdown_text: Markdown 원문 (frontmatter 포함 가능)
        theme_id: 테마 ID (없거나 알 수 없으면 default)
        highlight_style: Pygments 스타일 이름
        preserve_frontmatter: True면 frontmatter의 title/cover/description 사용
        extract_cover: True면 cover가 없을 때 본문 첫 이미지를 표지로 사용

    Returns:
        FormattedContent
    """
    post = frontmatter.loads(markdown_text)
    metadata = post.metadata if preserve_frontmatter else {}

    title = _metadata_str(metadata, "title")
    cover = _metadata_str(metadata, "cover")
    description = _metadata_str(metadata, "description")

    theme = get_theme(theme_id)
    rendered = _render_markdown(post.content, highlight_style)
    inlined = css_inline.inline_fragment(
        f'<section id="wenyan">{rendered}</section>',
        _BASE_CSS + theme.css,
    )

    if cover is None and extract_cover:
        sources = find_image_sources(inlined)
        if sources:
            cover = sources[0]

    logger.info("Formatted article (theme=%s, title=%s)", theme.id, title)
    return FormattedContent(
        title=title,
        cover=cover,
        description=description,
        content=inlined,
    )
