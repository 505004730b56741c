"""
Transcript Forge - HTML Transcript Generator
============================================

Assembles the standalone transcript document.

Messages are grouped into consecutive runs by the same author; each run
gets one avatar and header. Every piece of a message (text, embeds,
attachments, components, reactions) is rendered on its own so a piece
that fails becomes a placeholder instead of blanking the message.
"""

import io
from typing import Any, List, Optional

import discord

from transcript_forge.core.config import TranscriptConfig, get_config
from transcript_forge.core.logger import logger
from transcript_forge.utils.formatting import (
    color_to_hex,
    escape_html,
    escape_text,
    format_date,
    format_file_size,
    get_file_icon,
)
from .markdown import MarkdownRenderer, render_emoji
from .members import Participant, collect_participants
from .models import (
    ComponentType,
    HtmlGenerationOptions,
    TranscriptAttachment,
    TranscriptComponent,
    TranscriptEmbed,
    TranscriptMessage,
    TranscriptReaction,
    TranscriptResult,
)
from .scripts import build_script
from .styles import build_stylesheet


# =============================================================================
# Constants
# =============================================================================

BUTTON_STYLES = {
    1: "background-color:#4f545c;color:#ffffff;border:none;",
    2: "background-color:#5865f2;color:#ffffff;border:none;",
    3: "background-color:#43b581;color:#ffffff;border:none;",
    4: "background-color:#f04747;color:#ffffff;border:none;",
    5: "background-color:transparent;color:#00aff4;border:1px solid #dcddde;",
}
LINK_BUTTON_STYLE = 5

EMBED_PLACEHOLDER = "[Embed could not be displayed]"
ATTACHMENT_PLACEHOLDER = "[Attachment could not be displayed]"
COMPONENTS_PLACEHOLDER = "[Components could not be displayed]"
REACTIONS_PLACEHOLDER = "[Reactions could not be displayed]"
MESSAGE_PLACEHOLDER = "[Message processing error]"
GROUP_PLACEHOLDER = "[Error displaying messages]"

HIDE_ON_ERROR = "this.style.display='none'"


def _safe_url(url: Optional[str]) -> str:
    """Escaped URL for href/src, or '#' for anything that isn't http(s)."""
    if not url or not url.lower().startswith(("http://", "https://")):
        return "#"
    return escape_html(url)


def _placeholder(text: str) -> str:
    return f'<div class="render-error">{escape_text(text)}</div>'


# =============================================================================
# Grouping
# =============================================================================

def group_messages(messages: List[TranscriptMessage]) -> List[List[TranscriptMessage]]:
    """Split messages into maximal consecutive runs by author id."""
    groups: List[List[TranscriptMessage]] = []
    for message in messages:
        if groups and groups[-1][0].author.id == message.author.id:
            groups[-1].append(message)
        else:
            groups.append([message])
    return groups


# =============================================================================
# Embeds
# =============================================================================

def render_embed(
    embed: TranscriptEmbed,
    renderer: MarkdownRenderer,
    ctx: Any = None,
    config: Optional[TranscriptConfig] = None,
) -> str:
    """
    Render one embed.

    image, video, gifv and link/article embeds with a URL get their own
    compact layouts; everything else uses the rich layout.
    """
    config = config or get_config()
    color = color_to_hex(embed.color)
    embed_type = (embed.type or "rich").lower()

    if embed.url:
        if embed_type == "image":
            return _render_image_embed(embed, color)
        if embed_type == "video":
            return _render_video_embed(embed, color, renderer, ctx)
        if embed_type == "gifv":
            return _render_gif_embed(embed, color)
        if embed_type in ("link", "article"):
            return _render_link_embed(embed, color, renderer, ctx)

    return _render_rich_embed(embed, color, renderer, ctx, config)


def _render_image_embed(embed: TranscriptEmbed, color: str) -> str:
    return (
        f'<div class="embed embed-image-type" style="border-left-color: {color}">'
        f'<div class="embed-body">'
        f'<a class="embed-link" href="{_safe_url(embed.url)}" target="_blank" rel="noopener">'
        f'🖼️ View Original Image</a>'
        f'<div class="embed-media-note">Image may no longer be available in closed tickets</div>'
        f'</div></div>'
    )


def _render_video_embed(
    embed: TranscriptEmbed, color: str, renderer: MarkdownRenderer, ctx: Any,
) -> str:
    parts = [
        f'<div class="embed embed-video-type" style="border-left-color: {color}">',
        '<div class="embed-body">',
    ]
    if embed.provider:
        parts.append(f'<div class="embed-provider">{escape_text(embed.provider.name)}</div>')
    if embed.title:
        parts.append(
            f'<div class="embed-title"><a class="embed-title-link" href="{_safe_url(embed.url)}" '
            f'target="_blank" rel="noopener">{escape_text(embed.title)}</a></div>'
        )
    if embed.description:
        parts.append(f'<div class="embed-description">{renderer.render(embed.description, ctx)}</div>')

    background = ""
    if embed.thumbnail:
        background = f' style="background-image: url(\'{_safe_url(embed.thumbnail.best_url)}\')"'
    parts.append(
        f'<a class="embed-video-placeholder" href="{_safe_url(embed.url)}" target="_blank" '
        f'rel="noopener"{background}><span class="play-button">▶</span></a>'
    )
    parts.append(
        f'<a class="embed-link" href="{_safe_url(embed.url)}" target="_blank" rel="noopener">Video Link</a>'
    )
    parts.append('</div></div>')
    return "".join(parts)


def _render_gif_embed(embed: TranscriptEmbed, color: str) -> str:
    preview = embed.thumbnail.best_url if embed.thumbnail else embed.url
    return (
        f'<div class="embed embed-gif-type" style="border-left-color: {color}">'
        f'<div class="embed-body">'
        f'<a href="{_safe_url(embed.url)}" target="_blank" rel="noopener">'
        f'<img class="embed-image" src="{_safe_url(preview)}" alt="GIF" loading="lazy" onerror="{HIDE_ON_ERROR}">'
        f'</a>'
        f'<a class="embed-link" href="{_safe_url(embed.url)}" target="_blank" rel="noopener">'
        f'🎞️ View Original GIF</a>'
        f'<div class="embed-media-note">GIF may no longer be available in closed tickets</div>'
        f'</div></div>'
    )


def _render_link_embed(
    embed: TranscriptEmbed, color: str, renderer: MarkdownRenderer, ctx: Any,
) -> str:
    parts = [
        f'<div class="embed embed-link-type" style="border-left-color: {color}">',
        '<div class="embed-body">',
    ]
    if embed.provider:
        parts.append(f'<div class="embed-provider">{escape_text(embed.provider.name)}</div>')
    if embed.author and embed.author.name:
        parts.append(f'<div class="embed-author">{escape_text(embed.author.name)}</div>')
    parts.append(
        f'<div class="embed-title"><a class="embed-title-link" href="{_safe_url(embed.url)}" '
        f'target="_blank" rel="noopener">{escape_text(embed.title or embed.url)}</a></div>'
    )
    if embed.description:
        parts.append(f'<div class="embed-description">{renderer.render(embed.description, ctx)}</div>')
    parts.append('</div>')
    if embed.thumbnail:
        parts.append(
            f'<img class="embed-thumbnail" src="{_safe_url(embed.thumbnail.best_url)}" alt="" '
            f'loading="lazy" onerror="{HIDE_ON_ERROR}">'
        )
    parts.append('</div>')
    return "".join(parts)


def _render_rich_embed(
    embed: TranscriptEmbed,
    color: str,
    renderer: MarkdownRenderer,
    ctx: Any,
    config: TranscriptConfig,
) -> str:
    parts = [
        f'<div class="embed" style="border-left-color: {color}">',
        '<div class="embed-body">',
    ]

    # Author
    if embed.author and embed.author.name:
        parts.append('<div class="embed-author">')
        if embed.author.icon_url:
            parts.append(
                f'<img class="embed-author-icon" src="{_safe_url(embed.author.icon_url)}" alt="" '
                f'onerror="{HIDE_ON_ERROR}">'
            )
        name = escape_text(embed.author.name)
        if embed.author.url:
            parts.append(f'<a href="{_safe_url(embed.author.url)}" target="_blank" rel="noopener">{name}</a>')
        else:
            parts.append(f'<span>{name}</span>')
        parts.append('</div>')

    # Title
    if embed.title:
        title = escape_text(embed.title)
        if embed.url:
            title = (
                f'<a class="embed-title-link" href="{_safe_url(embed.url)}" '
                f'target="_blank" rel="noopener">{title}</a>'
            )
        parts.append(f'<div class="embed-title">{title}</div>')

    # Description
    if embed.description:
        parts.append(f'<div class="embed-description">{renderer.render(embed.description, ctx)}</div>')

    # Fields
    if embed.fields:
        all_inline = all(f.inline for f in embed.fields)
        columns = "repeat(3, 1fr)" if all_inline else "1fr"
        parts.append(f'<div class="embed-fields" style="grid-template-columns: {columns}">')
        for embed_field in embed.fields:
            span = "" if embed_field.inline else ' style="grid-column: 1 / -1"'
            parts.append(
                f'<div class="embed-field"{span}>'
                f'<div class="field-name">{renderer.render(embed_field.name, ctx)}</div>'
                f'<div class="field-value">{renderer.render(embed_field.value, ctx)}</div>'
                f'</div>'
            )
        parts.append('</div>')

    # Image
    if embed.image:
        parts.append(
            f'<img class="embed-image" src="{_safe_url(embed.image.best_url)}" alt="" '
            f'loading="lazy" onerror="{HIDE_ON_ERROR}">'
        )

    # Footer
    footer_bits = []
    if embed.footer and embed.footer.text:
        footer_bits.append(escape_text(embed.footer.text))
    if embed.timestamp:
        footer_bits.append(escape_text(format_date(embed.timestamp, config.tz)))
    if footer_bits:
        parts.append('<div class="embed-footer">')
        if embed.footer and embed.footer.icon_url:
            parts.append(
                f'<img class="embed-footer-icon" src="{_safe_url(embed.footer.icon_url)}" alt="" '
                f'onerror="{HIDE_ON_ERROR}">'
            )
        parts.append(f'<span>{" • ".join(footer_bits)}</span>')
        parts.append('</div>')

    parts.append('</div>')

    # Thumbnail sits beside the body
    if embed.thumbnail:
        parts.append(
            f'<img class="embed-thumbnail" src="{_safe_url(embed.thumbnail.best_url)}" alt="" '
            f'loading="lazy" onerror="{HIDE_ON_ERROR}">'
        )

    parts.append('</div>')
    return "".join(parts)


# =============================================================================
# Attachments
# =============================================================================

def render_attachment(attachment: TranscriptAttachment) -> str:
    """
    Link to an attachment at its source.

    Media gets a note that the file may be gone; the binary itself is never
    embedded or re-hosted.
    """
    label = f"{escape_text(attachment.name)} ({format_file_size(attachment.size)})"
    href = _safe_url(attachment.url)

    if attachment.is_media:
        if attachment.is_image:
            icon, kind = "🖼️", "Image"
        elif attachment.is_video:
            icon, kind = "🎬", "Video"
        else:
            icon, kind = "🎵", "Audio"
        return (
            f'<div class="attachment-media">'
            f'<a href="{href}" target="_blank" rel="noopener">{icon} {label}</a>'
            f'</div>'
            f'<div class="attachment-note">{kind} may no longer be available in closed tickets</div>'
        )

    return (
        f'<a class="attachment-file" href="{href}" target="_blank" rel="noopener">'
        f'{get_file_icon(attachment.name)} {label}</a>'
    )


# =============================================================================
# Components
# =============================================================================

def render_component(component: TranscriptComponent, emoji_cdn_url: str) -> str:
    """Render one component as an inert, disabled analog."""
    if component.type == ComponentType.BUTTON:
        css = BUTTON_STYLES.get(component.style, BUTTON_STYLES[1])
        classes = "component-button"
        if component.style == LINK_BUTTON_STYLE:
            classes += " component-button-link"
        if component.disabled:
            classes += " disabled"
        label = escape_text(component.label or ("" if component.emoji else "Button"))
        title = f"Opens: {component.url}" if component.url else (component.label or "Button")
        return (
            f'<button class="{classes}" style="{css}" disabled title="{escape_html(title)}">'
            f'{render_emoji(component.emoji, emoji_cdn_url)}{label}</button>'
        )

    if component.type == ComponentType.SELECT:
        placeholder = component.placeholder or "Select an option..."
        count = len(component.options)
        summary = f"{count} option{'' if count == 1 else 's'} available" if count else "No options"
        return (
            f'<div class="component-select" title="{summary}">'
            f'<span class="component-select-placeholder">{escape_text(placeholder)}</span>'
            f'<span class="select-arrow">▼</span>'
            f'</div>'
        )

    if component.type == ComponentType.TEXT_INPUT:
        placeholder = component.placeholder or "Enter text..."
        label = f'<span>{escape_text(component.label)}</span>' if component.label else ""
        return (
            f'<div class="component-text-input">{label}'
            f'<input type="text" placeholder="{escape_html(placeholder)}" disabled readonly>'
            f'</div>'
        )

    return f'<div class="component-unknown">Unknown Component (Type: {int(component.type)})</div>'


def render_components(components: List[TranscriptComponent], emoji_cdn_url: str) -> str:
    if not components:
        return ""
    rendered = "".join(render_component(c, emoji_cdn_url) for c in components)
    return f'<div class="components">{rendered}</div>'


# =============================================================================
# Reactions
# =============================================================================

def render_reactions(reactions: List[TranscriptReaction], emoji_cdn_url: str) -> str:
    if not reactions:
        return ""
    chips = []
    for reaction in reactions:
        classes = "reaction reacted" if reaction.me else "reaction"
        chips.append(
            f'<div class="{classes}">'
            f'<span>{render_emoji(reaction.emoji, emoji_cdn_url)}</span>'
            f'<span class="reaction-count">{int(reaction.count)}</span>'
            f'</div>'
        )
    return f'<div class="reactions">{"".join(chips)}</div>'


# =============================================================================
# Messages
# =============================================================================

def render_message(
    message: TranscriptMessage,
    renderer: MarkdownRenderer,
    ctx: Any,
    config: TranscriptConfig,
) -> str:
    """Render one message body; each piece fails on its own."""
    parts = [f'<div class="message" data-message-id="{escape_html(message.id)}">']

    try:
        text = renderer.render(message.content, ctx)
        if message.edited:
            edited_title = ""
            if message.edited_timestamp:
                edited_title = f' title="{escape_html(format_date(message.edited_timestamp, config.tz))}"'
            text += f'<span class="edited"{edited_title}>(edited)</span>'
        empty = "" if text else " empty"
        parts.append(f'<div class="message-text{empty}">{text}</div>')
    except Exception as e:
        logger.error("Transcript Text Render Failed", [
            ("Message", message.id),
            ("Error", str(e)[:100]),
        ])
        parts.append(_placeholder(MESSAGE_PLACEHOLDER))

    for embed in message.embeds:
        try:
            parts.append(render_embed(embed, renderer, ctx, config))
        except Exception as e:
            logger.error("Transcript Embed Render Failed", [
                ("Message", message.id),
                ("Error", str(e)[:100]),
            ])
            parts.append(_placeholder(EMBED_PLACEHOLDER))

    if message.attachments:
        rendered = []
        for attachment in message.attachments:
            try:
                rendered.append(render_attachment(attachment))
            except Exception as e:
                logger.error("Transcript Attachment Render Failed", [
                    ("Message", message.id),
                    ("Error", str(e)[:100]),
                ])
                rendered.append(_placeholder(ATTACHMENT_PLACEHOLDER))
        parts.append(f'<div class="attachments">{"".join(rendered)}</div>')

    try:
        parts.append(render_components(message.components, config.emoji_cdn_url))
    except Exception as e:
        logger.error("Transcript Components Render Failed", [
            ("Message", message.id),
            ("Error", str(e)[:100]),
        ])
        parts.append(_placeholder(COMPONENTS_PLACEHOLDER))

    try:
        parts.append(render_reactions(message.reactions, config.emoji_cdn_url))
    except Exception as e:
        logger.error("Transcript Reactions Render Failed", [
            ("Message", message.id),
            ("Error", str(e)[:100]),
        ])
        parts.append(_placeholder(REACTIONS_PLACEHOLDER))

    parts.append('</div>')
    return "".join(parts)


def render_message_group(
    group: List[TranscriptMessage],
    renderer: MarkdownRenderer,
    ctx: Any = None,
    config: Optional[TranscriptConfig] = None,
) -> str:
    """Render a run of messages by one author under a single header."""
    if not group:
        return ""
    config = config or get_config()

    try:
        first = group[0]
        author = first.author
        avatar = _safe_url(author.avatar_url) if author.avatar_url else escape_html(config.default_avatar_url)
        bot_tag = '<span class="bot-tag">BOT</span>' if author.bot else ""
        timestamp = escape_html(format_date(first.timestamp, config.tz))

        parts = [
            f'<div class="message-group" data-user-id="{escape_html(author.id)}" id="msg-{escape_html(first.id)}">',
            f'<img class="avatar" src="{avatar}" alt="" loading="lazy" '
            f'onerror="this.onerror=null;this.src=\'{escape_html(config.default_avatar_url)}\'">',
            '<div class="message-content">',
            f'<div class="message-header">'
            f'<span class="username" title="{escape_html(author.username)}">{escape_text(author.name)}</span>'
            f'{bot_tag}'
            f'<span class="timestamp" title="{timestamp}">{timestamp}</span>'
            f'</div>',
        ]
    except Exception as e:
        logger.error("Transcript Group Render Failed", [
            ("First Message", str(getattr(group[0], "id", "?"))),
            ("Error", str(e)[:100]),
        ])
        return f'<div class="system-message">{escape_text(GROUP_PLACEHOLDER)}</div>'

    for message in group:
        try:
            parts.append(render_message(message, renderer, ctx, config))
        except Exception as e:
            logger.error("Transcript Message Render Failed", [
                ("Message", message.id),
                ("Error", str(e)[:100]),
            ])
            parts.append(_placeholder(MESSAGE_PLACEHOLDER))

    parts.append('</div></div>')
    return "".join(parts)


# =============================================================================
# Sidebar
# =============================================================================

def render_sidebar_members(
    participants: List[Participant],
    limit: int,
    default_avatar_url: str,
) -> str:
    """Member list entries for the first `limit` participants."""
    if not participants:
        return '<div class="no-members">No participants found</div>'

    entries = []
    for participant in participants[:limit]:
        avatar = _safe_url(participant.avatar_url) if participant.avatar_url else escape_html(default_avatar_url)
        bot_tag = '<span class="bot-tag">BOT</span>' if participant.bot else ""
        entries.append(
            f'<div class="member" data-user-id="{escape_html(participant.id)}">'
            f'<div class="member-avatar-wrap">'
            f'<img class="member-avatar" src="{avatar}" alt="" loading="lazy" '
            f'onerror="this.onerror=null;this.src=\'{escape_html(default_avatar_url)}\'">'
            f'<span class="member-status status-{participant.status}" title="{participant.status}"></span>'
            f'</div>'
            f'<span class="member-name" style="color: {escape_html(participant.color)}">'
            f'{escape_text(participant.name)}</span>{bot_tag}'
            f'</div>'
        )
    return "".join(entries)


# =============================================================================
# HTML Generation
# =============================================================================

async def generate_html_transcript(
    messages: List[TranscriptMessage],
    options: HtmlGenerationOptions,
    channel: Any = None,
    renderer: Optional[MarkdownRenderer] = None,
    config: Optional[TranscriptConfig] = None,
    participants: Optional[List[Participant]] = None,
) -> str:
    """
    Generate the standalone transcript document.

    Args:
        messages: Converted messages, oldest first
        options: Display options and channel/guild descriptors
        channel: Live channel, used for mention names and participants
        renderer: Markdown renderer (a default one is built if None)
        participants: Pre-collected sidebar members (collected if None)

    Returns:
        Complete HTML document string.
    """
    config = config or get_config()
    renderer = renderer or MarkdownRenderer(config=config)

    if participants is None:
        participants = await collect_participants(channel, messages) if channel is not None else []

    channel_info = options.channel_info
    guild_info = options.guild_info
    generated = escape_text(format_date(options.generated_at, config.tz))
    channel_name = escape_text(channel_info.name)
    participant_count = len(participants)

    groups_html = "".join(
        render_message_group(group, renderer, channel, config)
        for group in group_messages(messages)
    )

    topic_html = (
        f'<span class="topbar-topic" title="{escape_html(channel_info.topic)}">{escape_text(channel_info.topic)}</span>'
        if channel_info.topic else ""
    )

    search_html = ""
    if options.include_search:
        search_html = (
            '<div class="search-box">'
            '<input type="text" id="searchInput" placeholder="Search transcript..." autocomplete="off">'
            '<span class="search-count" id="searchCount"></span>'
            '</div>'
        )

    jump_html = ""
    if options.include_jump_nav:
        jump_html = (
            '<span class="jump-nav">'
            '<button class="topbar-button" id="scrollToTop" title="Scroll to top">⬆</button>'
            '<button class="topbar-button" id="scrollToBottom" title="Scroll to bottom">⬇</button>'
            '</span>'
        )

    body_class = "" if options.dark_mode else ' class="light-mode"'

    html_output = f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <meta name="generator" content="{escape_html(config.generator_name)}">
    <title>Transcript - #{channel_name}</title>
    <style>{build_stylesheet(options.custom_css)}</style>
</head>
<body{body_class}>
    <div class="app">
        <aside class="sidebar" id="sidebar">
            <div class="sidebar-header">
                <div class="channel-name">#{channel_name}</div>
                <div class="sidebar-info">
                    <div>Server: {escape_text(guild_info.name)}</div>
                    <div>Generated: {generated}</div>
                    <div>Messages: {len(messages)}</div>
                    <div>Channel ID: {escape_text(channel_info.id)}</div>
                </div>
            </div>
            <div class="members-header">Participants — {participant_count}</div>
            <div class="member-list">
                {render_sidebar_members(participants, config.sidebar_member_limit, config.default_avatar_url)}
            </div>
        </aside>
        <div class="sidebar-overlay" id="sidebarOverlay"></div>
        <main class="main">
            <header class="topbar">
                <button class="sidebar-toggle" id="sidebarToggle" title="Toggle sidebar">☰</button>
                <span class="topbar-title">#{channel_name}</span>
                {topic_html}
                <span class="topbar-spacer"></span>
                {search_html}
                <button class="topbar-button" id="darkModeToggle" title="Toggle dark/light mode">🌓</button>
                {jump_html}
                <span class="topbar-participants">{participant_count} participants</span>
            </header>
            <div class="transcript-content" id="transcriptContent">
{groups_html}
                <div class="system-message">End of transcript • Generated on {generated}</div>
            </div>
        </main>
    </div>
    {build_script(options.include_search, options.include_jump_nav)}
</body>
</html>'''

    logger.debug("HTML Transcript Generated", [
        ("Channel", channel_info.name),
        ("Messages", str(len(messages))),
        ("Groups", str(groups_html.count('class="message-group"'))),
        ("Participants", str(participant_count)),
    ])

    return html_output


def create_transcript_file(
    result: TranscriptResult,
    file_name: Optional[str] = None,
) -> discord.File:
    """
    Wrap a transcript result as a Discord file.

    The HTML document is used when present, otherwise the plain-text
    fallback is sent as a .txt file.

    Args:
        result: Result from generate_transcript()
        file_name: Base name without extension (defaults to result.file_name,
            then the channel name)

    Returns:
        Discord File object
    """
    channel_info = result.metadata.channel
    base = file_name or result.file_name or f"transcript-{channel_info.name or channel_info.id or 'channel'}"
    if result.html:
        content, filename = result.html, f"{base}.html"
    else:
        content, filename = result.text, f"{base}.txt"

    buffer = io.BytesIO(content.encode("utf-8"))
    file_size = buffer.getbuffer().nbytes

    logger.debug("Transcript File Created", [
        ("Filename", filename),
        ("Size", f"{file_size / 1024:.1f} KB"),
    ])

    return discord.File(buffer, filename=filename)


__all__ = [
    "group_messages",
    "render_embed",
    "render_attachment",
    "render_component",
    "render_components",
    "render_reactions",
    "render_message",
    "render_message_group",
    "render_sidebar_members",
    "generate_html_transcript",
    "create_transcript_file",
]
