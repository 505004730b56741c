"""
Transcript Forge - Markdown Renderer
====================================

Renders the chat markdown dialect into escaped HTML fragments.

DESIGN:
    Rendering is split into three explicit steps instead of chained regex
    rewrites:

    1. tokenize()      raw text -> flat token list. Code blocks, inline
                       code, custom emoji, mentions, timestamps and URLs
                       are atomic tokens, so nothing inside them is ever
                       treated as formatting.
    2. parse_inline()  one line of tokens -> tree of styled spans. Double
                       markers are tokenized before single ones, so `**`
                       always wins over `*`. A marker with no partner on
                       the same line stays literal. Markers open only
                       before non-space and close only after non-space.
    3. emit            tree -> HTML. All user text is escaped here, at the
                       leaves, and nowhere else.

    Lines are handled between steps 1 and 2: heading and blockquote
    prefixes are stripped per line and the rendered lines are joined with
    <br>.

Supported syntax:
    **bold**  __underline__  *italic*  _italic_  ~~strike~~  ||spoiler||
    `code`  ```lang\\ncode```  > quote  >>> quote-rest  # / ## / ### heading
    <@id> <@!id> <#id> <@&id>  <:name:id> <a:name:id>  <t:epoch:style>
    bare and <angle-bracketed> URLs, backslash escapes
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from transcript_forge.core.config import TranscriptConfig, get_config
from transcript_forge.core.logger import logger
from transcript_forge.utils.formatting import escape_html, escape_text
from .models import TranscriptEmoji
from .resolver import EntityResolver


# =============================================================================
# Tokens
# =============================================================================

class TokenKind(Enum):
    TEXT = "text"
    NEWLINE = "newline"
    MARKER = "marker"
    CODE = "code"
    CODE_BLOCK = "code_block"
    EMOJI = "emoji"
    USER_MENTION = "user_mention"
    CHANNEL_MENTION = "channel_mention"
    ROLE_MENTION = "role_mention"
    TIMESTAMP = "timestamp"
    URL = "url"


@dataclass
class Token:
    kind: TokenKind
    value: str = ""
    # CODE_BLOCK language, TIMESTAMP style
    extra: Optional[str] = None
    # EMOJI
    animated: bool = False
    entity_id: Optional[str] = None
    # MARKER
    can_open: bool = True
    can_close: bool = True
    # TEXT from a backslash escape, never a line prefix
    escaped: bool = False


@dataclass
class Span:
    """A styled run of inline nodes, opened and closed by `marker`."""
    marker: str
    children: List[Union["Span", Token]] = field(default_factory=list)


Node = Union[Span, Token]


ATOMIC_PATTERN = re.compile(
    r"(?P<code_block>```(?:(?P<lang>[A-Za-z0-9_+\-]+)?\n)?(?P<block>.*?)```)"
    r"|(?P<code2>``(?P<code2_body>[^\n]+?)``)"
    r"|(?P<code>`(?P<code_body>[^`\n]+)`)"
    r"|(?P<emoji><(?P<emoji_animated>a?):(?P<emoji_name>[A-Za-z0-9_~]+):(?P<emoji_id>\d+)>)"
    r"|(?P<role><@&(?P<role_id>\d+)>)"
    r"|(?P<user><@!?(?P<user_id>\d+)>)"
    r"|(?P<channel><#(?P<channel_id>\d+)>)"
    r"|(?P<timestamp><t:(?P<epoch>-?\d+)(?::(?P<style>[tTdDfFR]))?>)"
    r"|(?P<angle_url><(?P<angle_url_body>https?://[^\s<>]+)>)"
    r"|(?P<url>https?://[^\s<]+)",
    re.DOTALL,
)

MARKER_CHARS = "*_~|"
ESCAPABLE_CHARS = "\\*_~|`>#<:"
URL_TRAILING_PUNCTUATION = ".,:;!?'\"*~|"

STYLE_TAGS = {
    "**": ("<strong>", "</strong>"),
    "__": ("<u>", "</u>"),
    "*": ("<em>", "</em>"),
    "_": ("<em>", "</em>"),
    "~~": ("<s>", "</s>"),
    "||": ('<span class="spoiler">', "</span>"),
}

HEADING_PREFIXES = (("### ", "h3"), ("## ", "h2"), ("# ", "h1"))


def _trim_url(url: str) -> str:
    """Drop trailing punctuation and unbalanced closing parens."""
    while url and (
        url[-1] in URL_TRAILING_PUNCTUATION
        or (url[-1] == ")" and url.count(")") > url.count("("))
    ):
        url = url[:-1]
    return url


def tokenize(text: str) -> List[Token]:
    """Split raw message text into a flat token list."""
    text = text.replace("\r\n", "\n")
    tokens: List[Token] = []
    position = 0

    for match in ATOMIC_PATTERN.finditer(text):
        start, end = match.span()
        if match.lastgroup == "url":
            url = _trim_url(match.group("url"))
            end = start + len(url)
            if not url:
                continue

        # A backslash in front of an atomic token makes it literal text
        if start > position and _escaped_at(text, start - 1):
            _scan_plain(text, position, start - 1, tokens)
            _append_text(tokens, text[start:end])
            position = end
            continue

        _scan_plain(text, position, start, tokens)
        tokens.append(_atomic_token(match, text[start:end]))
        position = end

    _scan_plain(text, position, len(text), tokens)
    return tokens


def _escaped_at(text: str, index: int) -> bool:
    """True when the backslash at `index` is itself not escaped."""
    count = 0
    while index >= 0 and text[index] == "\\":
        count += 1
        index -= 1
    return count % 2 == 1


def _atomic_token(match: "re.Match[str]", raw: str) -> Token:
    kind = match.lastgroup
    if kind == "code_block":
        return Token(TokenKind.CODE_BLOCK, match.group("block"), extra=match.group("lang"))
    if kind == "code2":
        return Token(TokenKind.CODE, match.group("code2_body").strip())
    if kind == "code":
        return Token(TokenKind.CODE, match.group("code_body"))
    if kind == "emoji":
        return Token(
            TokenKind.EMOJI,
            match.group("emoji_name"),
            animated=bool(match.group("emoji_animated")),
            entity_id=match.group("emoji_id"),
        )
    if kind == "role":
        return Token(TokenKind.ROLE_MENTION, raw, entity_id=match.group("role_id"))
    if kind == "user":
        return Token(TokenKind.USER_MENTION, raw, entity_id=match.group("user_id"))
    if kind == "channel":
        return Token(TokenKind.CHANNEL_MENTION, raw, entity_id=match.group("channel_id"))
    if kind == "timestamp":
        return Token(TokenKind.TIMESTAMP, match.group("epoch"), extra=match.group("style") or "f")
    if kind == "angle_url":
        return Token(TokenKind.URL, match.group("angle_url_body"))
    return Token(TokenKind.URL, raw)


def _append_text(tokens: List[Token], text: str) -> None:
    if not text:
        return
    if tokens and tokens[-1].kind is TokenKind.TEXT and not tokens[-1].escaped:
        tokens[-1].value += text
    else:
        tokens.append(Token(TokenKind.TEXT, text))


def _scan_plain(text: str, start: int, end: int, tokens: List[Token]) -> None:
    """Emit TEXT, NEWLINE and MARKER tokens for text[start:end]."""
    i = start
    while i < end:
        ch = text[i]

        if ch == "\\" and i + 1 < end and text[i + 1] in ESCAPABLE_CHARS:
            tokens.append(Token(TokenKind.TEXT, text[i + 1], escaped=True))
            i += 2
            continue

        if ch == "\n":
            tokens.append(Token(TokenKind.NEWLINE, "\n"))
            i += 1
            continue

        if ch not in MARKER_CHARS:
            _append_text(tokens, ch)
            i += 1
            continue

        run_end = i
        while run_end < end and text[run_end] == ch:
            run_end += 1
        before = text[i - 1] if i > 0 else " "
        after = text[run_end] if run_end < len(text) else " "
        _emit_run(tokens, ch, run_end - i, before, after)
        i = run_end


def _emit_run(tokens: List[Token], ch: str, length: int, before: str, after: str) -> None:
    """Turn a run of one marker character into marker tokens or text."""
    can_open = not after.isspace()
    can_close = not before.isspace()

    if ch in "~|":
        # Only exact pairs style, longer runs are text
        if length == 2:
            tokens.append(Token(TokenKind.MARKER, ch * 2, can_open=can_open, can_close=can_close))
        else:
            _append_text(tokens, ch * length)
        return

    # snake_case words keep their underscores
    if ch == "_" and before.isalnum() and after.isalnum():
        _append_text(tokens, ch * length)
        return

    if length == 1:
        tokens.append(Token(TokenKind.MARKER, ch, can_open=can_open, can_close=can_close))
    elif length == 2:
        tokens.append(Token(TokenKind.MARKER, ch * 2, can_open=can_open, can_close=can_close))
    elif length == 3:
        # Closing runs close the inner double first
        parts = [ch * 2, ch] if can_close and not can_open else [ch, ch * 2]
        for part in parts:
            tokens.append(Token(TokenKind.MARKER, part, can_open=can_open, can_close=can_close))
    else:
        _append_text(tokens, ch * length)


def split_lines(tokens: List[Token]) -> List[List[Token]]:
    lines: List[List[Token]] = [[]]
    for token in tokens:
        if token.kind is TokenKind.NEWLINE:
            lines.append([])
        else:
            lines[-1].append(token)
    return lines


# =============================================================================
# Inline Parser
# =============================================================================

def _find_closer(tokens: List[Token], opener_index: int) -> Optional[int]:
    marker = tokens[opener_index].value
    for index in range(opener_index + 2, len(tokens)):
        token = tokens[index]
        if token.kind is TokenKind.MARKER and token.value == marker and token.can_close:
            return index
    return None


def parse_inline(tokens: List[Token]) -> List[Node]:
    """
    Pair markers within one line into styled spans.

    Each opener takes the nearest closer of the same marker with at least
    one token between them. Unpaired markers become literal text.
    """
    nodes: List[Node] = []
    index = 0

    while index < len(tokens):
        token = tokens[index]

        if token.kind is TokenKind.MARKER:
            closer = _find_closer(tokens, index) if token.can_open else None
            if closer is not None:
                nodes.append(Span(token.value, parse_inline(tokens[index + 1:closer])))
                index = closer + 1
                continue
            token = Token(TokenKind.TEXT, token.value)

        if token.kind is TokenKind.TEXT and nodes and isinstance(nodes[-1], Token) \
                and nodes[-1].kind is TokenKind.TEXT:
            nodes[-1] = Token(TokenKind.TEXT, nodes[-1].value + token.value)
        else:
            nodes.append(token)
        index += 1

    return nodes


# =============================================================================
# Emoji HTML
# =============================================================================

STATIC_EMOJI_ONERROR = (
    "if(!this.dataset.retry){this.dataset.retry='1';this.src=this.src;}"
    "else{this.onerror=null;this.style.display='none';"
    "this.insertAdjacentText('afterend',this.alt);}"
)

ANIMATED_EMOJI_ONERROR = (
    "if(!this.dataset.retry){this.dataset.retry='1';this.src=this.src;}"
    "else if(!this.dataset.static){this.dataset.static='1';"
    "this.src=this.src.replace(/\\.gif(\\?.*)?$/,'.png');}"
    "else{this.onerror=null;this.style.display='none';"
    "this.parentNode.classList.add('emoji-failed');}"
)


def render_custom_emoji(name: str, emoji_id: str, animated: bool, cdn_url: str) -> str:
    """
    Inline image for a custom emoji.

    Static emoji retry once then degrade to `:name:` text. Animated emoji
    retry, then try the static image, then show their hidden fallback span.
    """
    label = escape_html(f":{name}:")
    src = escape_html(f"{cdn_url}/{emoji_id}.{'gif' if animated else 'png'}")
    common = (
        f'src="{src}" alt="{label}" title="{label}" '
        f'data-emoji-name="{escape_html(name)}" data-emoji-id="{escape_html(emoji_id)}" '
        f'loading="lazy"'
    )
    if not animated:
        return f'<img class="discord-emoji" {common} onerror="{STATIC_EMOJI_ONERROR}">'
    return (
        f'<span class="emoji-container">'
        f'<img class="discord-emoji animated-emoji" {common} onerror="{ANIMATED_EMOJI_ONERROR}">'
        f'<span class="emoji-fallback" style="display:none">{label}</span>'
        f'</span>'
    )


def render_emoji(emoji: Optional[TranscriptEmoji], cdn_url: str) -> str:
    """Unicode emoji as escaped text, custom emoji as a CDN image."""
    if emoji is None:
        return ""
    if emoji.id:
        return render_custom_emoji(emoji.name, emoji.id, emoji.animated, cdn_url)
    return escape_text(emoji.name)


# =============================================================================
# Timestamps
# =============================================================================

TIMESTAMP_FORMATS = {
    "t": "%H:%M",
    "T": "%H:%M:%S",
    "d": "%d/%m/%Y",
    "D": "%d %B %Y",
    "f": "%d %B %Y %H:%M",
    "F": "%A, %d %B %Y %H:%M",
}

RELATIVE_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


def format_relative(moment: datetime, now: datetime) -> str:
    """'3 days ago' / 'in 2 hours' style description."""
    delta = int((moment - now).total_seconds())
    seconds = abs(delta)
    for unit, size in RELATIVE_UNITS:
        if seconds >= size or unit == "second":
            amount = seconds // size
            label = f"{amount} {unit}{'' if amount == 1 else 's'}"
            break
    if delta == 0:
        return "now"
    return f"in {label}" if delta > 0 else f"{label} ago"


# =============================================================================
# Renderer
# =============================================================================

class MarkdownRenderer:
    """
    Markdown -> HTML renderer bound to a resolver and config.

    Stateless apart from the resolver's cache; one instance can render any
    number of messages.
    """

    def __init__(
        self,
        resolver: Optional[EntityResolver] = None,
        config: Optional[TranscriptConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.resolver = resolver or EntityResolver()
        self.config = config or get_config()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def render(self, text: Optional[str], ctx: Any = None) -> str:
        """
        Render message text to an HTML fragment.

        Args:
            text: Raw message content
            ctx: Channel or guild used to resolve mention names

        Returns:
            HTML fragment. If anything fails, the escaped original text with
            no formatting at all.
        """
        if not text:
            return ""
        try:
            return self._render_lines(split_lines(tokenize(text)), ctx)
        except Exception as e:
            logger.error("Markdown Render Failed", [
                ("Length", str(len(text))),
                ("Error", str(e)[:100]),
            ])
            return escape_text(text)

    def _render_lines(self, lines: List[List[Token]], ctx: Any) -> str:
        rendered: List[str] = []
        index = 0

        while index < len(lines):
            line = lines[index]
            prefix = _leading_text(line)

            if prefix.startswith(">>> "):
                # Quotes the rest of the message
                rest = [_strip_prefix(line, 4)] + lines[index + 1:]
                body = "<br>".join(self._render_inline(part, ctx) for part in rest)
                rendered.append(f"<blockquote>{body}</blockquote>")
                break

            if prefix.startswith("> "):
                rendered.append(
                    f"<blockquote>{self._render_inline(_strip_prefix(line, 2), ctx)}</blockquote>"
                )
            else:
                for heading, tag in HEADING_PREFIXES:
                    if prefix.startswith(heading):
                        body = self._render_inline(_strip_prefix(line, len(heading)), ctx)
                        rendered.append(f"<{tag}>{body}</{tag}>")
                        break
                else:
                    rendered.append(self._render_inline(line, ctx))
            index += 1

        return "<br>".join(rendered)

    def _render_inline(self, tokens: List[Token], ctx: Any) -> str:
        return "".join(self._emit(node, ctx) for node in parse_inline(tokens))

    def _emit(self, node: Node, ctx: Any) -> str:
        if isinstance(node, Span):
            open_tag, close_tag = STYLE_TAGS[node.marker]
            inner = "".join(self._emit(child, ctx) for child in node.children)
            return f"{open_tag}{inner}{close_tag}"

        kind = node.kind
        if kind is TokenKind.TEXT:
            return escape_text(node.value)
        if kind is TokenKind.CODE:
            return f"<code>{escape_text(node.value)}</code>"
        if kind is TokenKind.CODE_BLOCK:
            lang = f' class="language-{escape_html(node.extra)}"' if node.extra else ""
            return f"<pre><code{lang}>{escape_text(node.value)}</code></pre>"
        if kind is TokenKind.EMOJI:
            return render_custom_emoji(
                node.value, node.entity_id or "", node.animated, self.config.emoji_cdn_url,
            )
        if kind is TokenKind.USER_MENTION:
            name = self.resolver.resolve_user(node.entity_id, ctx)
            return (
                f'<span class="mention user-mention" data-user-id="{node.entity_id}">'
                f'@{escape_text(name or "User")}</span>'
            )
        if kind is TokenKind.CHANNEL_MENTION:
            name = self.resolver.resolve_channel(node.entity_id, ctx)
            return (
                f'<span class="mention channel-mention" data-channel-id="{node.entity_id}">'
                f'#{escape_text(name or "channel")}</span>'
            )
        if kind is TokenKind.ROLE_MENTION:
            name = self.resolver.resolve_role(node.entity_id, ctx)
            return (
                f'<span class="mention role-mention" data-role-id="{node.entity_id}">'
                f'@{escape_text(name or "role")}</span>'
            )
        if kind is TokenKind.TIMESTAMP:
            return self._emit_timestamp(node)
        if kind is TokenKind.URL:
            return (
                f'<a href="{escape_html(node.value)}" target="_blank" '
                f'rel="noopener noreferrer">{escape_text(node.value)}</a>'
            )
        return escape_text(node.value)

    def _emit_timestamp(self, token: Token) -> str:
        style = token.extra or "f"
        raw = f"<t:{token.value}:{style}>"
        try:
            moment = datetime.fromtimestamp(int(token.value), tz=timezone.utc)
            local = moment.astimezone(self.config.tz)
            title = escape_html(f"{local.strftime(TIMESTAMP_FORMATS['F'])} ({self.config.timezone_name})")
        except (OverflowError, OSError, ValueError):
            return escape_text(raw)

        if style == "R":
            display = format_relative(moment, self.clock())
            return f'<span class="timestamp timestamp-relative" title="{title}">{escape_text(display)}</span>'

        display = local.strftime(TIMESTAMP_FORMATS.get(style, TIMESTAMP_FORMATS["f"]))
        return f'<span class="timestamp" title="{title}">{escape_text(display)}</span>'


def _leading_text(line: List[Token]) -> str:
    if line and line[0].kind is TokenKind.TEXT and not line[0].escaped:
        return line[0].value
    return ""


def _strip_prefix(line: List[Token], length: int) -> List[Token]:
    rest = line[0].value[length:]
    head = [Token(TokenKind.TEXT, rest)] if rest else []
    return head + line[1:]


def render_markdown(
    text: Optional[str],
    ctx: Any = None,
    resolver: Optional[EntityResolver] = None,
) -> str:
    """Render with a throwaway renderer over the shared mention cache."""
    return MarkdownRenderer(resolver).render(text, ctx)


__all__ = [
    "TokenKind",
    "Token",
    "Span",
    "tokenize",
    "split_lines",
    "parse_inline",
    "MarkdownRenderer",
    "render_markdown",
    "render_custom_emoji",
    "render_emoji",
    "format_relative",
]
