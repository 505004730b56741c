"""
Transcript Forge - HTML Generator Tests
=======================================

Tests for grouping, per-part rendering and document assembly.
"""

from datetime import datetime, timedelta, timezone

import pytest

from transcript_forge.services.transcript.html_generator import (
    ATTACHMENT_PLACEHOLDER,
    EMBED_PLACEHOLDER,
    create_transcript_file,
    generate_html_transcript,
    group_messages,
    render_attachment,
    render_component,
    render_embed,
    render_message,
    render_message_group,
    render_reactions,
    render_sidebar_members,
)
from transcript_forge.services.transcript.markdown import MarkdownRenderer
from transcript_forge.services.transcript.members import Participant
from transcript_forge.services.transcript.models import (
    ChannelInfo,
    ComponentType,
    GuildInfo,
    HtmlGenerationOptions,
    TranscriptAttachment,
    TranscriptAuthor,
    TranscriptComponent,
    TranscriptEmbed,
    TranscriptEmbedField,
    TranscriptEmbedFooter,
    TranscriptEmoji,
    TranscriptMedia,
    TranscriptMessage,
    TranscriptMetadata,
    TranscriptReaction,
    TranscriptResult,
    TranscriptSelectOption,
)


START = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
CDN = "https://cdn.discordapp.com/emojis"


def author(author_id="1", username="alice", display_name=None, bot=False):
    return TranscriptAuthor(
        id=author_id,
        username=username,
        display_name=display_name,
        avatar_url=f"https://cdn.discordapp.com/avatars/{author_id}/a.png",
        bot=bot,
    )


def message(message_id, content="", by=None, **kwargs):
    return TranscriptMessage(
        id=str(message_id),
        content=content,
        author=by or author(),
        timestamp=START + timedelta(minutes=message_id),
        **kwargs,
    )


def html_options(**overrides):
    values = dict(
        dark_mode=True,
        include_search=True,
        include_jump_nav=True,
        channel_info=ChannelInfo(id="5000", name="ticket-0001", type="text", topic="Billing help"),
        guild_info=GuildInfo(id="9000", name="Test Server"),
        generated_at=START,
    )
    values.update(overrides)
    return HtmlGenerationOptions(**values)


@pytest.fixture
def renderer(resolver, config):
    return MarkdownRenderer(resolver, config)


# =============================================================================
# Grouping
# =============================================================================

class TestGroupMessages:
    """Tests for consecutive-author grouping."""

    def test_consecutive_runs(self):
        """Test A, A, B, A makes three groups."""
        alice, bob = author("1", "alice"), author("2", "bob")
        messages = [message(1, by=alice), message(2, by=alice), message(3, by=bob), message(4, by=alice)]

        groups = group_messages(messages)

        assert [[m.id for m in g] for g in groups] == [["1", "2"], ["3"], ["4"]]

    def test_empty(self):
        """Test no messages means no groups."""
        assert group_messages([]) == []

    def test_group_has_one_header(self, renderer, config):
        """Test a group renders one avatar and one username for all messages."""
        alice = author("1", "alice", display_name="Alice")
        output = render_message_group([message(1, "a", alice), message(2, "b", alice)], renderer, None, config)

        assert output.count('class="avatar"') == 1
        assert output.count('class="username"') == 1
        assert output.count('class="message"') == 2
        assert 'id="msg-1"' in output
        assert ">Alice</span>" in output

    def test_bot_tag(self, renderer, config):
        """Test bot authors get the BOT tag."""
        output = render_message_group([message(1, "hi", author(bot=True))], renderer, None, config)
        assert '<span class="bot-tag">BOT</span>' in output


# =============================================================================
# Embeds
# =============================================================================

class TestRenderEmbed:
    """Tests for embed layouts."""

    def test_rich_embed(self, renderer, config):
        """Test title link, description markdown, footer and color bar."""
        embed = TranscriptEmbed(
            title="Ticket Closed",
            url="https://example.com/t/1",
            description="by **staff**",
            color=0x22C55E,
            footer=TranscriptEmbedFooter(text="Ticket #1"),
            timestamp=START,
        )

        output = render_embed(embed, renderer, None, config)

        assert "border-left-color: #22c55e" in output
        assert 'href="https://example.com/t/1"' in output
        assert "by <strong>staff</strong>" in output
        assert "Ticket #1 • Jan 01, 2024 12:00 PM" in output

    def test_default_color(self, renderer, config):
        """Test embeds without a color use the brand color."""
        assert "border-left-color: #5865F2" in render_embed(TranscriptEmbed(title="x"), renderer, None, config)

    def test_inline_fields_grid(self, renderer, config):
        """Test all-inline fields use three columns."""
        embed = TranscriptEmbed(fields=[
            TranscriptEmbedField("A", "1", inline=True),
            TranscriptEmbedField("B", "2", inline=True),
        ])
        assert "grid-template-columns: repeat(3, 1fr)" in render_embed(embed, renderer, None, config)

    def test_block_field_spans_row(self, renderer, config):
        """Test a non-inline field forces a single column and spans it."""
        embed = TranscriptEmbed(fields=[
            TranscriptEmbedField("A", "1", inline=True),
            TranscriptEmbedField("Notes", "long", inline=False),
        ])
        output = render_embed(embed, renderer, None, config)

        assert "grid-template-columns: 1fr" in output
        assert output.count("grid-column: 1 / -1") == 1

    def test_image_embed_layout(self, renderer, config):
        """Test image embeds become a link with an availability note."""
        embed = TranscriptEmbed(type="image", url="https://i.example.com/a.png")
        output = render_embed(embed, renderer, None, config)

        assert "embed-image-type" in output
        assert "View Original Image" in output
        assert "Image may no longer be available" in output

    def test_video_embed_layout(self, renderer, config):
        """Test video embeds get a play placeholder and provider line."""
        embed = TranscriptEmbed(
            type="video",
            url="https://youtu.be/x",
            title="Demo",
            thumbnail=TranscriptMedia(url="https://img.youtube.com/x.jpg"),
            provider=None,
        )
        output = render_embed(embed, renderer, None, config)

        assert "embed-video-type" in output
        assert "play-button" in output
        assert "https://img.youtube.com/x.jpg" in output

    def test_gifv_layout(self, renderer, config):
        """Test gifv embeds preview the thumbnail."""
        embed = TranscriptEmbed(
            type="gifv",
            url="https://tenor.com/x",
            thumbnail=TranscriptMedia(url="https://media.tenor.com/x.gif"),
        )
        output = render_embed(embed, renderer, None, config)

        assert "embed-gif-type" in output
        assert 'src="https://media.tenor.com/x.gif"' in output

    def test_link_without_url_is_rich(self, renderer, config):
        """Test special types without a URL fall back to the rich layout."""
        output = render_embed(TranscriptEmbed(type="link", title="No url"), renderer, None, config)
        assert "embed-link-type" not in output
        assert ">No url</div>" in output

    def test_unsafe_url_neutralized(self, renderer, config):
        """Test non-http links are replaced with '#'."""
        embed = TranscriptEmbed(title="x", url="javascript:alert(1)")
        output = render_embed(embed, renderer, None, config)

        assert "javascript:" not in output
        assert 'href="#"' in output

    def test_title_escaped(self, renderer, config):
        """Test embed titles can't inject HTML."""
        output = render_embed(TranscriptEmbed(title="<img src=x>"), renderer, None, config)
        assert "&lt;img src=x&gt;" in output


# =============================================================================
# Attachments, Components, Reactions
# =============================================================================

class TestRenderAttachment:
    """Tests for attachment links."""

    def test_image_has_note(self):
        """Test media attachments carry the availability note."""
        output = render_attachment(TranscriptAttachment(
            id="1", name="photo.png", size=1536, url="https://cdn.example.com/photo.png",
        ))

        assert "photo.png (1.50 KB)" in output
        assert "Image may no longer be available in closed tickets" in output
        assert "<img" not in output

    def test_file_has_icon(self):
        """Test non-media files link with a type icon."""
        output = render_attachment(TranscriptAttachment(
            id="2", name="report.pdf", size=2048, url="https://cdn.example.com/report.pdf",
        ))

        assert output.startswith('<a class="attachment-file" href="https://cdn.example.com/report.pdf"')
        assert "📕 report.pdf (2.00 KB)" in output


class TestRenderComponent:
    """Tests for inert component analogs."""

    def test_button_colors(self):
        """Test each button style maps to its color."""
        danger = render_component(TranscriptComponent(type=ComponentType.BUTTON, style=4, label="Close"), CDN)
        success = render_component(TranscriptComponent(type=ComponentType.BUTTON, style=3, label="Claim"), CDN)

        assert "background-color:#f04747" in danger
        assert "background-color:#43b581" in success
        assert "disabled" in danger
        assert ">Close</button>" in danger

    def test_link_button(self):
        """Test link buttons are outlined and show their target."""
        output = render_component(TranscriptComponent(
            type=ComponentType.BUTTON, style=5, label="Docs", url="https://example.com/docs",
        ), CDN)

        assert "component-button-link" in output
        assert "background-color:transparent" in output
        assert 'title="Opens: https://example.com/docs"' in output

    def test_button_with_emoji(self):
        """Test a button emoji renders before its label."""
        output = render_component(TranscriptComponent(
            type=ComponentType.BUTTON, style=1, label="Lock", emoji=TranscriptEmoji(name="🔒"),
        ), CDN)
        assert "🔒Lock</button>" in output

    def test_select_option_counts(self):
        """Test select menus summarize their options."""
        def select(count):
            return TranscriptComponent(
                type=ComponentType.SELECT,
                placeholder="Pick one",
                options=[TranscriptSelectOption(label=str(i), value=str(i)) for i in range(count)],
            )

        assert 'title="2 options available"' in render_component(select(2), CDN)
        assert 'title="1 option available"' in render_component(select(1), CDN)
        assert 'title="No options"' in render_component(select(0), CDN)
        assert ">Pick one</span>" in render_component(select(2), CDN)

    def test_text_input(self):
        """Test text inputs render disabled with their placeholder."""
        output = render_component(TranscriptComponent(
            type=ComponentType.TEXT_INPUT, label="Reason", placeholder="Why?",
        ), CDN)

        assert 'placeholder="Why?"' in output
        assert "disabled readonly" in output
        assert "<span>Reason</span>" in output

    def test_unknown_type(self):
        """Test unrecognized types show a marker with the type number."""
        output = render_component(TranscriptComponent(type=9), CDN)
        assert "Unknown Component (Type: 9)" in output


class TestRenderReactions:
    """Tests for reaction chips."""

    def test_counts_and_reacted(self):
        """Test chips show counts and mark the bot's own reactions."""
        output = render_reactions([
            TranscriptReaction(emoji=TranscriptEmoji(name="👍"), count=3, me=True),
            TranscriptReaction(emoji=TranscriptEmoji(name="pepe", id="77"), count=1),
        ], CDN)

        assert '<div class="reaction reacted"><span>👍</span><span class="reaction-count">3</span></div>' in output
        assert "77.png" in output

    def test_none(self):
        """Test no reactions renders nothing."""
        assert render_reactions([], CDN) == ""


# =============================================================================
# Failure Isolation
# =============================================================================

class TestRenderMessage:
    """Tests for per-part failure isolation."""

    def test_failing_embed_placeholder(self, renderer, config):
        """Test a broken embed becomes a placeholder while text and siblings render."""
        broken = TranscriptEmbed(title="bad", color="not-a-number")
        good = TranscriptEmbed(title="Still here")
        output = render_message(message(1, "text stays", embeds=[broken, good]), renderer, None, config)

        assert "text stays" in output
        assert EMBED_PLACEHOLDER in output
        assert "Still here" in output

    def test_failing_attachment_placeholder(self, renderer, config):
        """Test a broken attachment becomes a placeholder."""
        broken = TranscriptAttachment(id="1", name="a.txt", size=1, url="https://x/a.txt")
        broken.url = 42
        good = TranscriptAttachment(id="2", name="b.txt", size=1, url="https://x/b.txt")

        output = render_message(message(1, attachments=[broken, good]), renderer, None, config)

        assert ATTACHMENT_PLACEHOLDER in output
        assert "b.txt" in output

    def test_edited_marker(self, renderer, config):
        """Test edited messages show an (edited) marker."""
        output = render_message(message(1, "fixed", edited=True, edited_timestamp=START), renderer, None, config)
        assert "(edited)</span>" in output


# =============================================================================
# Sidebar
# =============================================================================

class TestSidebar:
    """Tests for sidebar member entries."""

    def test_no_participants(self):
        """Test an empty list shows the empty marker."""
        assert "No participants found" in render_sidebar_members([], 20, "https://x/0.png")

    def test_limit(self):
        """Test only the first `limit` participants are listed."""
        people = [Participant(id=str(i), name=f"user{i}") for i in range(5)]
        output = render_sidebar_members(people, 3, "https://x/0.png")

        assert output.count('class="member"') == 3
        assert "user3" not in output

    def test_status_and_color(self):
        """Test status dot class and name color."""
        output = render_sidebar_members(
            [Participant(id="1", name="Mod", status="dnd", color="#ff0000", bot=True)],
            20, "https://x/0.png",
        )

        assert "status-dnd" in output
        assert "color: #ff0000" in output
        assert "BOT" in output


# =============================================================================
# Document
# =============================================================================

class TestGenerateHtmlTranscript:
    """Tests for the full document."""

    @pytest.mark.asyncio
    async def test_document_structure(self, renderer, config):
        """Test the document has sidebar, header info and end marker."""
        messages = [message(1, "hello"), message(2, "world", author("2", "bob"))]
        participants = [Participant(id="1", name="alice"), Participant(id="2", name="bob")]

        output = await generate_html_transcript(
            messages, html_options(), renderer=renderer, config=config, participants=participants,
        )

        assert output.startswith("<!DOCTYPE html>")
        assert "<title>Transcript - #ticket-0001</title>" in output
        assert "Participants — 2" in output
        assert "2 participants" in output
        assert "Messages: 2" in output
        assert "Server: Test Server" in output
        assert "Billing help" in output
        assert 'id="transcriptContent"' in output
        assert "End of transcript • Generated on Jan 01, 2024 12:00 PM" in output
        assert output.count('class="message-group"') == 2

    @pytest.mark.asyncio
    async def test_light_mode(self, renderer, config):
        """Test dark_mode=False starts the body in light mode."""
        output = await generate_html_transcript(
            [], html_options(dark_mode=False), renderer=renderer, config=config, participants=[],
        )
        assert '<body class="light-mode">' in output

    @pytest.mark.asyncio
    async def test_search_and_jump_flags(self, renderer, config):
        """Test search and jump controls follow their flags."""
        with_all = await generate_html_transcript(
            [], html_options(), renderer=renderer, config=config, participants=[],
        )
        without = await generate_html_transcript(
            [], html_options(include_search=False, include_jump_nav=False),
            renderer=renderer, config=config, participants=[],
        )

        assert 'id="searchInput"' in with_all
        assert 'id="scrollToTop"' in with_all
        assert 'id="searchInput"' not in without
        assert 'id="scrollToBottom"' not in without

    @pytest.mark.asyncio
    async def test_custom_css_appended(self, renderer, config):
        """Test caller CSS follows the built-in stylesheet."""
        output = await generate_html_transcript(
            [], html_options(custom_css=".message { color: red; }"),
            renderer=renderer, config=config, participants=[],
        )
        assert "/* Custom styles */\n.message { color: red; }" in output

    @pytest.mark.asyncio
    async def test_channel_name_escaped(self, renderer, config):
        """Test descriptor strings are escaped."""
        options = html_options(channel_info=ChannelInfo(id="1", name="<b>x</b>"))
        output = await generate_html_transcript([], options, renderer=renderer, config=config, participants=[])

        assert "<b>x</b>" not in output
        assert "#&lt;b&gt;x&lt;/b&gt;" in output


# =============================================================================
# File Wrapping
# =============================================================================

def _result(html="", text="plain", channel_name="ticket-0001"):
    metadata = TranscriptMetadata.empty()
    metadata.channel.name = channel_name
    return TranscriptResult(
        html=html, text=text, metadata=metadata, generated_at=START, success=bool(html),
    )


class TestCreateTranscriptFile:
    """Tests for create_transcript_file()."""

    def test_html_file(self):
        """Test a successful result becomes an .html file."""
        file = create_transcript_file(_result(html="<html></html>"))

        assert file.filename == "transcript-ticket-0001.html"
        assert file.fp.read() == b"<html></html>"

    def test_text_fallback(self):
        """Test a failed result sends the text as .txt."""
        file = create_transcript_file(_result(text="fallback body"))

        assert file.filename == "transcript-ticket-0001.txt"
        assert file.fp.read() == b"fallback body"

    def test_custom_name(self):
        """Test an explicit base name wins."""
        assert create_transcript_file(_result(html="x"), "archive").filename == "archive.html"

    def test_result_file_name(self):
        """Test the name carried on the result is used unless overridden."""
        result = _result(html="x")
        result.file_name = "ticket-42-closed"

        assert create_transcript_file(result).filename == "ticket-42-closed.html"
        assert create_transcript_file(result, "archive").filename == "archive.html"
