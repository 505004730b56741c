"""
Transcript Forge - Transcript Styles
====================================

Stylesheet embedded in every transcript. Dark theme by default; the
`light-mode` body class switches palettes through CSS variables.
"""


# =============================================================================
# CSS Styles
# =============================================================================

TRANSCRIPT_CSS = '''
:root {
    --bg-primary: #36393f;
    --bg-secondary: #2f3136;
    --bg-tertiary: #202225;
    --bg-hover: #32353b;
    --bg-embed: #2f3136;
    --bg-code: #2b2d31;
    --border: #202225;
    --text: #dcddde;
    --text-strong: #ffffff;
    --text-muted: #a3a6aa;
    --link: #00aff4;
    --accent: #5865f2;
    --mention-bg: rgba(88, 101, 242, 0.3);
    --mention-text: #dee0fc;
    --spoiler: #202225;
    --online: #43b581;
    --idle: #faa61a;
    --dnd: #f04747;
    --offline: #747f8d;
    --sidebar-width: 260px;
    --topbar-height: 52px;
    --radius: 8px;
}

body.light-mode {
    --bg-primary: #ffffff;
    --bg-secondary: #f2f3f5;
    --bg-tertiary: #e3e5e8;
    --bg-hover: #f6f6f7;
    --bg-embed: #f2f3f5;
    --bg-code: #ebedef;
    --border: #e3e5e8;
    --text: #2e3338;
    --text-strong: #060607;
    --text-muted: #5c5e66;
    --link: #0068e0;
    --mention-bg: rgba(88, 101, 242, 0.15);
    --mention-text: #505cdc;
    --spoiler: #b9bbbe;
}

* {
    margin: 0;
    padding: 0;
    box-sizing: border-box;
    -webkit-tap-highlight-color: transparent;
}

html { scroll-behavior: smooth; }

body {
    font-family: 'gg sans', 'Noto Sans', 'Helvetica Neue', Helvetica, Arial, sans-serif;
    background: var(--bg-primary);
    color: var(--text);
    font-size: 15px;
    line-height: 1.375;
    overflow: hidden;
    height: 100vh;
}

a { color: var(--link); text-decoration: none; }
a:hover { text-decoration: underline; }

/* Layout */
.app { display: flex; height: 100vh; }

.sidebar {
    width: var(--sidebar-width);
    background: var(--bg-secondary);
    display: flex;
    flex-direction: column;
    flex-shrink: 0;
    overflow-y: auto;
    transition: transform 0.25s ease;
}

.sidebar-header {
    padding: 16px;
    border-bottom: 1px solid var(--border);
}

.sidebar-header .channel-name {
    font-size: 16px;
    font-weight: 600;
    color: var(--text-strong);
    word-break: break-word;
}

.sidebar-info { margin-top: 8px; font-size: 12px; color: var(--text-muted); }
.sidebar-info div { margin-top: 2px; }

.members-header {
    padding: 16px 16px 4px;
    font-size: 12px;
    font-weight: 700;
    text-transform: uppercase;
    color: var(--text-muted);
}

.member-list { padding: 0 8px 16px; }

.member {
    display: flex;
    align-items: center;
    gap: 10px;
    padding: 6px 8px;
    border-radius: 4px;
}

.member:hover { background: var(--bg-hover); }

.member-avatar-wrap { position: relative; width: 32px; height: 32px; flex-shrink: 0; }
.member-avatar { width: 32px; height: 32px; border-radius: 50%; }

.member-status {
    position: absolute;
    right: -2px;
    bottom: -2px;
    width: 12px;
    height: 12px;
    border-radius: 50%;
    border: 2px solid var(--bg-secondary);
}

.status-online { background: var(--online); }
.status-idle { background: var(--idle); }
.status-dnd { background: var(--dnd); }
.status-offline { background: var(--offline); }

.member-name {
    font-size: 14px;
    font-weight: 500;
    white-space: nowrap;
    overflow: hidden;
    text-overflow: ellipsis;
}

.no-members { padding: 8px 16px; color: var(--text-muted); font-size: 13px; }

.sidebar-overlay {
    display: none;
    position: fixed;
    inset: 0;
    background: rgba(0, 0, 0, 0.5);
    z-index: 90;
}

.main { flex: 1; display: flex; flex-direction: column; min-width: 0; }

/* Topbar */
.topbar {
    height: var(--topbar-height);
    display: flex;
    align-items: center;
    gap: 12px;
    padding: 0 16px;
    border-bottom: 1px solid var(--border);
    background: var(--bg-primary);
    flex-shrink: 0;
}

.topbar-title { font-weight: 600; color: var(--text-strong); white-space: nowrap; }
.topbar-topic {
    color: var(--text-muted);
    font-size: 13px;
    white-space: nowrap;
    overflow: hidden;
    text-overflow: ellipsis;
    border-left: 1px solid var(--border);
    padding-left: 12px;
}
.topbar-participants { color: var(--text-muted); font-size: 13px; white-space: nowrap; }
.topbar-spacer { flex: 1; }

.topbar-button, .sidebar-toggle {
    background: none;
    border: none;
    color: var(--text-muted);
    cursor: pointer;
    font-size: 18px;
    padding: 4px 6px;
    border-radius: 4px;
}

.topbar-button:hover, .sidebar-toggle:hover { color: var(--text-strong); background: var(--bg-hover); }
.sidebar-toggle { display: none; }

.search-box { display: flex; align-items: center; gap: 6px; }

.search-box input {
    background: var(--bg-tertiary);
    border: none;
    border-radius: 4px;
    color: var(--text);
    padding: 4px 8px;
    width: 180px;
    font-size: 13px;
}

.search-count { font-size: 12px; color: var(--text-muted); min-width: 40px; }

/* Messages */
.transcript-content { flex: 1; overflow-y: auto; padding: 16px 0 24px; }

.message-group {
    display: flex;
    gap: 16px;
    padding: 8px 16px;
    margin-top: 8px;
}

.message-group:hover { background: var(--bg-hover); }

.avatar { width: 40px; height: 40px; border-radius: 50%; flex-shrink: 0; }

.message-content { flex: 1; min-width: 0; }

.message-header { display: flex; align-items: baseline; gap: 8px; }
.username { font-weight: 500; color: var(--text-strong); }

.bot-tag {
    background: var(--accent);
    color: #fff;
    font-size: 10px;
    font-weight: 600;
    padding: 1px 4px;
    border-radius: 3px;
    text-transform: uppercase;
}

.timestamp { font-size: 12px; color: var(--text-muted); }
.timestamp-relative { cursor: help; }
.message-text .timestamp {
    font-size: inherit;
    background: var(--bg-tertiary);
    padding: 0 2px;
    border-radius: 3px;
    color: var(--text);
}

.message { padding: 2px 0; }
.message-text { word-wrap: break-word; }
.message-text.empty { display: none; }
.edited { font-size: 10px; color: var(--text-muted); margin-left: 4px; }

.render-error { color: var(--text-muted); font-style: italic; font-size: 13px; }

/* Markdown */
code {
    background: var(--bg-code);
    padding: 0 4px;
    border-radius: 3px;
    font-family: Consolas, 'Andale Mono', monospace;
    font-size: 85%;
}

pre {
    background: var(--bg-code);
    border: 1px solid var(--border);
    border-radius: 4px;
    padding: 8px;
    margin: 4px 0;
    overflow-x: auto;
    white-space: pre-wrap;
}

pre code { background: none; padding: 0; }

blockquote {
    border-left: 4px solid var(--text-muted);
    padding: 0 8px 0 12px;
    margin: 2px 0;
}

h1, h2, h3 { color: var(--text-strong); margin: 8px 0 4px; line-height: 1.3; }
h1 { font-size: 24px; }
h2 { font-size: 20px; }
h3 { font-size: 16px; }

.spoiler {
    background: var(--spoiler);
    color: transparent;
    border-radius: 3px;
    cursor: pointer;
    transition: color 0.1s ease;
}

.spoiler:hover, .spoiler.revealed { color: var(--text); background: var(--bg-tertiary); }

.mention {
    background: var(--mention-bg);
    color: var(--mention-text);
    border-radius: 3px;
    padding: 0 2px;
    font-weight: 500;
}

.mention:hover { background: var(--accent); color: #fff; }

.discord-emoji {
    width: 22px;
    height: 22px;
    vertical-align: bottom;
    object-fit: contain;
}

.emoji-container { display: inline-block; }
.emoji-failed .emoji-fallback { display: inline !important; }

.search-highlight { background: rgba(250, 166, 26, 0.4); border-radius: 2px; }
.search-highlight.current { background: rgba(250, 166, 26, 0.9); color: #000; }

/* Embeds */
.embed {
    display: flex;
    max-width: 520px;
    background: var(--bg-embed);
    border-left: 4px solid var(--accent);
    border-radius: 4px;
    margin-top: 6px;
    padding: 8px 16px 12px 12px;
    position: relative;
}

.embed-body { flex: 1; min-width: 0; }
.embed-provider { font-size: 12px; color: var(--text-muted); margin-top: 4px; }
.embed-author { display: flex; align-items: center; gap: 8px; margin-top: 4px; font-size: 14px; font-weight: 600; color: var(--text-strong); }
.embed-author-icon { width: 24px; height: 24px; border-radius: 50%; }
.embed-title { font-weight: 600; color: var(--text-strong); margin-top: 4px; }
.embed-title-link { color: var(--link); }
.embed-description { font-size: 14px; margin-top: 4px; }
.embed-fields { display: grid; gap: 8px; margin-top: 8px; }
.field-name { font-size: 14px; font-weight: 600; color: var(--text-strong); margin-bottom: 2px; }
.field-value { font-size: 14px; }
.embed-thumbnail { max-width: 80px; max-height: 80px; border-radius: 4px; margin-left: 16px; object-fit: contain; }
.embed-image { max-width: 100%; max-height: 300px; border-radius: 4px; margin-top: 12px; display: block; }
.embed-footer { display: flex; align-items: center; gap: 8px; font-size: 12px; color: var(--text-muted); margin-top: 8px; }
.embed-footer-icon { width: 20px; height: 20px; border-radius: 50%; }
.embed-link { font-size: 14px; }

.embed-media-note { font-size: 12px; color: var(--text-muted); margin-top: 4px; font-style: italic; }

.embed-video-placeholder {
    position: relative;
    margin-top: 8px;
    width: 300px;
    max-width: 100%;
    aspect-ratio: 16 / 9;
    background: var(--bg-tertiary) center / cover no-repeat;
    border-radius: 4px;
    display: flex;
    align-items: center;
    justify-content: center;
}

.play-button {
    width: 48px;
    height: 48px;
    border-radius: 50%;
    background: rgba(0, 0, 0, 0.6);
    color: #fff;
    display: flex;
    align-items: center;
    justify-content: center;
    font-size: 20px;
}

/* Attachments */
.attachments { display: flex; flex-direction: column; gap: 4px; margin-top: 6px; }

.attachment-file, .attachment-media {
    display: inline-flex;
    align-items: center;
    gap: 6px;
    max-width: 432px;
    background: var(--bg-secondary);
    border: 1px solid var(--border);
    border-radius: 4px;
    padding: 8px 10px;
    font-size: 14px;
}

.attachment-note { font-size: 12px; color: var(--text-muted); font-style: italic; }

/* Components */
.components { display: flex; flex-wrap: wrap; gap: 8px; margin-top: 8px; }

.component-button {
    display: inline-flex;
    align-items: center;
    gap: 6px;
    min-height: 32px;
    padding: 2px 16px;
    border-radius: 3px;
    border: none;
    color: #fff;
    font-size: 14px;
    font-weight: 500;
    opacity: 0.9;
    cursor: not-allowed;
}

.component-button-link { border: 1px solid #dcddde; }
.component-button.disabled { opacity: 0.5; }

.component-select, .component-text-input, .component-unknown {
    display: inline-flex;
    align-items: center;
    justify-content: space-between;
    gap: 8px;
    min-width: 220px;
    min-height: 36px;
    padding: 6px 10px;
    background: var(--bg-tertiary);
    border: 1px solid var(--border);
    border-radius: 4px;
    color: var(--text-muted);
    font-size: 14px;
}

.component-text-input input {
    background: none;
    border: none;
    color: var(--text-muted);
    width: 100%;
}

.select-arrow { font-size: 10px; }

/* Reactions */
.reactions { display: flex; flex-wrap: wrap; gap: 4px; margin-top: 6px; }

.reaction {
    display: inline-flex;
    align-items: center;
    gap: 6px;
    padding: 2px 6px;
    border-radius: 8px;
    background: var(--bg-secondary);
    border: 1px solid transparent;
    font-size: 14px;
}

.reaction.reacted { border-color: var(--accent); background: var(--mention-bg); }
.reaction .discord-emoji { width: 16px; height: 16px; }
.reaction-count { font-size: 13px; font-weight: 600; color: var(--text-muted); }

/* System messages */
.system-message {
    text-align: center;
    color: var(--text-muted);
    font-size: 13px;
    padding: 16px;
    margin-top: 16px;
    border-top: 1px solid var(--border);
}

/* Mobile */
.mobile-bar { display: none; }

@media (max-width: 768px) {
    .sidebar {
        position: fixed;
        top: 0;
        bottom: 0;
        left: 0;
        z-index: 100;
        transform: translateX(-100%);
    }

    .sidebar.open { transform: translateX(0); }
    .sidebar-overlay.open { display: block; }
    .sidebar-toggle { display: inline-block; }
    .topbar-topic, .topbar-participants, .topbar .search-box, .topbar .jump-nav { display: none; }
    .message-group { padding: 8px 12px; gap: 12px; }
    .avatar { width: 32px; height: 32px; }
    .embed { max-width: 100%; }
    .transcript-content { padding-bottom: 72px; }

    .mobile-bar {
        display: flex;
        position: fixed;
        left: 0;
        right: 0;
        bottom: 0;
        height: 56px;
        background: var(--bg-secondary);
        border-top: 1px solid var(--border);
        justify-content: space-around;
        align-items: center;
        z-index: 80;
    }

    .mobile-bar button {
        background: none;
        border: none;
        color: var(--text);
        font-size: 20px;
        padding: 8px 16px;
    }

    .mobile-search {
        position: fixed;
        left: 0;
        right: 0;
        bottom: 56px;
        padding: 8px;
        background: var(--bg-secondary);
        display: none;
        z-index: 80;
    }

    .mobile-search.open { display: flex; }
    .mobile-search input { flex: 1; }
}

::-webkit-scrollbar { width: 8px; height: 8px; }
::-webkit-scrollbar-track { background: var(--bg-secondary); }
::-webkit-scrollbar-thumb { background: var(--bg-tertiary); border-radius: 4px; }
'''


def build_stylesheet(custom_css: str = "") -> str:
    """Built-in stylesheet with caller CSS appended verbatim."""
    if not custom_css:
        return TRANSCRIPT_CSS
    return f"{TRANSCRIPT_CSS}\n/* Custom styles */\n{custom_css}\n"


__all__ = ["TRANSCRIPT_CSS", "build_stylesheet"]
