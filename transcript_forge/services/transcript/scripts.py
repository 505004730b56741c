"""
Transcript Forge - Transcript Scripts
=====================================

Inline JavaScript for the transcript document, assembled from sections so
search and jump navigation can be left out.

Sections:
- Core: theme toggle, spoilers, sidebar drawer, swipe gestures
- Search: substring search over message text and embeds with
  highlight-and-cycle navigation
- Jump: scroll to top/bottom
- Mobile bar: bottom action bar added on narrow screens
"""

from typing import List


# =============================================================================
# Core
# =============================================================================

CORE_SCRIPT = '''
    const T = window.transcript = {};
    const content = document.getElementById('transcriptContent');
    const sidebar = document.getElementById('sidebar');
    const overlay = document.getElementById('sidebarOverlay');

    T.toggleTheme = () => document.body.classList.toggle('light-mode');

    T.openSidebar = () => {
        sidebar.classList.add('open');
        overlay.classList.add('open');
    };
    T.closeSidebar = () => {
        sidebar.classList.remove('open');
        overlay.classList.remove('open');
    };

    document.getElementById('darkModeToggle').addEventListener('click', T.toggleTheme);
    document.getElementById('sidebarToggle').addEventListener('click', () => {
        sidebar.classList.contains('open') ? T.closeSidebar() : T.openSidebar();
    });
    overlay.addEventListener('click', T.closeSidebar);

    document.querySelectorAll('.spoiler').forEach(el => {
        el.addEventListener('click', () => el.classList.toggle('revealed'));
    });

    // Swipe from the left edge opens the sidebar, swipe left closes it
    let touchStartX = null;
    let touchStartY = null;
    document.addEventListener('touchstart', e => {
        touchStartX = e.touches[0].clientX;
        touchStartY = e.touches[0].clientY;
    }, { passive: true });
    document.addEventListener('touchend', e => {
        if (touchStartX === null) return;
        const dx = e.changedTouches[0].clientX - touchStartX;
        const dy = e.changedTouches[0].clientY - touchStartY;
        if (Math.abs(dx) > 60 && Math.abs(dx) > Math.abs(dy)) {
            if (dx > 0 && touchStartX < 40) T.openSidebar();
            if (dx < 0 && sidebar.classList.contains('open')) T.closeSidebar();
        }
        touchStartX = null;
    }, { passive: true });
'''


# =============================================================================
# Search
# =============================================================================

SEARCH_SCRIPT = '''
    const searchInput = document.getElementById('searchInput');
    const searchCount = document.getElementById('searchCount');
    let matches = [];
    let current = -1;

    const clearHighlights = () => {
        document.querySelectorAll('mark.search-highlight').forEach(mark => {
            const parent = mark.parentNode;
            parent.replaceChild(document.createTextNode(mark.textContent), mark);
            parent.normalize();
        });
        matches = [];
        current = -1;
    };

    const highlightIn = (root, needle) => {
        const walker = document.createTreeWalker(root, NodeFilter.SHOW_TEXT);
        const nodes = [];
        while (walker.nextNode()) nodes.push(walker.currentNode);
        nodes.forEach(node => {
            const text = node.textContent;
            const lower = text.toLowerCase();
            let index = lower.indexOf(needle);
            if (index === -1) return;
            const fragment = document.createDocumentFragment();
            let last = 0;
            while (index !== -1) {
                fragment.appendChild(document.createTextNode(text.slice(last, index)));
                const mark = document.createElement('mark');
                mark.className = 'search-highlight';
                mark.textContent = text.slice(index, index + needle.length);
                fragment.appendChild(mark);
                matches.push(mark);
                last = index + needle.length;
                index = lower.indexOf(needle, last);
            }
            fragment.appendChild(document.createTextNode(text.slice(last)));
            node.parentNode.replaceChild(fragment, node);
        });
    };

    const focusMatch = index => {
        if (!matches.length) return;
        if (current >= 0) matches[current].classList.remove('current');
        current = (index + matches.length) % matches.length;
        matches[current].classList.add('current');
        matches[current].scrollIntoView({ behavior: 'smooth', block: 'center' });
        searchCount.textContent = (current + 1) + '/' + matches.length;
    };

    T.search = query => {
        clearHighlights();
        const needle = (query || '').trim().toLowerCase();
        if (!needle) {
            searchCount.textContent = '';
            return;
        }
        document.querySelectorAll('.message-text, .embed').forEach(el => highlightIn(el, needle));
        if (matches.length) {
            focusMatch(0);
        } else {
            searchCount.textContent = '0/0';
        }
    };

    T.nextMatch = () => focusMatch(current + 1);
    T.previousMatch = () => focusMatch(current - 1);

    let searchTimer = null;
    searchInput.addEventListener('input', () => {
        clearTimeout(searchTimer);
        searchTimer = setTimeout(() => T.search(searchInput.value), 200);
    });
    searchInput.addEventListener('keydown', e => {
        if (e.key !== 'Enter') return;
        e.preventDefault();
        e.shiftKey ? T.previousMatch() : T.nextMatch();
    });
'''


# =============================================================================
# Jump Navigation
# =============================================================================

JUMP_NAV_SCRIPT = '''
    T.scrollToTop = () => content.scrollTo({ top: 0, behavior: 'smooth' });
    T.scrollToBottom = () => content.scrollTo({ top: content.scrollHeight, behavior: 'smooth' });

    document.getElementById('scrollToTop').addEventListener('click', T.scrollToTop);
    document.getElementById('scrollToBottom').addEventListener('click', T.scrollToBottom);
'''


# =============================================================================
# Mobile Bar
# =============================================================================

MOBILE_BAR_SCRIPT = '''
    if (window.matchMedia('(max-width: 768px)').matches) {
        const bar = document.createElement('div');
        bar.className = 'mobile-bar';
        const addButton = (label, title, handler) => {
            const button = document.createElement('button');
            button.textContent = label;
            button.title = title;
            button.addEventListener('click', handler);
            bar.appendChild(button);
        };

        if (T.scrollToTop) addButton('⬆️', 'Scroll to top', T.scrollToTop);
        if (T.search) {
            const panel = document.createElement('div');
            panel.className = 'mobile-search';
            const input = document.createElement('input');
            input.type = 'text';
            input.placeholder = 'Search messages...';
            input.addEventListener('input', () => T.search(input.value));
            input.addEventListener('keydown', e => {
                if (e.key === 'Enter') T.nextMatch();
            });
            panel.appendChild(input);
            document.body.appendChild(panel);
            addButton('🔍', 'Search', () => {
                panel.classList.toggle('open');
                if (panel.classList.contains('open')) input.focus();
            });
        }
        addButton('🌓', 'Toggle theme', T.toggleTheme);
        if (T.scrollToBottom) addButton('⬇️', 'Scroll to bottom', T.scrollToBottom);

        document.body.appendChild(bar);
    }
'''


def build_script(include_search: bool = True, include_jump_nav: bool = True) -> str:
    """Assemble the document script from the enabled sections."""
    sections: List[str] = [CORE_SCRIPT]
    if include_search:
        sections.append(SEARCH_SCRIPT)
    if include_jump_nav:
        sections.append(JUMP_NAV_SCRIPT)
    sections.append(MOBILE_BAR_SCRIPT)

    body = "".join(sections)
    return f"<script>\ndocument.addEventListener('DOMContentLoaded', () => {{{body}}});\n</script>"


__all__ = ["build_script"]
