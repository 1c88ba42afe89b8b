"""Page interaction helpers: element measurement and annotated screenshots."""

import logging
import time
from pathlib import Path

from playwright.sync_api import Page

from .design_tree import visible_elements
from .models import RenderedElement, Viewport

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JS snippets
# ---------------------------------------------------------------------------

# Single round-trip: every selector is measured inside one evaluate() call.
_COLLECT_ELEMENTS_JS = '''
(selectors) => {
    const props = [
        'marginTop', 'marginRight', 'marginBottom', 'marginLeft',
        'paddingTop', 'paddingRight', 'paddingBottom', 'paddingLeft',
        'borderWidth', 'fontSize', 'fontFamily', 'color',
        'backgroundColor', 'display', 'position', 'zIndex',
    ];
    const elements = [];
    for (const selector of selectors) {
        document.querySelectorAll(selector).forEach((el, index) => {
            const rect = el.getBoundingClientRect();
            if (rect.width <= 0 || rect.height <= 0) return;
            const computed = window.getComputedStyle(el);
            const style = {};
            for (const p of props) style[p] = computed[p];
            const cls = typeof el.className === 'string' ? el.className.trim() : '';
            elements.push({
                selector: `${selector}:nth-child(${index + 1})`,
                name: el.tagName.toLowerCase()
                    + (el.id ? `#${el.id}` : '')
                    + (cls ? `.${cls.split(/\\s+/).join('.')}` : ''),
                dimensions: {x: rect.left, y: rect.top, width: rect.width, height: rect.height},
                computed: style,
            });
        });
    }
    return elements;
}
'''

_ADD_OVERLAY_JS = '''
(minSize) => {
    const overlay = document.createElement('div');
    overlay.id = 'design-verification-overlay';
    overlay.style.cssText = 'position:fixed;top:0;left:0;width:100%;height:100%;pointer-events:none;z-index:9999;';
    document.body.appendChild(overlay);
    document.querySelectorAll('body *').forEach((el) => {
        if (el === overlay || overlay.contains(el)) return;
        const rect = el.getBoundingClientRect();
        if (rect.width <= minSize || rect.height <= minSize) return;
        const box = document.createElement('div');
        box.style.cssText = `position:absolute;top:${rect.top}px;left:${rect.left}px;`
            + `width:${rect.width}px;height:${rect.height}px;`
            + 'border:1px solid rgba(255,0,0,0.5);background:rgba(255,0,0,0.1);'
            + 'font-size:10px;color:red;font-weight:bold;white-space:nowrap;overflow:visible;';
        const label = document.createElement('div');
        label.style.cssText = 'background:rgba(255,255,255,0.9);padding:2px;margin:-15px 0 0 0;';
        label.textContent = `${Math.round(rect.width)}×${Math.round(rect.height)}`;
        box.appendChild(label);
        overlay.appendChild(box);
    });
}
'''

_REMOVE_OVERLAY_JS = '''
() => {
    const overlay = document.getElementById('design-verification-overlay');
    if (overlay) overlay.remove();
}
'''


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def collect_elements(page: Page, selectors: list[str]) -> list[RenderedElement]:
    """Measure every element matching ``selectors`` on the current page."""
    records = page.evaluate(_COLLECT_ELEMENTS_JS, list(selectors))
    elements = visible_elements(records)
    log.debug('Collected %d elements for %d selectors', len(elements), len(selectors))
    return elements


def take_annotated_screenshot(
    page: Page,
    viewport: Viewport,
    output_dir: str,
    annotate: bool = True,
    min_size: int = 20,
    full_page: bool = True,
) -> str:
    """Screenshot the page with dimension boxes drawn over larger elements.

    Returns the absolute path of the saved PNG.
    """
    path = (Path(output_dir) / 'screenshots' / f'{viewport.name}-{int(time.time() * 1000)}.png').resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    if annotate:
        try:
            page.evaluate(_ADD_OVERLAY_JS, min_size)
        except Exception as exc:
            log.debug('Annotation overlay failed: %s', exc)

    try:
        page.screenshot(path=str(path), full_page=full_page)
    finally:
        if annotate:
            try:
                page.evaluate(_REMOVE_OVERLAY_JS)
            except Exception as exc:
                log.debug('Overlay removal failed: %s', exc)

    return str(path)
