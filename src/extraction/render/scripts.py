"""In-page JavaScript evaluated through ``RenderSession.evaluate``."""

# True when the page is a block-based editor (Notion and friends) that
# keeps rendering long after DOMContentLoaded.
BLOCK_EDITOR_CHECK = """
() => {
  return document.documentElement.classList.contains('notion-html')
    || document.querySelector('[data-notion-html]') !== null
    || document.querySelector('[data-block-id]') !== null
    || window.location.hostname.includes('notion');
}
"""

BLOCK_EDITOR_SELECTOR = "[data-block-id], .notion-page-content"

# Leaf-level text blocks joined by blank lines. Block-editor leaves first;
# if they give fewer than three blocks, ordinary content elements outside
# chrome. Identical text from nested containers is kept once.
LEAF_TEXT = """
({ chromeSelector, minChars }) => {
  const blocks = [];
  const seen = new Set();
  const push = (raw) => {
    const text = (raw || '').trim();
    if (text.length > minChars && !seen.has(text)) {
      seen.add(text);
      blocks.push(text);
    }
  };

  document.querySelectorAll('[data-block-id]').forEach((block) => {
    if (block.querySelector('[data-block-id]')) return;
    push(block.textContent);
  });

  if (blocks.length < 3) {
    document.querySelectorAll('p, h1, h2, h3, h4, blockquote, li').forEach((el) => {
      if (el.closest(chromeSelector)) return;
      push(el.textContent);
    });
  }

  if (blocks.length > 0) return blocks.join('\\n\\n');
  return document.body ? document.body.innerText : '';
}
"""

# og:image, else the first big <img>, else the first <img> that is not an
# icon, avatar or logo.
HERO_IMAGE = """
({ minSize, skipWords }) => {
  const og = document.querySelector('meta[property="og:image"]');
  if (og && og.getAttribute('content')) return og.getAttribute('content');

  const images = Array.from(document.querySelectorAll('img'));
  const srcOf = (img) => img.currentSrc || img.src || img.getAttribute('data-src');

  for (const img of images) {
    const src = srcOf(img);
    if (src && img.naturalWidth > minSize && img.naturalHeight > minSize) return src;
  }
  for (const img of images) {
    const src = srcOf(img);
    if (src && !skipWords.some((word) => src.toLowerCase().includes(word))) return src;
  }
  return null;
}
"""
