"""Anti-automation challenge page detection.

A challenge page is recognised from independent kinds of signal:

- a headline (``<title>`` or ``<h1>``) announcing a browser check,
- a challenge container or script marker left by the provider,
- a branding or instruction phrase in the page body.

Two different kinds are required, unless the headlines carry two distinct
challenge phrases ("Just a moment..." over "Checking your browser") or a
headline names the provider itself ("DDoS protection by Cloudflare"). Pages
that merely talk about protection services in ordinary prose carry none of
these and are not flagged.
"""

import re
from typing import Iterable, List


# Phrases that appear in the title/heading of challenge interstitials
HEADLINE_PHRASES = (
    "just a moment",
    "attention required",
    "checking your browser",
    "ddos protection by",
    "please wait while",
    "one more step",
    "verifying you are human",
)

# Markup left behind by challenge platforms
CONTAINER_MARKERS = (
    "cf-chl-",
    "__cf_chl_",
    "challenge-platform",
    "/cdn-cgi/challenge-platform/",
    "cf-browser-verification",
    "cf-challenge",
    "cf-turnstile",
    'id="challenge-form"',
    'id="challenge-stage"',
)

# Branding and instructions shown in the body of challenge pages
BODY_PHRASES = (
    "checking your browser before accessing",
    "enable javascript and cookies to continue",
    "ddos protection by cloudflare",
    "performance & security by cloudflare",
    "this process is automatic",
    "complete the security check",
    "cloudflare ray id",
)

PROVIDER_NAMES = ("cloudflare", "ddos-guard", "sucuri")

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_H1_RE = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")


def _headlines(html: str) -> List[str]:
    found = _TITLE_RE.findall(html) + _H1_RE.findall(html)
    return [_TAG_RE.sub(" ", text).strip().lower() for text in found]


def _contains_any(haystack: str, needles: Iterable[str]) -> bool:
    return any(needle in haystack for needle in needles)


def detect_bot_wall(html: str) -> bool:
    """Check whether an HTML payload is an anti-bot challenge page.

    Args:
        html: Raw HTML text as returned by the server

    Returns:
        True if the page is a challenge interstitial rather than content
    """
    if not html:
        return False

    lowered = html.lower()
    headlines = _headlines(html)

    matched_phrases = {p for h in headlines for p in HEADLINE_PHRASES if p in h}
    if len(matched_phrases) >= 2:
        return True
    if any(
        _contains_any(h, HEADLINE_PHRASES) and _contains_any(h, PROVIDER_NAMES)
        for h in headlines
    ):
        return True

    headline_hit = bool(matched_phrases)
    container_hit = _contains_any(lowered, CONTAINER_MARKERS)
    body_hit = _contains_any(lowered, BODY_PHRASES)

    return sum((headline_hit, container_hit, body_hit)) >= 2
