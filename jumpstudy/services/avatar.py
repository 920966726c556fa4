"""Deterministic SVG avatars for advocate profiles."""

import base64
import hashlib
from xml.sax.saxutils import escape
from typing import Callable, Dict, List

AVATAR_STYLES = ("identicon", "initials", "rings", "pixel-art")

_PALETTE = (
    "#f94144", "#f3722c", "#f8961e", "#f9c74f", "#90be6d",
    "#43aa8b", "#577590", "#277da1", "#9b5de5", "#f15bb5",
)


class UnknownStyleError(ValueError):
    pass


def _digest(seed: str) -> bytes:
    return hashlib.sha256(seed.encode("utf-8")).digest()


def _color(byte: int) -> str:
    return _PALETTE[byte % len(_PALETTE)]


def _svg(size: int, body: List[str], view: int) -> str:
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{size}" '
        f'height="{size}" viewBox="0 0 {view} {view}">'
        + "".join(body)
        + "</svg>"
    )


def _mirrored_grid(digest: bytes, cells: int, fill: str) -> List[str]:
    half = (cells + 1) // 2
    rects = []
    bit = 0
    for row in range(cells):
        for col in range(half):
            byte = digest[(bit // 8) % len(digest)]
            on = (byte >> (bit % 8)) & 1
            bit += 1
            if not on:
                continue
            for x in sorted({col, cells - 1 - col}):
                rects.append(
                    f'<rect x="{x}" y="{row}" width="1" height="1" '
                    f'fill="{fill}"/>'
                )
    return rects


def _identicon(seed: str, digest: bytes) -> List[str]:
    return ['<rect width="5" height="5" fill="#f0f0f0"/>'] + _mirrored_grid(
        digest, 5, _color(digest[0])
    )


def _pixel_art(seed: str, digest: bytes) -> List[str]:
    background = _color(digest[1])
    body = [f'<rect width="8" height="8" fill="{background}" opacity="0.25"/>']
    body += _mirrored_grid(digest[2:], 8, _color(digest[3]))
    return body


def _initials(seed: str, digest: bytes) -> List[str]:
    words = [w for w in seed.replace("_", " ").replace("-", " ").split() if w]
    letters = "".join(w[0] for w in words[:2]).upper() or "?"
    return [
        f'<circle cx="50" cy="50" r="50" fill="{_color(digest[0])}"/>',
        '<text x="50" y="50" dy="0.35em" text-anchor="middle" '
        'font-family="Arial, sans-serif" font-size="40" fill="#ffffff">'
        f"{escape(letters)}</text>",
    ]


def _rings(seed: str, digest: bytes) -> List[str]:
    body = ['<rect width="100" height="100" fill="#ffffff"/>']
    for index, radius in enumerate((48, 36, 24, 12)):
        body.append(
            f'<circle cx="50" cy="50" r="{radius}" '
            f'fill="{_color(digest[index + 4])}"/>'
        )
    return body


_RENDERERS: Dict[str, Callable[[str, bytes], List[str]]] = {
    "identicon": _identicon,
    "initials": _initials,
    "rings": _rings,
    "pixel-art": _pixel_art,
}
_VIEWBOX = {"identicon": 5, "initials": 100, "rings": 100, "pixel-art": 8}


def generate_avatar(style: str, seed: str, size: int = 128) -> Dict[str, str]:
    """Render ``style`` for ``seed``; the same inputs always give the same SVG."""
    renderer = _RENDERERS.get(style)
    if renderer is None:
        raise UnknownStyleError(f"Unknown avatar style '{style}'")
    svg = _svg(size, renderer(seed, _digest(seed)), _VIEWBOX[style])
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return {
        "svg": svg,
        "dataUri": f"data:image/svg+xml;base64,{encoded}",
        "seed": seed,
        "style": style,
    }
