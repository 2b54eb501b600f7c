"""
Minimal point-based drawing surface that serialises to inline SVG.

Coordinates follow the PDF page convention used by the layout code: origin
at the top-left, y grows downwards, text is positioned by the top of its
line box.
"""
from __future__ import annotations

import html
from typing import List, Optional


def _esc(value: object) -> str:
    return html.escape(str(value if value is not None else ""), quote=True)


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


class SvgCanvas:
    def __init__(self, width: float, height: float, font_family: str = "Helvetica, Arial, sans-serif"):
        self.width = width
        self.height = height
        self.font_family = font_family
        self._parts: List[str] = []
        self._open_groups = 0

    def line(self, x1: float, y1: float, x2: float, y2: float, *, width: float = 0.5, css_class: str = "") -> None:
        cls = f' class="{_esc(css_class)}"' if css_class else ""
        self._parts.append(
            f'<line{cls} x1="{_num(x1)}" y1="{_num(y1)}" x2="{_num(x2)}" y2="{_num(y2)}" '
            f'stroke="#000" stroke-width="{_num(width)}"/>'
        )

    def rect(self, x: float, y: float, width: float, height: float, *, fill: str, css_class: str = "") -> None:
        cls = f' class="{_esc(css_class)}"' if css_class else ""
        self._parts.append(
            f'<rect{cls} x="{_num(x)}" y="{_num(y)}" width="{_num(width)}" height="{_num(height)}" fill="{_esc(fill)}"/>'
        )

    def text(
        self,
        value: str,
        x: float,
        y: float,
        *,
        width: Optional[float] = None,
        size: float = 9.0,
        bold: bool = False,
        italic: bool = False,
        align: str = "left",
        css_class: str = "",
    ) -> None:
        """
        Draw one line of text. With a width the text is aligned inside the
        box and clipped to it; without one it starts at x and runs freely.
        """
        if value is None or value == "":
            return
        weight = ' font-weight="bold"' if bold else ""
        style = ' font-style="italic"' if italic else ""
        cls = f' class="{_esc(css_class)}"' if css_class else ""
        if width is None:
            self._parts.append(
                f'<text{cls} x="{_num(x)}" y="{_num(y)}" font-size="{_num(size)}"{weight}{style} '
                f'dominant-baseline="hanging">{_esc(value)}</text>'
            )
            return

        box_height = size * 1.4
        if align == "center":
            anchor, tx = "middle", width / 2.0
        elif align == "right":
            anchor, tx = "end", width
        else:
            anchor, tx = "start", 0.0
        self._parts.append(
            f'<svg x="{_num(x)}" y="{_num(y)}" width="{_num(max(0.0, width))}" height="{_num(box_height)}" overflow="hidden">'
            f'<text{cls} x="{_num(tx)}" y="0" font-size="{_num(size)}"{weight}{style} '
            f'text-anchor="{anchor}" dominant-baseline="hanging">{_esc(value)}</text></svg>'
        )

    def begin_group(self, css_class: str, **data: object) -> None:
        attrs = "".join(f' data-{_esc(k.replace("_", "-"))}="{_esc(v)}"' for k, v in data.items())
        self._parts.append(f'<g class="{_esc(css_class)}"{attrs}>')
        self._open_groups += 1

    def end_group(self) -> None:
        if self._open_groups <= 0:
            raise RuntimeError("end_group() without matching begin_group()")
        self._parts.append("</g>")
        self._open_groups -= 1

    def to_svg(self) -> str:
        if self._open_groups:
            raise RuntimeError(f"{self._open_groups} group(s) left open")
        w, h = _num(self.width), _num(self.height)
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}pt" height="{h}pt" '
            f'viewBox="0 0 {w} {h}" font-family="{_esc(self.font_family)}">'
            + "".join(self._parts)
            + "</svg>"
        )
