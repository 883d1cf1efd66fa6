"""
personograph_lib.py (v0.1)

Deterministic renderer: named percentages (or IER/CER "uplift") -> SVG personograph.

A personograph (Kuiper-Marshall plot) is a grid of icons where each icon is colored
by the category it belongs to: people who have a good outcome regardless of the
intervention, a bad outcome regardless of it, or who are helped / harmed by it.
Similar in purpose to Cates plots (Visual Rx).

Design goals:
- Output must reflect the input strictly (category order drives grid + legend order).
- Layout is pure data (counts, grid, coordinates, legend) and can be used without SVG.
- SVG must be clean and editable (PowerPoint-friendly: flat, inline styles).
- No external dependencies (standard library only).

Supported:
- data: ordered mapping name -> fraction (0..1, must sum to 1)
- colors: mapping name -> color; grayscale palette when omitted
- uplift: ier/cer (+ higher_is_better) -> good outcome / intervention harm|benefit / bad outcome
- studies: per-study control events/totals + pooled point estimate ("RR" | "OR")
- icon_style: 1 (person), 2 (circle), 3 (square); icon: custom SVG path overriding the style
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple
from xml.etree import ElementTree as ET

logger = logging.getLogger(__name__)

GOOD_OUTCOME = "good outcome"
BAD_OUTCOME = "bad outcome"
INTERVENTION_BENEFIT = "intervention benefit"
INTERVENTION_HARM = "intervention harm"

UPLIFT_COLORS: Dict[str, str] = {
    INTERVENTION_HARM: "#CD2626",  # firebrick3
    INTERVENTION_BENEFIT: "#9ACD32",  # olivedrab3
    BAD_OUTCOME: "#838B8B",  # azure4
    GOOD_OUTCOME: "#E0EEEE",  # azure2
}

FRACTION_SUM_TOLERANCE = 0.01


class InvalidArgumentError(ValueError):
    """Raised when chart or risk inputs cannot be used."""


class PersonographWarning(UserWarning):
    """Non-fatal diagnostics (rounding truncation, assumed outcome direction)."""


# ---------- Risk math ----------
def intervention_rate(cer: float, point: float, sm: str) -> float:
    """Absolute intervention event rate (IER) from the CER and a pooled RR or OR."""
    measure = (sm or "").strip().upper()
    if measure == "RR":
        return cer * point
    if measure == "OR":
        return cer * (point / (1 - (cer * (1 - point))))
    raise InvalidArgumentError(f"sm needs to be OR (Odds Ratio) or RR (Relative Risk), got {sm!r}")


def uplift(ier: float, cer: float, higher_is_better: Optional[bool] = None) -> Dict[str, float]:
    """
    Fractions of people with good outcome, bad outcome and intervention harm (or benefit).

    The result depends on the direction of the outcome: higher_is_better=True for
    efficacy outcomes, False for adverse events. Only one of harm/benefit is returned.
    """
    if higher_is_better is None:
        higher_is_better = True
        warnings.warn("Setting higher_is_better as outcome direction to True", PersonographWarning, stacklevel=2)
    if not higher_is_better:
        # Orient the rates so that a higher event rate is always the good outcome
        ier = 1 - ier
        cer = 1 - cer

    good = min(ier, cer)
    bad = 1 - max(ier, cer)
    benefit = max(ier - cer, 0.0)
    harm = max(cer - ier, 0.0)

    if higher_is_better:
        return {GOOD_OUTCOME: good, INTERVENTION_HARM: harm, BAD_OUTCOME: bad}
    return {GOOD_OUTCOME: good, INTERVENTION_BENEFIT: benefit, BAD_OUTCOME: bad}


def _is_missing(v) -> bool:
    return v is None or (isinstance(v, float) and math.isnan(v))


def weighted_median(values: Sequence[Optional[float]], weights: Optional[Sequence[Optional[float]]] = None) -> float:
    if weights is None:
        weights = [1.0] * len(values)
    if len(weights) != len(values):
        raise InvalidArgumentError("values and weights must have the same length")
    pairs = [(float(x), float(w)) for x, w in zip(values, weights) if not _is_missing(x) and not _is_missing(w)]
    total = sum(w for _, w in pairs)
    if not pairs or total <= 0:
        raise InvalidArgumentError("weighted median needs at least one row with a value and a positive weight")
    pairs.sort(key=lambda p: p[0])

    cum = 0.0
    ind1: Optional[int] = None
    ind2: Optional[int] = None
    for idx, (_, w) in enumerate(pairs):
        cum += w
        share = cum / total
        if ind1 is None and share >= 0.5:
            ind1 = idx
        if share > 0.5:
            ind2 = idx
            break
    last = len(pairs) - 1
    ind1 = last if ind1 is None else ind1
    ind2 = last if ind2 is None else ind2
    return max(pairs[ind1][0], pairs[ind2][0])


def approximate_control_rate(ev_ctrl: Sequence[float], n_ctrl: Sequence[float]) -> float:
    """Control event rate (CER) as the per-study rates' median weighted by arm size."""
    if len(ev_ctrl) != len(n_ctrl):
        raise InvalidArgumentError("ev_ctrl and n_ctrl must have the same length")
    rates: List[Optional[float]] = []
    for ev, n in zip(ev_ctrl, n_ctrl):
        rates.append(None if _is_missing(ev) or _is_missing(n) or not n else ev / n)
    return weighted_median(rates, n_ctrl)


# ---------- Counts ----------
def round_conventional(x: float) -> int:
    # Half-up, so round_conventional(0.5) == 1 (builtin round() is banker's rounding)
    return int(math.floor(x + 0.5))


def round_with_warning(x: float, name: Optional[str] = None) -> int:
    rounded = round_conventional(x)
    if x > 0 and rounded == 0:
        warnings.warn(
            f"truncating {name if name is not None else 'a'} non-zero value of {x} to 0",
            PersonographWarning,
            stacklevel=2,
        )
    return rounded


def allocate_counts(fractions: Mapping[str, float], n_icons: int) -> Dict[str, int]:
    return {name: round_with_warning(frac * n_icons, name=name) for name, frac in fractions.items()}


def natural_frequency(fraction: float, denominator: int = 100) -> str:
    """'k/denominator' phrasing; '< 1/denominator' for rates too small to round to one."""
    numerator = fraction * denominator
    if 0 < numerator < 0.5:
        return f"< 1/{denominator}"
    return f"{round_conventional(numerator)}/{denominator}"


# ---------- Grid ----------
def flatten(counts: Mapping[str, int]) -> List[str]:
    flat: List[str] = []
    for name, count in counts.items():
        flat.extend([name] * count)
    return flat


def place(flat: Sequence[str], rows: int, cols: int) -> List[List[Optional[str]]]:
    """
    Snake-ordered grid of category names.

    Rows are filled from the last row to the first; odd rows (1-based) run left to
    right, even rows right to left, which keeps like icons in contiguous blocks.
    Entries beyond rows * cols are dropped; unfilled cells stay None.
    """
    grid: List[List[Optional[str]]] = [[None] * cols for _ in range(rows)]
    total = 0
    for i in range(rows - 1, -1, -1):
        left_to_right = (i + 1) % 2 == 1
        for j in range(cols):
            if total >= len(flat):
                return grid
            j_snake = j if left_to_right else cols - j - 1
            grid[i][j_snake] = flat[total]
            total += 1
    return grid


def coordinates_for(
    name: str, grid: Sequence[Sequence[Optional[str]]], icon_width: float, icon_height: float
) -> List[Tuple[float, float]]:
    """Cell centers holding `name`, in normalized plot units (row 0 at the bottom)."""
    coords: List[Tuple[float, float]] = []
    for i, row in enumerate(grid):
        for j, cell in enumerate(row):
            if cell == name:
                coords.append((j * icon_width + icon_width / 2, i * icon_height + icon_height / 2))
    return coords


# ---------- Legend ----------
_NARROW_CHARS = set("ijl|!.,:;'`")
_SEMI_NARROW_CHARS = set("frt/()[]- ")
_WIDE_CHARS = set("mwMW@%")


def estimate_text_width(text: str, font_size: float) -> float:
    """Approximate rendered width (px) of Helvetica-like text; no font metrics needed."""
    em = 0.0
    for ch in text or "":
        if ord(ch) > 0x2E7F:
            em += 1.0
        elif ch in _NARROW_CHARS:
            em += 0.25
        elif ch in _SEMI_NARROW_CHARS:
            em += 0.3
        elif ch in _WIDE_CHARS:
            em += 0.85
        elif ch.isupper():
            em += 0.68
        else:
            em += 0.556
    return em * font_size


@dataclass(frozen=True)
class LegendEntry:
    name: str
    color: str
    label: str
    width: float


@dataclass(frozen=True)
class LegendLayout:
    entries: Tuple[LegendEntry, ...]
    swatch_width: float
    total_width: float


def legend_layout(
    fractions: Mapping[str, float],
    colors: Mapping[str, str],
    denominator: int = 100,
    font_size: float = 11.0,
    swatch_width: float = 24.0,
    measure: Callable[[str, float], float] = estimate_text_width,
) -> LegendLayout:
    entries: List[LegendEntry] = []
    for name, frac in fractions.items():
        label = f"{natural_frequency(frac, denominator)} {name}"
        entries.append(LegendEntry(name=name, color=colors[name], label=label, width=measure(label, font_size)))
    total = sum(swatch_width + e.width for e in entries)
    return LegendLayout(entries=tuple(entries), swatch_width=swatch_width, total_width=total)


# ---------- Colors / icons ----------
def gray_colors(n: int, start: float = 0.3, end: float = 0.9, gamma: float = 2.2) -> List[str]:
    """Grayscale palette, evenly spaced on the gamma-corrected scale (light shades last)."""
    if n <= 0:
        return []
    lo, hi = start ** gamma, end ** gamma
    out: List[str] = []
    for k in range(n):
        t = lo if n == 1 else lo + (hi - lo) * k / (n - 1)
        level = round_conventional((t ** (1 / gamma)) * 255)
        out.append("#{0:02X}{0:02X}{0:02X}".format(max(0, min(255, level))))
    return out


def as_colors(fractions: Mapping[str, float]) -> Dict[str, str]:
    palette = gray_colors(len(fractions))
    return {name: palette[idx] for idx, name in enumerate(fractions)}


def uplift_chart_data(result: Mapping[str, float]) -> Tuple[Dict[str, float], Dict[str, str]]:
    """Uplift fractions plus the fixed uplift colors, for the categories present."""
    fractions = dict(result)
    unknown = [name for name in fractions if name not in UPLIFT_COLORS]
    if unknown:
        raise InvalidArgumentError(f"not an uplift result, unknown categories: {unknown}")
    return fractions, {name: UPLIFT_COLORS[name] for name in fractions}


@dataclass(frozen=True)
class Icon:
    name: str
    path: str  # SVG path data drawn inside a box x box square
    box: float = 24.0


ICON_STYLES: Dict[int, Icon] = {
    1: Icon(
        "person",
        "M12 1.5a4.25 4.25 0 1 0 0 8.5a4.25 4.25 0 1 0 0-8.5z"
        "M4.5 22.5v-6.5a5 5 0 0 1 5-5h5a5 5 0 0 1 5 5v6.5z",
    ),
    2: Icon("circle", "M12 2a10 10 0 1 0 0 20a10 10 0 1 0 0-20z"),
    3: Icon("square", "M3 3h18v18h-18z"),
}


# ---------- Options / layout ----------
@dataclass(frozen=True)
class ChartOptions:
    fractions: Dict[str, float]
    colors: Dict[str, str]
    n_icons: int
    rows: int
    cols: int
    icon_width: float
    icon_height: float


def _as_float(value, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{what} is not a number: {value!r}") from None


def _as_int(value, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{what} is not an integer: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{what} is not an integer: {value!r}") from None


def _as_object(value, what: str) -> dict:
    if not isinstance(value, dict):
        raise InvalidArgumentError(f"{what} must be an object, got {value!r}")
    return value


def _as_list(value, what: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise InvalidArgumentError(f"{what} must be a list, got {value!r}")
    return list(value)


def _check_fractions(fractions: Mapping[str, float]) -> Dict[str, float]:
    if not fractions:
        raise InvalidArgumentError("data needs at least one category")
    out: Dict[str, float] = {}
    for name, value in fractions.items():
        try:
            frac = float(value)
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"fraction for {name!r} is not a number: {value!r}") from None
        if math.isnan(frac) or frac < 0 or frac > 1:
            raise InvalidArgumentError(f"fraction for {name!r} must be within 0..1, got {value!r}")
        out[str(name)] = frac
    total = sum(out.values())
    if total > 1 + FRACTION_SUM_TOLERANCE:
        raise InvalidArgumentError(f"fractions must sum to 1, got {total}")
    if total < 1 - FRACTION_SUM_TOLERANCE:
        # e.g. uplift results where the effect goes against the reported side
        warnings.warn(f"fractions sum to {total}; the remaining icons are left empty", PersonographWarning, stacklevel=3)
    return out


def resolve_options(
    fractions: Mapping[str, float],
    n_icons: int = 100,
    dimensions: Optional[Sequence[int]] = None,
    colors: Optional[Mapping[str, str]] = None,
    icon_dim: Optional[Sequence[float]] = None,
) -> ChartOptions:
    """
    Validate inputs and compute every default once.

    dimensions: (rows, cols), default ceil(sqrt(n_icons)) squared.
    icon_dim: (width, height) in normalized plot units, default (1/cols, 1/rows).
    colors: defaults to a grayscale shade per category in input order.
    """
    data = _check_fractions(fractions)
    if isinstance(n_icons, bool) or not isinstance(n_icons, int) or n_icons < 1:
        raise InvalidArgumentError(f"n_icons must be a positive integer, got {n_icons!r}")

    if dimensions is None:
        side = math.ceil(math.sqrt(n_icons))
        rows, cols = side, side
    else:
        if len(dimensions) != 2:
            raise InvalidArgumentError(f"dimensions must be (rows, cols), got {dimensions!r}")
        rows, cols = int(dimensions[0]), int(dimensions[1])
        if rows < 1 or cols < 1:
            raise InvalidArgumentError(f"dimensions must be positive, got {dimensions!r}")
    if n_icons > rows * cols:
        raise InvalidArgumentError(f"{n_icons} icons do not fit in a {rows}x{cols} grid")

    if icon_dim is None:
        icon_width, icon_height = 1 / cols, 1 / rows
    else:
        if len(icon_dim) != 2:
            raise InvalidArgumentError(f"icon_dim must be (width, height), got {icon_dim!r}")
        icon_width, icon_height = _as_float(icon_dim[0], "icon_dim width"), _as_float(icon_dim[1], "icon_dim height")
        if icon_width <= 0 or icon_height <= 0:
            raise InvalidArgumentError(f"icon_dim must be positive, got {icon_dim!r}")

    if colors is None:
        resolved_colors = as_colors(data)
    else:
        missing = [name for name in data if name not in colors]
        if missing:
            raise InvalidArgumentError(f"no color given for: {', '.join(missing)}")
        resolved_colors = {name: str(colors[name]) for name in data}

    opts = ChartOptions(
        fractions=data,
        colors=resolved_colors,
        n_icons=n_icons,
        rows=rows,
        cols=cols,
        icon_width=icon_width,
        icon_height=icon_height,
    )
    logger.debug("resolved personograph options: %s", opts)
    return opts


@dataclass(frozen=True)
class IconBatch:
    name: str
    color: str
    coordinates: Tuple[Tuple[float, float], ...]


@dataclass(frozen=True)
class PersonographLayout:
    options: ChartOptions
    counts: Dict[str, int]
    grid: Tuple[Tuple[Optional[str], ...], ...]
    batches: Tuple[IconBatch, ...]
    legend: LegendLayout


def layout_personograph(
    fractions: Mapping[str, float],
    n_icons: int = 100,
    dimensions: Optional[Sequence[int]] = None,
    colors: Optional[Mapping[str, str]] = None,
    icon_dim: Optional[Sequence[float]] = None,
    font_size: float = 11.0,
    swatch_width: float = 24.0,
    measure: Callable[[str, float], float] = estimate_text_width,
) -> PersonographLayout:
    opts = resolve_options(fractions, n_icons=n_icons, dimensions=dimensions, colors=colors, icon_dim=icon_dim)
    counts = allocate_counts(opts.fractions, opts.n_icons)
    flat = flatten(counts)
    capacity = opts.rows * opts.cols
    if len(flat) > capacity:
        warnings.warn(
            f"rounded counts need {len(flat)} icons but the grid holds {capacity}; dropping {len(flat) - capacity}",
            PersonographWarning,
            stacklevel=2,
        )
    grid = place(flat, opts.rows, opts.cols)

    batches: List[IconBatch] = []
    for name in opts.fractions:
        coords = coordinates_for(name, grid, opts.icon_width, opts.icon_height)
        if coords:
            batches.append(IconBatch(name=name, color=opts.colors[name], coordinates=tuple(coords)))

    legend = legend_layout(
        opts.fractions, opts.colors, denominator=opts.n_icons, font_size=font_size, swatch_width=swatch_width, measure=measure
    )
    return PersonographLayout(
        options=opts,
        counts=counts,
        grid=tuple(tuple(row) for row in grid),
        batches=tuple(batches),
        legend=legend,
    )


# ---------- Chart ----------
class PersonographChart:
    def __init__(self):
        self.fractions: Dict[str, float] = {}
        self.colors: Optional[Dict[str, str]] = None
        self.layout: Optional[PersonographLayout] = None
        self.title: Optional[str] = None
        self.caption: Optional[str] = None
        self.draw_legend = True

        # Layout config (SVG px units)
        self.width = 600.0
        self.height = 800.0
        self.n_icons = 100
        self.dimensions: Optional[Tuple[int, int]] = None
        self.icon_dim: Optional[Tuple[float, float]] = None
        self.icon_style = 1
        self.icon: Optional[Icon] = None  # overrides icon_style when set
        self.plot_width = 0.75  # share of the frame width used by the icon grid
        self.icon_fudge = 0.0075  # keeps neighbouring icons from touching
        self.font_family = "Helvetica, Arial, sans-serif"
        self.title_font_size = 18
        self.font_size = 11
        self.swatch_width = 24.0  # 0.25in at 96dpi
        self.text_color = "#000"

    def load_from_json(self, data: dict) -> None:
        data = _as_object(data or {}, "input")
        meta = dict(_as_object(data.get("meta") or {}, "meta"))
        self.title = meta.get("title")
        self.caption = meta.get("caption")
        self.draw_legend = bool(meta.get("draw_legend", True))
        if meta.get("n_icons") is not None:
            self.n_icons = _as_int(meta["n_icons"], "meta.n_icons")
        if meta.get("dimensions") is not None:
            dims = _as_list(meta["dimensions"], "meta.dimensions")
            if len(dims) != 2:
                raise InvalidArgumentError(f"meta.dimensions must be [rows, cols], got {dims!r}")
            self.dimensions = (_as_int(dims[0], "meta.dimensions rows"), _as_int(dims[1], "meta.dimensions cols"))
        if meta.get("icon_style") is not None:
            self.icon_style = _as_int(meta["icon_style"], "meta.icon_style")
        if meta.get("icon") is not None:
            icon = _as_object(meta["icon"], "meta.icon")
            if not isinstance(icon.get("path"), str) or not icon["path"].strip():
                raise InvalidArgumentError("meta.icon needs an SVG path string")
            box = _as_float(icon.get("box", 24.0), "meta.icon.box")
            if box <= 0:
                raise InvalidArgumentError(f"meta.icon.box must be positive, got {box!r}")
            self.icon = Icon(str(icon.get("name") or "custom"), icon["path"], box)
        if meta.get("plot_width") is not None:
            self.plot_width = _as_float(meta["plot_width"], "meta.plot_width")
        if meta.get("width") is not None:
            self.width = _as_float(meta["width"], "meta.width")
        if meta.get("height") is not None:
            self.height = _as_float(meta["height"], "meta.height")

        sources = [key for key in ("data", "uplift", "studies") if data.get(key) is not None]
        if len(sources) != 1:
            raise InvalidArgumentError(f"expected exactly one of data/uplift/studies, got {sources or 'none'}")
        colors = data.get("colors")
        if colors is not None and not isinstance(colors, dict):
            raise InvalidArgumentError("colors must be an object of name -> color")

        if sources[0] == "data":
            fractions = data["data"]
            if not isinstance(fractions, dict):
                raise InvalidArgumentError("data must be an object of name -> fraction")
            self.load_data(fractions, colors)
            return

        if sources[0] == "uplift":
            u = _as_object(data["uplift"], "uplift")
            ier, cer = _as_float(u.get("ier"), "uplift.ier"), _as_float(u.get("cer"), "uplift.cer")
        else:
            u = _as_object(data["studies"], "studies")
            ev_ctrl = [_as_float(v, "studies.ev_ctrl") if v is not None else None for v in _as_list(u.get("ev_ctrl"), "studies.ev_ctrl")]
            n_ctrl = [_as_float(v, "studies.n_ctrl") if v is not None else None for v in _as_list(u.get("n_ctrl"), "studies.n_ctrl")]
            cer = approximate_control_rate(ev_ctrl, n_ctrl)
            ier = intervention_rate(cer, _as_float(u.get("point"), "studies.point"), str(u.get("sm") or "RR"))
        result = uplift(ier, cer, u.get("higher_is_better"))
        fractions, uplift_colors = uplift_chart_data(result)
        self.load_data(fractions, colors if colors is not None else uplift_colors)

    def load_data(self, fractions: Mapping[str, float], colors: Optional[Mapping[str, str]] = None) -> None:
        self.fractions = dict(fractions)
        self.colors = dict(colors) if colors is not None else None
        self._auto_layout()

    def render_and_save(self, filename: str = "personograph.svg") -> str:
        svg = self._render_svg()
        Path(filename).write_text(svg, encoding="utf-8")
        logger.debug("wrote personograph to %s", filename)
        return filename

    def render_svg(self) -> str:
        return self._render_svg()

    # ---------- Layout ----------
    def _auto_layout(self) -> None:
        if self.icon is None and self.icon_style not in ICON_STYLES:
            raise InvalidArgumentError(f"icon_style must be one of {sorted(ICON_STYLES)}, got {self.icon_style!r}")
        self.layout = layout_personograph(
            self.fractions,
            n_icons=self.n_icons,
            dimensions=self.dimensions,
            colors=self.colors,
            icon_dim=self.icon_dim,
            font_size=self.font_size,
            swatch_width=self.swatch_width,
        )

    def _bands(self) -> Dict[str, Tuple[float, float]]:
        """Vertical (top, height) per band: title, plot, legend, caption."""
        used_rows = int(self.draw_legend) + int(self.caption is not None)
        shares = [
            0.1,
            0.9 - used_rows * 0.1,
            0.1 if self.draw_legend else 0.0,
            0.1 if (self.caption is not None or not self.draw_legend) else 0.0,
        ]
        scale = self.height / sum(shares)
        bands: Dict[str, Tuple[float, float]] = {}
        top = 0.0
        for name, share in zip(("title", "plot", "legend", "caption"), shares):
            bands[name] = (top, share * scale)
            top += share * scale
        return bands

    # ---------- SVG ----------
    def _render_svg(self) -> str:
        if self.layout is None:
            raise InvalidArgumentError("no data loaded")
        width, height = int(self.width), int(self.height)
        svg = ET.Element(
            "svg",
            {
                "xmlns": "http://www.w3.org/2000/svg",
                "version": "1.1",
                "width": str(width),
                "height": str(height),
                "viewBox": f"0 0 {width} {height}",
            },
        )
        bands = self._bands()
        if self.title is not None:
            top, h = bands["title"]
            self._add_text(svg, self.width / 2, top + h / 2, str(self.title), size=self.title_font_size, bold=True, tid="title")

        icon = self.icon or ICON_STYLES[self.icon_style]
        for batch in self.layout.batches:
            self._draw_icon_batch(svg, icon, batch.coordinates, batch.color, name=batch.name, band=bands["plot"])

        if self.draw_legend:
            self._draw_legend(svg, bands["legend"])

        if self.caption is not None:
            top, h = bands["caption"]
            self._add_text(svg, self.width / 2, top + h / 2, str(self.caption), size=self.font_size, tid="caption")

        return ET.tostring(svg, encoding="unicode")

    def _plot_area(self, band: Tuple[float, float]) -> Tuple[float, float, float, float]:
        top, h = band
        w = self.width * self.plot_width
        return ((self.width - w) / 2, top, w, h)

    def _draw_icon_batch(
        self,
        parent: ET.Element,
        icon: Icon,
        coordinates: Sequence[Tuple[float, float]],
        color: str,
        *,
        name: str,
        band: Tuple[float, float],
    ) -> None:
        opts = self.layout.options
        left, top, pw, ph = self._plot_area(band)
        size = (max(opts.icon_height, opts.icon_width) - self.icon_fudge) * min(pw, ph)
        scale = size / icon.box
        for idx, (x, y) in enumerate(coordinates):
            # Normalized y grows upward; SVG y grows downward
            cx = left + x * pw
            cy = top + (1 - y) * ph
            ET.SubElement(
                parent,
                "path",
                {
                    "id": self._sid("icon", name, str(idx)),
                    "d": icon.path,
                    "transform": f"translate({_fmt(cx - size / 2)} {_fmt(cy - size / 2)}) scale({_fmt(scale)})",
                    "fill": color,
                    "stroke": "none",
                },
            )

    def _draw_legend(self, parent: ET.Element, band: Tuple[float, float]) -> None:
        legend = self.layout.legend
        top, h = band
        row_h = 0.25 * h
        cy = top + h / 2
        r = 0.35 * min(legend.swatch_width, row_h)
        x = (self.width - legend.total_width) / 2
        for idx, entry in enumerate(legend.entries):
            ET.SubElement(
                parent,
                "circle",
                {
                    "id": self._sid("legend", "swatch", str(idx)),
                    "cx": _fmt(x + 0.4 * legend.swatch_width),
                    "cy": _fmt(cy),
                    "r": _fmt(r),
                    "fill": entry.color,
                    "stroke": "none",
                },
            )
            x += legend.swatch_width
            self._add_text(parent, x, cy, entry.label, size=self.font_size, anchor="start", tid=self._sid("legend", "label", str(idx)))
            x += entry.width

    def _add_text(
        self,
        parent: ET.Element,
        x: float,
        y: float,
        text: str,
        *,
        size: int,
        tid: str,
        anchor: str = "middle",
        bold: bool = False,
    ) -> None:
        attrs = {
            "id": tid,
            "x": _fmt(x),
            "y": _fmt(y + size * 0.35),  # baseline so the glyphs are centered on y
            "font-size": str(size),
            "text-anchor": anchor,
            "font-family": self.font_family,
            "fill": self.text_color,
        }
        if bold:
            attrs["font-weight"] = "bold"
        t = ET.SubElement(parent, "text", attrs)
        t.text = text

    def _sid(self, *parts: str) -> str:
        s = "_".join([str(p) for p in parts if p is not None and str(p) != ""])
        out = []
        for ch in s:
            if ch.isalnum() or ch in ("_", "-"):
                out.append(ch)
            else:
                out.append("_")
        return "".join(out)[:180]


def _fmt(v: float) -> str:
    return f"{v:.2f}".rstrip("0").rstrip(".") or "0"


def plot_personograph(fractions: Mapping[str, float], filename: str = "personograph.svg", **kwargs) -> str:
    """Render named fractions to an SVG file; kwargs set PersonographChart attributes."""
    colors = kwargs.pop("colors", None)
    chart = PersonographChart()
    for key, value in kwargs.items():
        if not hasattr(chart, key):
            raise InvalidArgumentError(f"unknown chart option: {key}")
        setattr(chart, key, value)
    chart.load_data(fractions, colors)
    return chart.render_and_save(filename)


def plot_uplift(result: Mapping[str, float], filename: str = "personograph.svg", **kwargs) -> str:
    fractions, colors = uplift_chart_data(result)
    kwargs.setdefault("colors", colors)
    return plot_personograph(fractions, filename, **kwargs)
