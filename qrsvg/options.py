"""Render configuration model.

``RenderOptions.from_dict`` accepts the camelCase JSON layout used by style
files (``dotsOptions``, ``cornersSquareOptions``, ``cornersDotOptions``,
``backgroundOptions``, ``images``, ``frame``, ``qrOptions``...) and maps
every free-form shape name onto the closed enums in ``qrsvg.shapes``.
Unknown names become ``square`` here, at the boundary, with a diagnostic.
"""

from dataclasses import dataclass, field

from qrsvg.diagnostics import SCALE_CLAMPED, SHAPE_FALLBACK, Diagnostics
from qrsvg.errors import ConfigError
from qrsvg.gradients import ColorStop, Gradient, validate_gradient
from qrsvg.shapes import FIGURE_ALIASES, FigureShape, IconShape, ShapeKind

# Prefixes used by older style presets ("dots-square", "outer-eye-rounded"...)
_LEGACY_PREFIXES = ("dots-", "outer-eye-", "inner-eye-")


@dataclass(frozen=True)
class ShapeSpec:
    kind: ShapeKind = ShapeKind.FIGURE
    figure: FigureShape = FigureShape.SQUARE
    icon: IconShape | None = None
    custom_path: str | None = None
    custom_view_box: str = "0 0 24 24"


@dataclass(frozen=True)
class PartStyle:
    shape: ShapeSpec = field(default_factory=ShapeSpec)
    color: str = "#000000"
    gradient: Gradient | None = None
    scale: float = 1.0
    is_single: bool = False


@dataclass(frozen=True)
class Background:
    color: str | None = "#ffffff"
    gradient: Gradient | None = None
    image: str | None = None


@dataclass(frozen=True)
class ImageOverlay:
    source: str
    width: float
    height: float
    x: float | None = None
    y: float | None = None
    exclude_dots: bool = False
    opacity: float = 1.0
    preserve_aspect_ratio: str = "xMidYMid meet"


@dataclass(frozen=True)
class FrameInset:
    width: float
    height: float
    x: float | None = None
    y: float | None = None


@dataclass(frozen=True)
class Frame:
    source: str
    width: float
    height: float
    inset: FrameInset | None = None


@dataclass
class RenderOptions:
    data: str
    width: float = 300
    height: float = 300
    margin: float = 4
    border_radius: float = 0
    ecc: str = "H"
    background: Background = field(default_factory=Background)
    images: list[ImageOverlay] = field(default_factory=list)
    frame: Frame | None = None
    dots_options: PartStyle = field(default_factory=PartStyle)
    corners_square_options: PartStyle = field(default_factory=PartStyle)
    corners_dot_options: PartStyle = field(default_factory=PartStyle)
    # Diagnostics raised while parsing (e.g. unknown shape names)
    parse_diagnostics: Diagnostics = field(default_factory=Diagnostics, repr=False, compare=False)

    def validate(self) -> "RenderOptions":
        if not self.data or not str(self.data).strip():
            raise ConfigError("QR data must be a non-empty string")
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"Output size must be positive, got {self.width}x{self.height}")
        if self.margin < 0:
            raise ConfigError(f"Margin must be >= 0, got {self.margin}")
        if self.border_radius < 0:
            raise ConfigError(f"Border radius must be >= 0, got {self.border_radius}")
        if str(self.ecc).upper() not in ("L", "M", "Q", "H"):
            raise ConfigError(f"Unknown error correction level {self.ecc!r}; expected one of L, M, Q, H")
        for i, image in enumerate(self.images):
            if image.width <= 0 or image.height <= 0:
                raise ConfigError(f"Image {i} must have a positive width and height")
            if not 0 <= image.opacity <= 1:
                raise ConfigError(f"Image {i} opacity must be within 0..1, got {image.opacity}")
        if self.frame is not None:
            if self.frame.width <= 0 or self.frame.height <= 0:
                raise ConfigError("Frame width and height must be positive")
            inset = self.frame.inset
            if inset is not None and (inset.width <= 0 or inset.height <= 0):
                raise ConfigError(f"Frame inset must have a positive size, got {inset.width}x{inset.height}")
        for name, part in (("dotsOptions", self.dots_options),
                           ("cornersSquareOptions", self.corners_square_options),
                           ("cornersDotOptions", self.corners_dot_options)):
            if not 0 < part.scale <= 1:
                raise ConfigError(f"{name}: scale must be within (0, 1], got {part.scale}")
            if part.gradient is not None:
                validate_gradient(part.gradient)
        if self.background.gradient is not None:
            validate_gradient(self.background.gradient)
        return self

    @classmethod
    def from_dict(cls, raw: dict, diagnostics: Diagnostics | None = None) -> "RenderOptions":
        """Build options from a camelCase mapping (JSON style file layout)."""
        diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        qr_options = raw.get("qrOptions") or {}
        background = raw.get("backgroundOptions") or raw.get("background") or {}

        options = cls(
            data=raw.get("data") or raw.get("text") or "",
            width=float(raw.get("width", 300)),
            height=float(raw.get("height", 300)),
            margin=float(raw.get("margin", raw.get("padding", 4))),
            border_radius=float(raw.get("borderRadius", 0)),
            ecc=str(qr_options.get("errorCorrectionLevel", raw.get("ecc", "H"))).upper(),
            background=Background(
                color=background.get("color", "#ffffff"),
                gradient=parse_gradient(background.get("gradient")),
                image=background.get("image"),
            ),
            images=[parse_image(item) for item in raw.get("images") or []],
            frame=parse_frame(raw.get("frame")),
            dots_options=parse_part(raw.get("dotsOptions"), "dotsOptions", diagnostics),
            corners_square_options=parse_part(raw.get("cornersSquareOptions"), "cornersSquareOptions", diagnostics),
            corners_dot_options=parse_part(raw.get("cornersDotOptions"), "cornersDotOptions", diagnostics),
            parse_diagnostics=diagnostics,
        )
        return options


# ---------------------------------------------------------------------------
# Field parsers
# ---------------------------------------------------------------------------

def parse_gradient(raw: dict | None) -> Gradient | None:
    if not raw:
        return None
    stops = tuple(
        ColorStop(offset=str(stop.get("offset", "0%")), color=stop.get("color", "#000000"))
        for stop in raw.get("colorStops") or []
    )
    return validate_gradient(Gradient(
        type=raw.get("type", "linear"),
        rotation=float(raw.get("rotation", 0) or 0),
        color_stops=stops,
    ))


def parse_image(raw: dict) -> ImageOverlay:
    if not raw.get("source"):
        raise ConfigError("Every image needs a 'source'")
    return ImageOverlay(
        source=raw["source"],
        width=float(raw.get("width", 0)),
        height=float(raw.get("height", 0)),
        x=_opt_float(raw.get("x")),
        y=_opt_float(raw.get("y")),
        exclude_dots=bool(raw.get("excludeDots", False)),
        opacity=float(raw.get("opacity", 1.0)),
        preserve_aspect_ratio=raw.get("preserveAspectRatio", "xMidYMid meet"),
    )


def parse_frame(raw: dict | None) -> Frame | None:
    if not raw:
        return None
    if not raw.get("source"):
        raise ConfigError("Frame needs a 'source'")
    inset = raw.get("inset")
    if inset and ("width" not in inset or "height" not in inset):
        raise ConfigError("Frame inset needs 'width' and 'height'")
    return Frame(
        source=raw["source"],
        width=float(raw.get("width", 0)),
        height=float(raw.get("height", 0)),
        inset=FrameInset(
            width=float(inset["width"]),
            height=float(inset["height"]),
            x=_opt_float(inset.get("x")),
            y=_opt_float(inset.get("y")),
        ) if inset else None,
    )


def _opt_float(value) -> float | None:
    return None if value is None else float(value)


def _strip_legacy_prefix(name: str) -> str:
    for prefix in _LEGACY_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix):]
    return name


def _figure(name: str) -> FigureShape | None:
    if name in FIGURE_ALIASES:
        return FIGURE_ALIASES[name]
    try:
        return FigureShape(name)
    except ValueError:
        return None


def _icon(name: str) -> IconShape | None:
    try:
        return IconShape(name)
    except ValueError:
        return None


def parse_shape(raw, part: str, diagnostics: Diagnostics,
                custom_path: str | None = None, custom_view_box: str | None = None) -> ShapeSpec:
    """Map a user shape value onto a ShapeSpec, falling back to a square figure.

    Accepted forms: ``"rounded"``, ``"custom-icon"``, or
    ``{"type": "figure"|"icon"|"custom-icon", "path": name, "customPath": ..., "customViewBox": ...}``.
    """
    kind_name = None
    if isinstance(raw, dict):
        kind_name = raw.get("type")
        name = raw.get("path") or ""
        custom_path = raw.get("customPath", custom_path)
        custom_view_box = raw.get("customViewBox", custom_view_box)
    else:
        name = raw or ""
    name = str(name).strip().lower()

    if kind_name == "custom-icon" or name == "custom-icon":
        if custom_path:
            return ShapeSpec(kind=ShapeKind.CUSTOM_ICON, custom_path=custom_path,
                             custom_view_box=custom_view_box or "0 0 24 24")
        diagnostics.report(SHAPE_FALLBACK, f"{part}: custom-icon without a path; using square",
                           part=part, requested="custom-icon")
        return ShapeSpec()

    if not name:
        return ShapeSpec()

    bare = _strip_legacy_prefix(name)
    figure = _figure(bare)
    icon = _icon(bare)
    if kind_name == "icon" and icon is not None:
        return ShapeSpec(kind=ShapeKind.ICON, icon=icon)
    if figure is not None:
        return ShapeSpec(kind=ShapeKind.FIGURE, figure=figure)
    if icon is not None:
        return ShapeSpec(kind=ShapeKind.ICON, icon=icon)

    diagnostics.report(SHAPE_FALLBACK, f"{part}: unknown shape {name!r}; using square",
                       part=part, requested=name)
    return ShapeSpec()


def parse_part(raw: dict | None, part: str, diagnostics: Diagnostics) -> PartStyle:
    if not raw:
        return PartStyle()
    shape_raw = raw.get("shape", raw.get("type"))
    shape = parse_shape(shape_raw, part, diagnostics,
                        custom_path=raw.get("customIconPath"),
                        custom_view_box=raw.get("customIconViewBox"))

    scale = float(raw.get("scale", 1.0))
    if scale <= 0:
        raise ConfigError(f"{part}: scale must be greater than 0, got {scale}")
    if scale > 1:
        diagnostics.report(SCALE_CLAMPED, f"{part}: scale {scale} clamped to 1", part=part, requested=scale)
        scale = 1.0

    return PartStyle(
        shape=shape,
        color=raw.get("color") or "#000000",
        gradient=parse_gradient(raw.get("gradient")),
        scale=scale,
        is_single=bool(raw.get("isSingle", False)),
    )
