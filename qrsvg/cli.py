"""qrsvg CLI — render styled QR codes, inspect bounds and frame insets, verify scans."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from PIL import Image

from qrsvg.errors import QRSVGError
from qrsvg.logging import audit, get_logger, setup_logging

log = get_logger("cli")


def _load_style(path: str | None) -> dict:
    if path is None:
        return {}
    with open(path, encoding="utf-8") as f:
        style = json.load(f)
    if not isinstance(style, dict):
        raise QRSVGError(f"Style file {path} must contain a JSON object")
    return style


def _output_format(args) -> str:
    if args.format:
        return args.format
    suffix = Path(args.output).suffix.lstrip(".").lower()
    return suffix or "svg"


def cmd_render(args):
    """Render a QR code to SVG or a raster format."""
    from qrsvg.export import export_svg
    from qrsvg.renderer import generate_sync

    style = _load_style(args.config)
    style["data"] = args.text
    if args.ecc:
        style.setdefault("qrOptions", {})["errorCorrectionLevel"] = args.ecc
    if args.margin is not None:
        style["margin"] = args.margin
    if args.size is not None:
        style["width"] = style["height"] = args.size

    result = generate_sync(style)
    fmt = _output_format(args)
    data = export_svg(result.svg, fmt)

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    print(f"Rendered: {output} ({fmt}, {len(data)} bytes, {result.matrix_size}x{result.matrix_size} modules)")
    if result.frame_inset is not None:
        r = result.frame_inset
        print(f"  Frame inset: x={r.x} y={r.y} {r.width}x{r.height}")
    for d in result.diagnostics:
        print(f"  warning [{d.code}]: {d.message}")

    if args.verify:
        from qrsvg.verify import verify_svg

        results = verify_svg(result.svg, expected_data=args.text)
        for r in results:
            status = "PASS" if r.success else "FAIL"
            print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}")
        if not any(r.success for r in results):
            sys.exit(1)


def cmd_bounds(args):
    """Print matrix size, eye zones and placement bounds."""
    from qrsvg.renderer import get_qr_bounds

    bounds = get_qr_bounds(args.text, args.ecc)
    print(f"Matrix: {bounds.matrix_size}x{bounds.matrix_size} modules")
    for i, eye in enumerate(bounds.eye_zones):
        print(f"  Eye {i}: x={eye.x} y={eye.y} {eye.width}x{eye.height}")
    if args.image_size is not None:
        limit = bounds.max_position(args.image_size, args.image_size)
        print(f"  Max position for {args.image_size}x{args.image_size} image: "
              f"x<={limit.max_x:g} y<={limit.max_y:g}")


def cmd_inset(args):
    """Detect the transparent hole of a frame image."""
    from qrsvg.frame_inset import detect_frame_inset, fallback_inset

    inset = asyncio.run(detect_frame_inset(args.frame, args.width, args.height))
    if inset is None:
        fb = fallback_inset(args.width, args.height)
        print(f"No empty region detected; fallback: x={fb.x} y={fb.y} {fb.width}x{fb.height}")
        sys.exit(1)
    print(f"Inset: x={inset.x} y={inset.y} {inset.width}x{inset.height}")


def cmd_verify(args):
    """Verify a rendered QR code (SVG or raster)."""
    from qrsvg.verify import verify, verify_svg

    if args.image.lower().endswith(".svg"):
        results = verify_svg(Path(args.image).read_text(encoding="utf-8"), expected_data=args.expected)
    else:
        results = verify(Image.open(args.image), expected_data=args.expected)

    all_pass = True
    for r in results:
        status = "PASS" if r.success else "FAIL"
        if not r.success:
            all_pass = False
        print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}")

    sys.exit(0 if all_pass else 1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrsvg", description="qrsvg: styled QR code SVG renderer")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a styled QR code")
    p_render.add_argument("text", help="Text or URL to encode")
    p_render.add_argument("-o", "--output", default="output/qr.svg", help="Output file path")
    p_render.add_argument("-c", "--config", default=None, help="JSON style file (camelCase options)")
    p_render.add_argument("-f", "--format", default=None, choices=["svg", "png", "jpeg", "jpg", "webp"],
                          help="Output format (default: from the output suffix)")
    p_render.add_argument("-e", "--ecc", default=None, choices=["L", "M", "Q", "H"], help="Error correction level")
    p_render.add_argument("--margin", type=float, default=None, help="Quiet zone in modules")
    p_render.add_argument("--size", type=float, default=None, help="Output width and height in pixels")
    p_render.add_argument("--verify", action="store_true", help="Rasterize and scan the result")

    # --- bounds ---
    p_bounds = subparsers.add_parser("bounds", help="Show matrix size and eye zones")
    p_bounds.add_argument("text", help="Text or URL to encode")
    p_bounds.add_argument("-e", "--ecc", default="H", choices=["L", "M", "Q", "H"])
    p_bounds.add_argument("--image-size", type=float, default=None, help="Overlay size in modules")

    # --- inset ---
    p_inset = subparsers.add_parser("inset", help="Detect the hole in a frame image")
    p_inset.add_argument("frame", help="Frame image path or data: URI")
    p_inset.add_argument("--width", type=float, required=True, help="Frame display width")
    p_inset.add_argument("--height", type=float, required=True, help="Frame display height")

    # --- verify ---
    p_ver = subparsers.add_parser("verify", help="Verify a QR code image or SVG")
    p_ver.add_argument("image", help="Path to an SVG or raster image")
    p_ver.add_argument("--expected", default=None, help="Expected decoded data (fails if mismatch)")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "render": cmd_render,
        "bounds": cmd_bounds,
        "inset": cmd_inset,
        "verify": cmd_verify,
    }
    try:
        commands[args.command](args)
    except QRSVGError as e:
        log.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
