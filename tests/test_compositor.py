"""Tests for per-layer mask compositing."""

from qrsvg.compositor import LayerBucket, PaintedBox, layer_markup, mask_def
from qrsvg.gradients import Fill
from qrsvg.zones import Rect

EXTENT = Rect(0, 0, 29, 29)


class TestLayerMarkup:
    def test_empty_bucket_emits_nothing(self):
        assert layer_markup(LayerBucket("dots"), [PaintedBox(EXTENT, Fill("#000"))], EXTENT) == ""

    def test_mask_is_white_on_black(self):
        bucket = LayerBucket("dots")
        bucket.add_path("M 4 4 h 1 v 1 h -1 Z")
        mask = mask_def(bucket, EXTENT)
        assert mask.startswith('<mask id="mask-dots" maskUnits="userSpaceOnUse"')
        assert mask.index('fill="#000000"') < mask.index('fill="#ffffff"')
        assert '<path d="M 4 4 h 1 v 1 h -1 Z" fill="#ffffff"/>' in mask

    def test_paths_are_merged_into_one_element(self):
        bucket = LayerBucket("dots")
        bucket.add_path("M 4 4 h 1 v 1 h -1 Z")
        bucket.add_path("M 6 4 h 1 v 1 h -1 Z")
        assert mask_def(bucket, EXTENT).count("<path") == 1

    def test_uses_wrapped_in_white_group(self):
        bucket = LayerBucket("corners-dot")
        bucket.add_use('<use href="#corners-dot-icon" x="6" y="6" width="1" height="1"/>')
        mask = mask_def(bucket, EXTENT)
        assert '<g fill="#ffffff" color="#ffffff"><use href="#corners-dot-icon"' in mask
        assert "<path" not in mask

    def test_one_rect_per_painted_box(self):
        bucket = LayerBucket("corners-square")
        bucket.add_path("M 4 4 H 11 V 11 H 4 Z")
        painted = [
            PaintedBox(Rect(4, 4, 7, 7), Fill(gradient_id="corners-square-gradient-0")),
            PaintedBox(Rect(18, 4, 7, 7), Fill(gradient_id="corners-square-gradient-1")),
            PaintedBox(Rect(4, 18, 7, 7), Fill(color="#ff0000")),
        ]
        markup = layer_markup(bucket, painted, EXTENT)
        assert '<g class="layer-corners-square" mask="url(#mask-corners-square)">' in markup
        assert markup.count("<rect") == 4  # mask background + three paints
        assert "fill=\"url('#corners-square-gradient-1')\"" in markup
        assert 'fill="#ff0000"' in markup

    def test_fill_colour_escaped_in_attribute(self):
        bucket = LayerBucket("dots")
        bucket.add_path("M 4 4 h 1 v 1 h -1 Z")
        markup = layer_markup(bucket, [PaintedBox(Rect(0, 0, 29, 29), Fill(color='#000" onload="x'))], EXTENT)
        assert 'fill="#000&quot; onload=&quot;x"' in markup
        assert ' onload="' not in markup
