"""
Application constants and configuration.

All constants controlling crop-editor behaviour, output rendering, text
styling, and file handling live here.  Font sizes and the text offset are
expressed for the full ``OUTPUT_SIZE`` canvas; smaller renders scale them.
"""

# =============================================================================
# APP IDENTITY
# =============================================================================
APP_NAME = "meme-crop-tool"

# =============================================================================
# CROP EDITOR
# =============================================================================
# Minimum crop side (display pixels)
MIN_CROP_SIZE = 50

# Initial crop side as a fraction of the shorter rendered dimension
INITIAL_CROP_FRACTION = 0.8

# Radius of the round resize handle (display pixels)
HANDLE_SIZE = 8

# Keyboard nudge amounts (display pixels)
NUDGE_SMALL = 1
NUDGE_LARGE = 10

# =============================================================================
# OUTPUT RENDERING
# =============================================================================
# Side of the square output raster (pixels)
OUTPUT_SIZE = 512

# Floating preview (shown on narrow windows while cropping)
FLOATING_PREVIEW_SIZE = 176
FLOATING_PREVIEW_HIDE_MS = 2500
NARROW_VIEWPORT_WIDTH = 1024

BACKGROUND_COLOR = "#2d3748"
FLOATING_BACKGROUND_COLOR = "#1a202c"
PLACEHOLDER_COLOR = "#a0aec0"
ERROR_COLOR = "#f56565"
PLACEHOLDER_FONT_SIZE = 20
PLACEHOLDER_TEXT = "Your meme will appear here"
ERROR_TEXT = "Error loading image"

# =============================================================================
# TEXT STYLE
# =============================================================================
DEFAULT_TEXT = "你好呀"

# label -> pixel size, in combo-box order
FONT_SIZE_OPTIONS = [("Small", 42), ("Medium", 51), ("Large", 64)]
FONT_SIZES = tuple(size for _, size in FONT_SIZE_OPTIONS)
FONT_SIZE_DEFAULT = 51

TEXT_OFFSET_MIN = 10
TEXT_OFFSET_MAX = 100
TEXT_OFFSET_DEFAULT = 30

TEXT_FILL_COLOR = "white"
TEXT_STROKE_COLOR = "black"

# Stroke width = font size / STROKE_DIVISOR
STROKE_DIVISOR = 15
LINE_HEIGHT_FACTOR = 1.2
MAX_TEXT_WIDTH_FRACTION = 0.9

# Bold display fonts, tried in order.  Names are resolved by Pillow against
# the system font directories.  The first one with a glyph for every
# character of the text wins, so Latin captions keep Impact and CJK captions
# move on to the CJK-capable fonts.
FONT_CANDIDATES = [
    "impact.ttf",
    "Impact.ttf",
    "msyhbd.ttc",                 # Microsoft YaHei Bold
    "NotoSansCJK-Bold.ttc",
    "/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc",
    "/usr/share/fonts/noto-cjk/NotoSansCJK-Bold.ttc",
    "PingFang.ttc",
    "/System/Library/Fonts/PingFang.ttc",
    "/System/Library/Fonts/STHeiti Medium.ttc",
    "wqy-zenhei.ttc",
    "/usr/share/fonts/truetype/wqy/wqy-zenhei.ttc",
    "DroidSansFallbackFull.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
]

# =============================================================================
# FILES
# =============================================================================
EXPORT_FILENAME = "meme.png"

# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 9

# Supported upload extensions
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".tif", ".webp", ".psd"}
