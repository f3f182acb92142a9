TEMPLATE_NEW_PAIR = "new-pair"
TEMPLATE_APR_PROMOTION = "apr-promotion"
TEMPLATE_LISTING = "listing"
TEMPLATE_ANNOUNCEMENT = "announcement"
TEMPLATE_MILESTONE = "milestone"
TEMPLATE_SEASON_ANNOUNCEMENT = "season-announcement"

TEMPLATE_IDS = (
    TEMPLATE_NEW_PAIR,
    TEMPLATE_APR_PROMOTION,
    TEMPLATE_LISTING,
    TEMPLATE_ANNOUNCEMENT,
    TEMPLATE_MILESTONE,
    TEMPLATE_SEASON_ANNOUNCEMENT,
)

# width, height in pixels
IMAGE_SIZES: dict[str, tuple[int, int]] = {
    "1200x630": (1200, 630),  # Twitter / LinkedIn
    "1080x1080": (1080, 1080),  # Instagram square
    "1200x1200": (1200, 1200),  # high-res square
    "1920x1080": (1920, 1080),  # HD banner
}
DEFAULT_SIZE = "1080x1080"

GRID_STYLES = ("none", "perspective", "isometric", "horizontal", "radial", "hex")
GRID_STYLE_LABELS = {
    "none": "None",
    "perspective": "Perspective",
    "isometric": "Isometric",
    "horizontal": "Horizontal",
    "radial": "Radial",
    "hex": "Hexagonal",
}
DEFAULT_GRID_STYLE = "perspective"
DEFAULT_GRID_OPACITY = 30
DEFAULT_GRID_DENSITY = 2

DEFAULT_ACCENT_COLOR = "#0066FF"
MAX_TOKENS = 2

BRAND_TITLE = "DIGIKO ECOSYSTEM"
BRAND_DESCRIPTION = "Decentralised services on Klever Blockchain"
BRAND_WEBSITE = "digiko.io"
BRAND_LOGO_URL = "/tokens/dgko.png"
BRAND_COLORS = (
    ("#00C896", "KuCoin Green"),
    ("#F0B90B", "Binance Yellow"),
    ("#FF6B6B", "Coral Red"),
)

TOKEN_LOGO_TEMPLATE = "/tokens/{symbol}.png"

DEFAULT_DISCLAIMER = (
    "This is for informational purposes only and does not constitute financial advice. "
    "Investments involve risk. Please do your own research before investing."
)

CARD_FILE_EXTENSIONS = {".yaml", ".yml", ".json"}

# 预览窗口的 Qt 应用名
APP_ID = "socialcard"
