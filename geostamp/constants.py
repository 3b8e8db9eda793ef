SUPPORTED_FORMATS = {"jpeg", "png", "webp"}
# Pillow reports some camera JPEGs as multi-picture objects
FORMAT_ALIASES = {"jpg": "jpeg", "mpo": "jpeg"}
SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}

FORMAT_EXTENSIONS = {
    "jpeg": "jpg",
    "png": "png",
    "webp": "webp",
}

DEFAULT_TIMEZONE = "Asia/Jakarta"
DEFAULT_STATUS_LABEL = "Verified"
DEFAULT_FALLBACK_ADDRESS = "location unavailable"
DEFAULT_MAX_INPUT_BYTES = 10 * 1024 * 1024

ELLIPSIS = "…"
EMPTY_LINE = "-"
AVG_CHAR_WIDTH = 0.58

MONTH_ABBREVIATIONS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

ADDRESS_ENV_VAR = "GEOSTAMP_ADDRESS"
