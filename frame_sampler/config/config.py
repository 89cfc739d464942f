# Capture settings
DEFAULT_JPEG_QUALITY = 0.9
IMAGE_EXTENSION = "jpeg"
IMAGE_MIME_TYPE = "image/jpeg"

# Planner settings
TIMESTAMP_PRECISION = 6

# File naming
FRAME_INDEX_WIDTH = 3
TIMESTAMP_MS_WIDTH = 7

# Timeouts (seconds, None waits forever)
DEFAULT_SETTLE_TIMEOUT = 10.0
DEFAULT_RESTORE_TIMEOUT = 5.0

# Usability guards for interactive requests
MIN_RANGE = 1.0
MAX_RANGE = 10.0
MIN_STEP = 0.1
MAX_STEP = 0.5

# Video formats
SUPPORTED_VIDEO_FORMATS = ['.mp4', '.avi', '.mov', '.mkv', '.webm', '.m4v']

# Default settings
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
