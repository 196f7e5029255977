"""Constants for Smart Background Removal MCP Server."""

# Default options for smart background removal
# Color tolerance for background matching (0-100 scale)
DEFAULT_TOLERANCE = 25
MIN_TOLERANCE = 0
MAX_TOLERANCE = 100

# How many pixels deep to sample from each edge
DEFAULT_SAMPLE_DEPTH = 15

# Images larger than this (on their longest side) are processed downscaled
DEFAULT_MAX_DIMENSION = 1500

# Legacy anti-alias smoothing, largely superseded by artifact cleanup
DEFAULT_EDGE_SMOOTHING = False

# Tolerance is multiplied by this to get a color distance threshold
TOLERANCE_SCALE = 3

# Edge color sampling and grouping
MAX_EDGE_SAMPLES = 10
COLOR_GROUP_THRESHOLD = 40

# Adaptive background classification, keyed on average border brightness
DARK_BRIGHTNESS_THRESHOLD = 80
LIGHT_BRIGHTNESS_THRESHOLD = 200
DARK_MIN_TOLERANCE = 55
LIGHT_MIN_TOLERANCE = 35
DARK_BACKGROUND_GROUPS = 8
LIGHT_BACKGROUND_GROUPS = 5
DEFAULT_BACKGROUND_GROUPS = 3

# Artifact cleanup
MAJORITY_NEIGHBORS = 5
HALO_BRIGHTNESS_THRESHOLD = 50
HALO_MAX_PASSES = 3
EDGE_SMOOTHING_MIN_ALPHA = 50
EDGE_SMOOTHING_STRENGTH = 0.3

# Suitability check
SUITABILITY_SAMPLE_DEPTH = 5
MIN_DOMINANT_SHARE = 0.3

# Method names reported by the removal pipeline
METHOD_SMART = "smart"
METHOD_UNCHANGED = "unchanged"

# Output file naming
OUTPUT_SUFFIX = "_nobg"
OUTPUT_FORMAT = "PNG"
PNG_COMPRESS_LEVEL = 6
