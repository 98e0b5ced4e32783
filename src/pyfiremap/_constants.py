"""Internal constants shared across the library."""

USER_AGENT = "pyfiremap"

PREDICTIONS_ENDPOINT = "/predictions"
PREDICT_ENDPOINT = "/predict"

# ------------------------------------------------------------------
# Map defaults
# ------------------------------------------------------------------

DEFAULT_CENTER: tuple[float, float] = (37.782, -122.447)
DEFAULT_ZOOM = 6
DEFAULT_MAP_TYPE = "roadmap"

GOOGLE_TILES_URL = "https://mt1.google.com/vt/lyrs={lyrs}&x={{x}}&y={{y}}&z={{z}}&key={key}"
GOOGLE_MAP_TYPES: dict[str, str] = {"roadmap": "m", "satellite": "s", "hybrid": "y", "terrain": "p"}
GOOGLE_TILES_ATTRIBUTION = "Map data &copy; Google"
FALLBACK_TILES = "OpenStreetMap"

# ------------------------------------------------------------------
# Heat overlay
# ------------------------------------------------------------------

HEAT_RADIUS = 40
HEAT_OPACITY = 0.7
HEAT_DISSIPATING = True

# ------------------------------------------------------------------
# Sync loop
# ------------------------------------------------------------------

DEFAULT_REFRESH_INTERVAL = 10.0

# User-facing alert texts
MSG_EMPTY_ADDRESS = "Please enter an address"
MSG_PREDICT_FAILED = "Failed to predict fire risk."
