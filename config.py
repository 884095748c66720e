"""
Configuration for Court Calibration.
"""

# ── Badminton court (metres) ──────────────────────────────────────────────────
# Origin at the near-left corner, x across the width, y along the length.
BADMINTON_LENGTH              = 13.40
BADMINTON_WIDTH               = 6.10     # doubles
BADMINTON_SINGLES_WIDTH       = 5.18
BADMINTON_SHORT_SERVICE_DIST  = 1.98     # net → short service line
BADMINTON_LONG_SERVICE_DIST   = 0.76     # back boundary → long service line (doubles)
BADMINTON_NET_HEIGHT          = 1.55

# ── Tennis court (metres) ─────────────────────────────────────────────────────
TENNIS_LENGTH                 = 23.77
TENNIS_WIDTH                  = 10.97    # doubles
TENNIS_SINGLES_WIDTH          = 8.23
TENNIS_SERVICE_DIST           = 6.40     # net → service line
TENNIS_NET_HEIGHT             = 0.914

# ── Correspondences ───────────────────────────────────────────────────────────
MIN_CALIBRATION_LINES  = 3
FRAME_TOLERANCE        = 0.0      # normalised overshoot before an endpoint is flagged

# ── Solver ────────────────────────────────────────────────────────────────────
ALIGNED_LINE_WEIGHT    = 1.2      # lines parallel to the camera's court edge
DEFAULT_LINE_WEIGHT    = 1.0
MAX_CONDITION_NUMBER   = 1e5      # σ_max / σ_8 of the normalised DLT system
MIN_POINT_SPREAD       = 0.05     # σ_min / σ_max of the centred drawn points, native px
MIN_HOMOGRAPHY_SCALE   = 1e-12    # |H[2][2]| below this cannot be normalised
REFINE_HOMOGRAPHY      = False
REFINE_MAX_ITER        = 2000

# ── Orientation check ─────────────────────────────────────────────────────────
# Angle of a drawn line above the horizontal, folded into [0°, 90°].
HORIZONTAL_MAX_ANGLE_DEG   = 35.0
VERTICAL_MIN_ANGLE_DEG     = 50.0   # i.e. within 40° of vertical
WRONG_ORIENTATION_PENALTY  = 3.0
DIAGONAL_PENALTY           = 2.0
ORIENTATION_PENALTY_WEIGHT = 2.0    # blend of penalty into the pixel error

# ── Quality table ─────────────────────────────────────────────────────────────
# (max error px, label, accuracy %) – first row whose bound is not reached wins
QUALITY_THRESHOLDS = [
    (2.0,  "Excellent", 95),
    (5.0,  "Good",      85),
    (10.0, "Fair",      75),
    (15.0, "Acceptable", 65),
]
POOR_LABEL    = "Poor"
POOR_ACCURACY = 50

# Threshold multipliers: larger courts and side-on views tolerate more error
SPORT_THRESHOLD_SCALE = {"badminton": 1.0, "tennis": 1.25}
EDGE_THRESHOLD_SCALE  = {"top": 1.0, "bottom": 1.0, "left": 1.1, "right": 1.1}

LINE_SCORE_FALLOFF_PX  = 50.0     # endpoint error at which a line scores 0
HIGH_ERROR_PX          = 10.0
UNSTABLE_CONDITION     = 1e4
POOR_LINE_SCORE        = 0.7

# ── Pose landmarks (MediaPipe indices) ────────────────────────────────────────
FOOT_LANDMARKS         = (27, 28, 31, 32)
HIP_LANDMARKS          = (23, 24)
UPPER_BODY_LAST_INDEX  = 10
UPPER_BODY_HEIGHT      = 1.5
HIP_HEIGHT             = 0.9
OTHER_LANDMARK_HEIGHT  = 0.7
MIN_LANDMARK_VISIBILITY = 0.5

# ── Speed ─────────────────────────────────────────────────────────────────────
SPEED_SMOOTHING_WINDOW = 5        # samples in the moving average
KMH_PER_MS             = 3.6
MPH_PER_MS             = 2.24

# ── Heatmap ───────────────────────────────────────────────────────────────────
HEATMAP_CELLS_PER_METER = 4
HEATMAP_ZONE_COLUMNS    = ("left", "center", "right")
HEATMAP_ZONE_ROWS       = (("front", 0.50), ("mid", 0.70), ("back", 1.00))
