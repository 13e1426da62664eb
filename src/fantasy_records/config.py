"""Static record-book configuration constants."""

POSITION_MAP: dict[str, tuple[str, ...]] = {
    "QB": ("QB",),
    "RB": ("RB",),
    "WR": ("WR",),
    "TE": ("TE",),
    "FLEX": ("RB", "WR", "TE"),
    "K": ("K",),
    "DEF": ("DEF",),
    "REC_FLEX": ("RB", "WR"),
    "SUPER_FLEX": ("RB", "WR", "TE", "QB"),
    "IDP_FLEX": ("LB", "DL", "DB", "DE", "CB"),
    "LB": ("LB",),
    "DL": ("DL",),
    "DB": ("DB",),
    "DE": ("DE",),
    "CB": ("CB",),
}

HIGH_SCORER_THRESHOLDS: dict[str, float] = {"dynasty": 200.0, "redraft": 190.0}
BENCHWARMER_THRESHOLDS: dict[str, float] = {"dynasty": 90.0, "redraft": 65.0}
PERFECT_LINEUP_THRESHOLD = 0.999
IQ_TIE_EPSILON = 0.0001

SCOPE_IN_SEASON = "in-season"
SCOPE_PLAYOFFS = "playoffs"
SCOPE_TOILET_BOWL = "toilet-bowl"
SCOPE_POSTSEASON = "postseason"
RECORD_SCOPES = (SCOPE_IN_SEASON, SCOPE_PLAYOFFS, SCOPE_TOILET_BOWL, SCOPE_POSTSEASON)

MEDIAN_DEFAULT = "default"
MEDIAN_INCLUDE = "include-medians"
MEDIAN_ONLY = "only-medians"
MEDIAN_NONE = "no-medians"
MEDIAN_METHODS = (MEDIAN_NONE, MEDIAN_ONLY, MEDIAN_INCLUDE, MEDIAN_DEFAULT)

CATEGORY_OVERALL = "overall"
CATEGORY_MANAGER = "manager"

COLUMN_TYPES = ("string", "number", "currency", "percentage")

# Single-week leaderboards only ever show their top rows.
WEEKLY_MAX_ENTRIES = 100

MEDIAN_OPPONENT = "MEDIAN"
