# Engine call defaults
REFERENCE_FRAME = "J2000"
ABERRATION_CORRECTION = "NONE"

# SPK Type 9 output
INTERPOLATION_DEGREE = 7
INTERNAL_FILE_NAME = "Propagated"
COMMENT_AREA_CHARS = 256
SEGMENT_LABEL = "Position of {target} relative to {observer}"

# Error policy (process-wide in the engine)
ERROR_ACTION = "RETURN"
ERROR_REPORT = "SHORT"
POLICY_BUFFER = 20
DIAGNOSTIC_BUFFER = 50  # 49 chars + terminator
DIAGNOSTIC_LENGTH = DIAGNOSTIC_BUFFER - 1

# Kernel pool constants
GM_ITEM = "GM"
GM_DIMENSION = 1

# Units
KM3_TO_M3 = 1e9
M_PER_KM = 1000.0

# Time
J2000_JD = 2451545.0
SECONDS_PER_DAY = 86400.0
SECONDS_PER_HOUR = 3600.0
