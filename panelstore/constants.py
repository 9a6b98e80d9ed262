UNIT_LF = "LF"
UNIT_SQ = "SQ"
UNIT_EA = "EA"

UNITS = {
    UNIT_LF: "Linear Feet",
    UNIT_SQ: "Square Feet",
    UNIT_EA: "Quantity",
}

# index -> label, in sixteenths of an inch
FRACTION_LABELS = {
    0: "—",
    1: "1/16",
    2: "1/8",
    3: "3/16",
    4: "1/4",
    5: "5/16",
    6: "3/8",
    7: "7/16",
    8: "1/2",
    9: "9/16",
    10: "5/8",
    11: "11/16",
    12: "3/4",
    13: "13/16",
    14: "7/8",
    15: "15/16",
}

MAX_INCHES = 11

# open cut-list sessions kept per process; the oldest is dropped first
MAX_ORDER_SESSIONS = 200
