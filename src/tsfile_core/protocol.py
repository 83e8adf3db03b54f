"""CODAR time-series (TS) protocol constants.

Single source of truth for block tags, header layout and sample encodings.
Keep this file stable. tsdump and tsgen must remain synchronized.
"""

# Container tags (bracket markers, no payload of their own)
TAG_AQLV = b"AQLV"  # Outer record
TAG_HEAD = b"HEAD"  # Header region
TAG_BODY = b"BODY"  # Body region
TAG_END = b"END "  # Closes the record

# Header region blocks
TAG_SIGN = b"sign"  # File signature
TAG_MCDA = b"mcda"  # Mac timestamp of first sweep
TAG_CNST = b"cnst"  # Channel/sweep/sample counts
TAG_SWEP = b"swep"  # Sweep parameters
TAG_FBIN = b"fbin"  # Sample binary format

# Body region blocks
TAG_GTAG = b"gtag"
TAG_ATAG = b"atag"
TAG_INDX = b"indx"  # Sweep index
TAG_SCAL = b"scal"  # I/Q scale factors
TAG_ALVL = b"alvl"  # Scaled I/Q sample array

CONTAINER_TAGS = frozenset({TAG_AQLV, TAG_HEAD, TAG_BODY, TAG_END})

# Header: [Tag(4) | Length(4)] = 8 bytes, big-endian on disk
HEADER_FMT = ">4sI"
HEADER_LEN = 8
TAG_LEN = 4

# Fixed-width text fields in the signature block
SIZE_DESCRIPTION = 64
SIZE_OWNERNAME = 64
SIZE_COMMENT = 64

# Sample binary format and type selectors (fbin block)
BIN_FORMAT_CVIQ = b"cviq"
BIN_TYPE_FLT4 = b"flt4"
BIN_TYPE_FIX2 = b"fix2"
BIN_TYPE_FIX3 = b"fix3"
BIN_TYPE_FIX4 = b"fix4"

# Full-scale divisor per selector
FULL_SCALE = {
    BIN_TYPE_FLT4: 1.0,
    BIN_TYPE_FIX2: float(0x7FFF),
    BIN_TYPE_FIX3: float(0x7FFFFF),
    BIN_TYPE_FIX4: float(0x7FFFFFFF),
}

# Stored sample pair: (I int16, Q int16)
SAMPLE_PAIR_LEN = 4
SAMPLE_MIN = -0x8000
SAMPLE_MAX = 0x7FFF

# Seconds between 1904-01-01 (Mac epoch) and 1970-01-01
MAC_EPOCH_OFFSET = 2082844800

# Fractional digits for floating values in text
FLOAT_DIGITS = 20
