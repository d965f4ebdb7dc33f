"""Internal constants shared across the library."""

USER_AGENT = "pyvin/1.0"

#: Decoder flavors and the base URL each one uses by default.
DECODER_NHTSA = "nhtsa"
DECODER_JDPOWER = "jdpower"
DEFAULT_BASE_URLS: dict[str, str] = {
    DECODER_NHTSA: "https://vpic.nhtsa.dot.gov",
    DECODER_JDPOWER: "https://www.jdpowerwebservices.com",
}

#: Per-request budget for a decoder call, in seconds.
DEFAULT_TIMEOUT: float = 12.0

# JD Power business status meaning "the VIN decoded to exactly one model".
JDPOWER_AFFIRMATIVE_STATUS = "ExactMatch"
