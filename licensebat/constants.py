"""Constants for licensebat."""

# Exit codes
EXIT_SUCCESS = 0  # All dependencies compliant or ignored
EXIT_ISSUES = 1  # Non-compliant dependencies found
EXIT_ERROR = 2  # Check failed due to error

# Identifying header sent with every outbound request
USER_AGENT = "licensebat (+https://github.com/licensebat/licensebat)"

# Default number of retrievals in flight at the same time
DEFAULT_RETRIEVER_BUFFER_SIZE = 100

# Minimum corpus score to trust a license text analysis
LICENSE_MATCH_THRESHOLD = 0.8

# License key used for dependencies without any declared license
NO_LICENSE = "NO-LICENSE"

# Error messages shared by the retrievers and the validator
NO_LICENSE_ERROR = "No License"
NOT_COMPLIANT_ERROR = "Not compliant"
LOW_CONFIDENCE_ERROR = "Low confidence license match"

# Shown in every report
LEGAL_DISCLAIMER = (
    "This report is generated automatically from registry metadata and license "
    "text analysis. It is informational only and is not legal advice."
)
