"""Online review platform: submission lifecycle services.

Modules:
    - uploads: Submission, final fix and test case intake, phase gating,
      role authorisation, retirement of superseded submissions and
      submission status changes
    - infrastructure: Async database engine and session helpers
    - shared: Structured logging and datetime utilities
"""

__version__ = "1.0.0"
