"""Process exit codes shared by every subcommand."""

OK = 0
VALIDATION_ERR = 1  # bad config or malformed delta payload
USER_ERR = 2  # usage errors, unreadable input files
