# Step naming conventions used by background/attach actions
BACKGROUND_STEP_SUFFIX = "(background)"
ATTACH_STEP_PATTERN = r'^Attach "(.*)" and wait for completion$'
SETUP_JOB_STEP_NAME = "Set up job"

# Sidecar markers written by background steps
DEFAULT_MARKER_DIR = "/tmp"
STARTED_AT_MARKER_SUFFIX = ".started_at"
COMPLETED_AT_MARKER_SUFFIX = ".completed_at"

UNKNOWN_CONCLUSION = "unknown"
SUCCESS_CONCLUSION = "success"
FAILURE_CONCLUSION = "failure"
SKIPPED_CONCLUSION = "skipped"

# Prometheus
METRIC_PREFIX = "github_actions_"
PUSH_GATEWAY_JOB_SEGMENT = "/job/"
PUSH_GATEWAY_TIMEOUT = 10
EXPOSITION_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# GitHub REST API
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"
JOBS_PAGE_SIZE = 100
JOB_LOOKUP_ATTEMPTS = 10
JOB_LOOKUP_BACKOFF = 1.0
API_TIMEOUT = 30

STEP_TRACE_HEADING = "### Step Trace"
