API_GROUP = "batch.divinerapier.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

KIND_SCHEDULED_CRONJOB = "ScheduledCronJob"
PLURAL_SCHEDULED_CRONJOB = "scheduledcronjobs"

# Reporting identity for emitted events
REPORTING_COMPONENT = "scheduled-cronjob"
REPORTING_INSTANCE = "scheduled-cronjob-controller"
EVENT_ACTION = "Reconciling"

# Event types
EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

# Deletion propagation for secondary objects
PROPAGATION_FOREGROUND = "Foreground"

# Environment variable names
ENV_PREFIX = "SCHEDULED_CRONJOB_"
ENV_REQUEST_TIMEOUT = f"{ENV_PREFIX}REQUEST_TIMEOUT"
ENV_STATUS_CONFLICT_RETRIES = f"{ENV_PREFIX}STATUS_CONFLICT_RETRIES"
ENV_RETRY_DELAY = f"{ENV_PREFIX}RETRY_DELAY"
ENV_METRICS_PORT = f"{ENV_PREFIX}METRICS_PORT"
ENV_REPORTING_INSTANCE = f"{ENV_PREFIX}REPORTING_INSTANCE"
ENV_MAX_WORKERS = f"{ENV_PREFIX}MAX_WORKERS"
