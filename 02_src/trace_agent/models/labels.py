"""Well-known label keys."""


class TraceLabels:
    """Label keys recognized by the trace UI."""

    AGENT_DATA = "/agent"
    GCE_HOSTNAME = "g.co/gce/hostname"
    GCE_INSTANCE_ID = "g.co/gce/instanceid"
    GAE_MODULE_NAME = "g.co/gae/app/module"
    GAE_MODULE_VERSION = "g.co/gae/app/module_version"
    GAE_VERSION = "g.co/gae/app/version"
