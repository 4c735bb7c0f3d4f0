"""Pure record mappers and summaries, one module per resource type."""

from .domains import (
    MASKED,
    mask_password,
    process_domain,
    process_ip_allowlist,
    process_smtp_credential,
    summarize_domains,
)
from .events import process_event, summarize_events
from .lists import process_list, process_list_member, summarize_lists
from .stats import generate_insights, process_stats, summarize_stats
from .suppressions import (
    bounce_description,
    bounce_severity,
    classify_bounce_type,
    process_bounce,
    process_complaint,
    process_unsubscribe,
    process_whitelist,
    summarize_suppressions,
)
from .templates import (
    process_template,
    process_template_details,
    process_template_version,
    summarize_templates,
)

__all__ = [
    "process_event",
    "summarize_events",
    "MASKED",
    "mask_password",
    "process_domain",
    "process_smtp_credential",
    "process_ip_allowlist",
    "summarize_domains",
    "process_bounce",
    "process_complaint",
    "process_unsubscribe",
    "process_whitelist",
    "classify_bounce_type",
    "bounce_severity",
    "bounce_description",
    "summarize_suppressions",
    "process_list",
    "process_list_member",
    "summarize_lists",
    "process_template",
    "process_template_details",
    "process_template_version",
    "summarize_templates",
    "process_stats",
    "generate_insights",
    "summarize_stats",
]
