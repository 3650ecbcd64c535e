from prometheus_client import Counter, Gauge, Histogram


# Transition Metrics
qa_transitions_total = Counter(
    "product_qa_transitions_total", "QA transitions attempted", ["operation", "outcome"]
)
qa_transition_duration = Histogram(
    "product_qa_transition_seconds", "QA transition round trip time", ["operation"]
)

# Notification Metrics
qa_notification_failures = Counter(
    "product_qa_notification_failures_total", "Seller notifications that could not be sent", ["kind"]
)

# View Metrics
qa_view_reloads_total = Counter(
    "product_qa_view_reloads_total", "QA view reloads", ["role", "trigger", "outcome"]
)
qa_bucket_size = Gauge("product_qa_bucket_size", "Records per QA bucket in the last moderator reload", ["bucket"])
