DEFAULTS = {
    # Maximum operations accepted in one batch
    "BATCH_MAX_OPERATIONS": 500,
    # Maximum serialized batch size in bytes (compact JSON, UTF-8)
    "BATCH_MAX_PAYLOAD_BYTES": 262144,
    # Maximum add_node operations per batch
    "POLICY_MAX_NODES_ADDED": 20,
    # Allowed node types for add_node (empty = any)
    "POLICY_NODE_WHITELIST": [],
    # Forbidden node types for add_node
    "POLICY_NODE_BLACKLIST": [],
    # Hosts that parameters must not point at ("*.host" matches subdomains)
    "POLICY_DOMAIN_BLACKLIST": [],
    # Reject batches leaving the graph without a trigger
    "POLICY_REQUIRE_TRIGGER": True,
    # Report cycles as errors
    "LINT_DETECT_CYCLES": True,
    # Report nodes without connections as warnings
    "LINT_WARN_UNCONNECTED": True,
    # Report non-trigger nodes without outgoing connections as warnings
    "LINT_WARN_DANGLING": True,
    # Bound on critic fix iterations
    # Batch lifecycles kept in the journal before the oldest is evicted
    "JOURNAL_MAX_RECORDS": 10000,
    "CRITIC_MAX_TRIES": 3,
    # Minimum similarity for an enum correction
    "CRITIC_ENUM_MATCH_CUTOFF": 0.6,
    # Latency used for node types missing from the latency table
    "SIMULATOR_DEFAULT_LATENCY_MS": 150.0,
    # Percentile reported over trigger-to-sink path latencies
    "SIMULATOR_PERCENTILE": 95.0,
    # Upper bound on enumerated trigger-to-sink paths
    "SIMULATOR_MAX_PATHS": 1000,
    # Log level for the runnable demo
    "LOG_LEVEL": "INFO",
}
