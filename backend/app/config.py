from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from flowpatch.config.settings import (
    BatchLimitsConfig,
    PolicyConfig,
    LintConfig,
    CriticConfig,
    SimulatorConfig,
    FlowpatchConfig,
)

settings = Dynaconf(
    envvar_prefix="FLOWPATCH",
    load_dotenv=True,
    settings_files=[],
)
for _key, _value in DEFAULTS.items():
    if settings.get(_key) is None:
        settings.set(_key, _value)


def _parse_csv(value):
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    return ()


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "flowpatch-backend")
    api_prefix: str = settings.get("API_PREFIX", "")
    log_level: str = settings.get("LOG_LEVEL", "INFO")
    journal_max_records: int = settings.get("JOURNAL_MAX_RECORDS", 10000)

    # ---------------- Flowpatch Policy ----------------
    flowpatch: FlowpatchConfig = FlowpatchConfig(
        limits=BatchLimitsConfig(
            max_operations=settings.get("BATCH_MAX_OPERATIONS", 500),
            max_payload_bytes=settings.get("BATCH_MAX_PAYLOAD_BYTES", 262144),
        ),
        policy=PolicyConfig(
            max_nodes_added=settings.get("POLICY_MAX_NODES_ADDED", 20),
            node_whitelist=_parse_csv(settings.get("POLICY_NODE_WHITELIST")),
            node_blacklist=_parse_csv(settings.get("POLICY_NODE_BLACKLIST")),
            domain_blacklist=_parse_csv(settings.get("POLICY_DOMAIN_BLACKLIST")),
            require_trigger=settings.get("POLICY_REQUIRE_TRIGGER", True),
        ),
        lint=LintConfig(
            detect_cycles=settings.get("LINT_DETECT_CYCLES", True),
            warn_unconnected=settings.get("LINT_WARN_UNCONNECTED", True),
            warn_dangling=settings.get("LINT_WARN_DANGLING", True),
        ),
        critic=CriticConfig(
            max_tries=settings.get("CRITIC_MAX_TRIES", 3),
            enum_match_cutoff=settings.get("CRITIC_ENUM_MATCH_CUTOFF", 0.6),
        ),
        simulator=SimulatorConfig(
            default_latency_ms=settings.get("SIMULATOR_DEFAULT_LATENCY_MS", 150.0),
            percentile=settings.get("SIMULATOR_PERCENTILE", 95.0),
            max_paths=settings.get("SIMULATOR_MAX_PATHS", 1000),
        ),
    )
