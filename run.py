import asyncio
import os
import sys
from typing import Dict, List, Tuple

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from automation_hub.config import load_envs

# Load environment variables before anything reads CONFIG
load_envs(PROJECT_ROOT)

from automation_hub.auth import (
    StaticIdentityProvider,
    SupabaseIdentityProvider,
    get_auth_manager,
    load_user_context_from_env,
)
from automation_hub.billing import AllowAllEntitlements, BillingManager, PlanEntitlementCheck
from automation_hub.config import CONFIG
from automation_hub.core.dispatcher import AutomationDispatcher
from automation_hub.core.errors import AutomationError
from automation_hub.logger import log
from automation_hub.registry.automations import AutomationCatalog
from automation_hub.services import (
    HttpExecutor,
    LoggingNotificationSink,
    SupabaseInsightStore,
    SupabaseWorkspaceDirectory,
)

_LIST_KEYS = {"participants"}
_INT_KEYS = {"duration", "hours"}


def _parse_cli_args(extra_args: List[str]) -> Tuple[Dict[str, object], List[str]]:
    """Parse CLI-style ``--key value`` pairs and return remaining positional args."""

    consumed_indexes: set[int] = set()
    cli_params: Dict[str, object] = {}

    i = 0
    while i < len(extra_args):
        token = extra_args[i]
        if token.startswith("--") and len(token) > 2:
            key = token[2:].strip()
            if not key:
                i += 1
                continue
            consumed_indexes.add(i)
            value: object = True
            if i + 1 < len(extra_args) and not extra_args[i + 1].startswith("--"):
                value = extra_args[i + 1]
                consumed_indexes.add(i + 1)
                i += 2
            else:
                i += 1
            cli_params[key] = _coerce_cli_value(key, value)
        else:
            i += 1

    residual = [token for idx, token in enumerate(extra_args) if idx not in consumed_indexes]
    return cli_params, residual


def _coerce_cli_value(key: str, value: object) -> object:
    if not isinstance(value, str):
        return value
    if key in _LIST_KEYS:
        return [item.strip() for item in value.split(",") if item.strip()]
    if key in _INT_KEYS:
        try:
            return int(value)
        except ValueError:
            return value
    return value


def _print_usage() -> None:
    usage = (
        "Usage:\n"
        "  python run.py <automation_id> [--key value ...]\n"
        "  python run.py --list\n"
        "Example: python run.py sentiment-analysis-real --text \"Thanks for the quick delivery\"\n"
    )
    print(usage.strip())


def _print_catalog(catalog: AutomationCatalog) -> None:
    for definition in catalog:
        print(f"{definition.id:<28} {definition.variant.value:<28} {definition.status.value}")
    stats = catalog.stats()
    print(
        f"\n{stats['total']} automations, {stats['active']} active, "
        f"average success rate {stats['average_success_rate']}%"
    )


def build_dispatcher(catalog: AutomationCatalog | None = None) -> AutomationDispatcher:
    """Wire the dispatcher with the HTTP executor and, when configured, Supabase adapters."""

    catalog = catalog or AutomationCatalog()
    access_token = os.getenv("USER_ACCESS_TOKEN")

    insights = workspace = None
    entitlements = AllowAllEntitlements()
    if CONFIG.supabase_configured:
        from automation_hub.db import get_database_client

        db = get_database_client()
        insights = SupabaseInsightStore(db)
        workspace = SupabaseWorkspaceDirectory(db)
        entitlements = PlanEntitlementCheck(BillingManager(db))

    if access_token and CONFIG.supabase_configured:
        identity = SupabaseIdentityProvider(get_auth_manager(), access_token)
    else:
        identity = StaticIdentityProvider(load_user_context_from_env())

    return AutomationDispatcher(
        catalog,
        identity,
        HttpExecutor(),
        insights=insights,
        workspace=workspace,
        notifications=LoggingNotificationSink(),
        entitlements=entitlements,
    )


async def _run(automation_id: str, params: Dict[str, object]) -> int:
    dispatcher = build_dispatcher()
    try:
        await dispatcher.load_message_counts()
        outcome = await dispatcher.run(automation_id, params)
    except AutomationError as exc:
        print(f"[dispatcher error] {exc.message}", file=sys.stderr)
        return 1
    finally:
        await dispatcher.aclose()

    print(outcome.message)
    return 0 if outcome.kind.value in {"success", "skipped", "advisory"} else 1


def main(argv: list[str] | None = None):
    args = argv if argv is not None else sys.argv[1:]
    if not args:
        _print_usage()
        return 1

    if args[0] == "--list":
        _print_catalog(AutomationCatalog())
        return 0

    automation_id, extra_args = args[0], args[1:]
    if automation_id not in AutomationCatalog():
        print(f"[dispatcher error] Unknown automation '{automation_id}'.", file=sys.stderr)
        _print_usage()
        return 1

    cli_params, residual_args = _parse_cli_args(extra_args)
    if residual_args:
        log(f"[dispatcher] ignoring positional arguments: {' '.join(residual_args)}")

    return asyncio.run(_run(automation_id, cli_params))


if __name__ == "__main__":
    sys.exit(main())
