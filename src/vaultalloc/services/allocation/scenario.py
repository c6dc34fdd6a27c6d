"""Allocation scenario loader.

Loads a YAML scenario (vault totals, registrations and a snapshot of every
market's state) and builds in-memory market views plus Registrations ready
for AllocationService.

Design Principles:
- Clear error messages naming the scenario file and the offending market
- Validation at load time (fail fast)

Expected YAML structure:
    account: vault                 # optional, defaults to "vault"
    collateral: "1000"
    assets: "800"
    markets:
      - name: eth
        weight: 1
        leverage: "1"
        parameter: {closed: false, maker_limit: "1000000"}
        risk_parameter: {margin: "0.3", maintenance: "0.3", min_margin: "10", min_maintenance: "10"}
        global: {latest_price: "2000", current_id: 1, latest_id: 1}
        local: {latest_id: 1, current_id: 1, collateral: "0"}
        latest_account_position: {id: 1, maker: "0"}
        pending_account_positions: []
        latest_position: {id: 1, maker: "0", long: "0", short: "0"}
        pending_positions: []
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vaultalloc.libraries.numeric.fixed import UFixed6
from vaultalloc.services.allocation.models import Registration
from vaultalloc.services.market.memory import InMemoryMarket
from vaultalloc.services.market.models import Global, Local, MarketParameter, Position, RiskParameter

DEFAULT_ACCOUNT = "vault"


@dataclass(frozen=True)
class Scenario:
    """A fully loaded allocation scenario.

    Attributes:
        account: Vault account the market snapshots describe
        collateral: Vault's total collateral
        assets: Deployable portion of the collateral
        registrations: Registered markets, in file order
    """

    account: str
    collateral: UFixed6
    assets: UFixed6
    registrations: list[Registration]


def load_scenario(path: str | Path) -> Scenario:
    """Load an allocation scenario from YAML.

    Args:
        path: Scenario file path

    Returns:
        Parsed and validated Scenario

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML is invalid or missing required fields

    Example:
        >>> scenario = load_scenario("scenarios/two_markets.yaml")
        >>> service = AllocationService(account=scenario.account)
        >>> targets = service.allocate(scenario.registrations, scenario.collateral, scenario.assets)
    """
    scenario_path = Path(path)
    if not scenario_path.exists():
        raise FileNotFoundError(f"Scenario file not found: {scenario_path}")

    try:
        with open(scenario_path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML from {scenario_path}: {e}")

    try:
        return parse_scenario(raw)
    except (ValueError, ArithmeticError) as e:
        raise ValueError(f"Failed to parse scenario from {scenario_path}: {e}")


def parse_scenario(raw: Any) -> Scenario:
    """Build a Scenario from an already-parsed document.

    Raises:
        ValueError: If the document structure is invalid
    """
    if not isinstance(raw, dict):
        raise ValueError("scenario must be a mapping")

    account = raw.get("account", DEFAULT_ACCOUNT)
    if not isinstance(account, str) or not account:
        raise ValueError("'account' must be a non-empty string")

    for key in ("collateral", "assets"):
        if key not in raw:
            raise ValueError(f"missing '{key}'")

    collateral = _parse_amount(raw["collateral"], "collateral")
    assets = _parse_amount(raw["assets"], "assets")

    market_defs = raw.get("markets") or []
    if not isinstance(market_defs, list):
        raise ValueError("'markets' must be a list")

    registrations = []
    seen: set[str] = set()
    for market_def in market_defs:
        registration = _parse_market(market_def, account)
        if registration.name in seen:
            raise ValueError(f"duplicate market name '{registration.name}'")
        seen.add(registration.name)
        registrations.append(registration)

    return Scenario(account=account, collateral=collateral, assets=assets, registrations=registrations)


def _parse_amount(value: Any, field_name: str) -> UFixed6:
    try:
        return UFixed6.coerce(value)
    except ArithmeticError as e:
        raise ValueError(f"'{field_name}' must be a non-negative amount, got {value!r}") from e


def _parse_market(market_def: Any, account: str) -> Registration:
    """Parse one market entry into a Registration backed by an InMemoryMarket."""
    if not isinstance(market_def, dict):
        raise ValueError("each market must be a mapping with at least 'name', 'weight' and 'leverage'")

    name = market_def.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError("market missing 'name'")

    for key in ("weight", "leverage"):
        if key not in market_def:
            raise ValueError(f"market '{name}' missing '{key}'")

    weight = market_def["weight"]
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise ValueError(f"market '{name}': 'weight' must be an integer, got {weight!r}")

    try:
        leverage = UFixed6.coerce(market_def["leverage"])
        market = InMemoryMarket(
            name=name,
            account=account,
            parameter=MarketParameter.model_validate(market_def.get("parameter") or {}),
            risk_parameter=RiskParameter.model_validate(market_def.get("risk_parameter") or {}),
            global_state=Global.model_validate(market_def.get("global") or {}),
            local=Local.model_validate(market_def.get("local") or {}),
            latest_account_position=Position.model_validate(market_def.get("latest_account_position") or {}),
            pending_account_positions=_parse_pending(market_def.get("pending_account_positions")),
            latest_position=Position.model_validate(market_def.get("latest_position") or {}),
            pending_positions=_parse_pending(market_def.get("pending_positions")),
        )
    except (ValidationError, ArithmeticError) as e:
        raise ValueError(f"market '{name}': {e}") from e

    return Registration(market=market, weight=weight, leverage=leverage)


def _parse_pending(pending_defs: Any) -> dict[int, Position]:
    """Parse a list of pending snapshots keyed by their id."""
    if not pending_defs:
        return {}
    if not isinstance(pending_defs, list):
        raise ValueError("pending positions must be a list")

    pending: dict[int, Position] = {}
    for pending_def in pending_defs:
        position = Position.model_validate(pending_def)
        if position.id in pending:
            raise ValueError(f"duplicate pending position id {position.id}")
        pending[position.id] = position
    return pending
