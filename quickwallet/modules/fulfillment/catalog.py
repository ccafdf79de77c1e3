"""
Static VTPass lookup tables: network service ids, data variation codes and plan prices.

Unmapped input degrades to the MTN baseline with a warning instead of raising.
"""
import logging
from decimal import Decimal

from quickwallet.common.enums.network import Network
from quickwallet.modules.fulfillment.dtos.provider import DataPlan, DataPlanListing

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = Network.MTN
DEFAULT_VARIATION_CODE = "1000"

AIRTIME_SERVICE_IDS: dict[Network, str] = {
    Network.MTN: "mtn",
    Network.AIRTEL: "airtel",
    Network.GLO: "glo",
    Network.NINE_MOBILE: "etisalat",
}

DATA_SERVICE_IDS: dict[Network, str] = {
    Network.MTN: "mtn-data",
    Network.AIRTEL: "airtel-data",
    Network.GLO: "glo-data",
    Network.NINE_MOBILE: "etisalat-data",
}

# (size token, variation code, price in NGN)
_PLAN_TABLE: dict[Network, list[tuple[str, str, str]]] = {
    Network.MTN: [
        ("500MB", "M500_3", "200"),
        ("1GB", "1000", "350"),
        ("2GB", "M2000_3", "700"),
        ("3GB", "M3000_8", "1000"),
        ("5GB", "M5000_8", "1500"),
    ],
    Network.AIRTEL: [
        ("500MB", "500MB-30", "200"),
        ("1GB", "1GB-30", "350"),
        ("2GB", "2GB-30", "700"),
        ("3GB", "3GB-30", "1000"),
        ("5GB", "5GB-30", "1500"),
    ],
    Network.GLO: [
        ("1GB", "glo-1gb-30", "300"),
        ("2GB", "glo-2gb-30", "600"),
        ("5GB", "glo-5gb-30", "1500"),
    ],
    Network.NINE_MOBILE: [
        ("500MB", "eti-500mb-30", "200"),
        ("1GB", "eti-1gb-30", "400"),
        ("2GB", "eti-2gb-30", "800"),
    ],
}


def _resolve(network: Network | str | None, purpose: str) -> Network:
    resolved = network if isinstance(network, Network) else Network.from_token(network)
    if resolved is None:
        logger.warning(f"Unmapped network {network!r} for {purpose}, falling back to {DEFAULT_NETWORK.value}")
        return DEFAULT_NETWORK
    return resolved


def airtime_service_id(network: Network | str | None) -> str:
    return AIRTIME_SERVICE_IDS[_resolve(network, "airtime service id")]


def data_service_id(network: Network | str | None) -> str:
    return DATA_SERVICE_IDS[_resolve(network, "data service id")]


def variation_code(network: Network | str | None, data_size: str | None) -> str:
    resolved = _resolve(network, "data variation code")
    size = (data_size or "").strip().upper()
    for token, code, _price in _PLAN_TABLE[resolved]:
        if token == size:
            return code
    logger.warning(
        f"No {resolved.value} plan for data size {data_size!r}, using variation code {DEFAULT_VARIATION_CODE}"
    )
    return DEFAULT_VARIATION_CODE


def static_plans(network: Network | str | None) -> DataPlanListing:
    resolved = network if isinstance(network, Network) else Network.from_token(network)
    is_fallback = resolved is None
    if is_fallback:
        logger.warning(f"No plans for network {network!r}, listing {DEFAULT_NETWORK.value} plans")
        resolved = DEFAULT_NETWORK

    plans = [
        DataPlan(name=f"{token} - 30 days", code=code, amount=Decimal(price))
        for token, code, price in _PLAN_TABLE[resolved]
    ]
    return DataPlanListing(network=resolved, plans=plans, is_fallback=is_fallback)
