from .api import Cobuy, RefreshReport
from .cache import RuleCache
from .config import EngineConfig, ELIGIBLE_STATUSES
from .core.connection import DuckDBConnection
from .core.ingestion import extract_transactions, extract_from_frame, history_tokens
from .core.types import AssociationRule, ItemsetKey, Order, OrderLine, RuleSet
from .exceptions import CobuyError, ConfigurationError, MiningError
from .mining.association_rules import AssociationRules
from .mining.frequent_itemsets import FrequentItemsets
from .mining.pipeline import mine_rules
from .recommenders.rules import RuleRecommender, RecommendationResult, IdentifierResolver
from .datasets import generate_retail_orders, generate_retail_frame

def load(orders, **kwargs) -> Cobuy:
    return Cobuy(orders, **kwargs)

__all__ = [
    "Cobuy",
    "load",
    "RefreshReport",
    "RuleCache",
    "EngineConfig",
    "ELIGIBLE_STATUSES",
    "DuckDBConnection",
    "extract_transactions",
    "extract_from_frame",
    "history_tokens",
    "AssociationRule",
    "ItemsetKey",
    "Order",
    "OrderLine",
    "RuleSet",
    "CobuyError",
    "ConfigurationError",
    "MiningError",
    "AssociationRules",
    "FrequentItemsets",
    "mine_rules",
    "RuleRecommender",
    "RecommendationResult",
    "IdentifierResolver",
    # Datasets
    "generate_retail_orders",
    "generate_retail_frame",
]
