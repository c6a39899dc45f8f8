"""Service layer modules."""

from .fx_conversion import ConversionError, convert_amount, currency_choices, format_amount
from .rate_client import RateClient, create_rate_client, historical_cache_key
from .rate_store import CURRENCY_LIST_KEY, LATEST_RATES_KEY, RateStore
from .scheduler import init_scheduler, run_refresh
