import logging

from supabase import create_client, Client, ClientOptions
from .config import settings

logger = logging.getLogger(__name__)

_supabase: Client | None = None

def get_supabase() -> Client:
    global _supabase
    if _supabase is None:
        logger.info("Creating Supabase client for schema %s", settings.SUPABASE_SCHEMA)
        _supabase = create_client(
            str(settings.SUPABASE_URL),
            settings.SUPABASE_SERVICE_ROLE_KEY,
            options=ClientOptions(schema=settings.SUPABASE_SCHEMA),
        )
    return _supabase
