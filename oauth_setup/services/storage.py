# oauth_setup/services/storage.py
# Cached Supabase client built from the service credentials.

from functools import lru_cache
from supabase import create_client

from oauth_setup import config

@lru_cache(maxsize=1)
def get_client():
    url = config.require("SUPABASE_URL", config.SUPABASE_URL)
    key = config.require("SUPABASE_SERVICE_KEY", config.SUPABASE_SERVICE_KEY)
    return create_client(url, key)
