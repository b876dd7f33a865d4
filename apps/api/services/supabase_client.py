from supabase import create_client, Client

import config

# Expects SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY in env.
# The service role key is needed to write chat_sessions/chat_messages/profiles
# on behalf of a user once Row Level Security is enabled.

_supabase: Client = None

def get_supabase_client() -> Client:
    global _supabase
    if _supabase is None:
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
            print("Warning: SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set. Chat sessions stay local-only.")
            return None
        _supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
    return _supabase
