import os

# Supabase (persistence + auth). Server-side writes need the service role key
# when Row Level Security blocks anon.
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")

# Streaming chat backend
STREAM_URL = os.getenv("STREAM_URL", "")
STREAM_APP_ID = os.getenv("STREAM_APP_ID", "zen-chat")
STREAM_IDLE_TIMEOUT = float(os.getenv("STREAM_IDLE_TIMEOUT", "60"))

# Sessions
SESSION_TITLE = os.getenv("SESSION_TITLE", "Zen Chat")
RESUME_LATEST_SESSION = os.getenv("RESUME_LATEST_SESSION", "0") == "1"

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]

# Mounted chat pages kept in memory; idle or overflowing ones are closed
MAX_CHAT_SESSIONS = int(os.getenv("MAX_CHAT_SESSIONS", "1000"))
CHAT_SESSION_IDLE_TTL = float(os.getenv("CHAT_SESSION_IDLE_TTL", "1800"))
