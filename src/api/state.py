from dotenv import load_dotenv

from storage.token_store import TokenStore
from workbench.config import Settings

# .env.local first so it wins over .env; real environment variables win over both
load_dotenv(".env.local", override=False)
load_dotenv(override=False)

settings: Settings = Settings.from_env()

# Process-lifetime credential store, shared by every request handler
token_store: TokenStore = TokenStore()
