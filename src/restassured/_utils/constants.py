# Headers
HEADER_ACCEPT = "Accept"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"

# Request defaults
DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_CONTENT_ENCODING = "utf-8"
DEFAULT_TIMEOUT = 30.0

# Env vars
ENV_BASE_URL = "RESTASSURED_BASE_URL"
ENV_TIMEOUT = "RESTASSURED_TIMEOUT"
ENV_FOLLOW_REDIRECTS = "RESTASSURED_FOLLOW_REDIRECTS"
ENV_VERIFY_SSL = "RESTASSURED_VERIFY_SSL"

# Files
DOTENV_FILE = ".env"

# Misc
PACKAGE_NAME = "restassured"
USER_AGENT_PRODUCT = "restassured-python"
