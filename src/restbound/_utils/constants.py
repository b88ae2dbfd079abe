# Environment variables
ENV_BASE_URL = "RESTBOUND_URL"
ENV_ACCESS_TOKEN = "RESTBOUND_ACCESS_TOKEN"
ENV_TIMEOUT = "RESTBOUND_TIMEOUT"

# Headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_ACCEPT = "Accept"
HEADER_COOKIE = "Cookie"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_USER_AGENT = "User-Agent"
HEADER_API_KEY = "X-Api-Key"

USER_AGENT = "restbound-python"

# Transport
DEFAULT_TIMEOUT = 30.0
