# gatepass_client/config.py
from decouple import config

GATEPASS_API_URL = config("GATEPASS_API_URL", default="http://127.0.0.1:8000/api")
GATEPASS_API_TIMEOUT = config("GATEPASS_API_TIMEOUT", default=10.0, cast=float)

# Where pages send the user when the server refuses the credential.
GATEPASS_LOGIN_PATH = config("GATEPASS_LOGIN_PATH", default="/login")
GATEPASS_DASHBOARD_PATH = config("GATEPASS_DASHBOARD_PATH", default="/dashboard")
