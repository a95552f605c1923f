"""Default upstream endpoint and target municipality."""

CWA_API_BASE_URL = "https://opendata.cwa.gov.tw/api"

# Township forecasts for Taitung County, 3-6 hour intervals
TOWNSHIP_DATASET_ID = "F-D0047-091"

TARGET_CITY = "臺東市"

DEFAULT_PORT = 3000

API_KEY_ENV = "CWA_API_KEY"
PORT_ENV = "PORT"
