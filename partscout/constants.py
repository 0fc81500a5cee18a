"""Application constants."""

APP_NAME = "PartScout"
APP_VERSION = "0.1.0"

TAVILY_SEARCH_URL = "https://api.tavily.com/search"
DIGIKEY_BASE_URL = "https://api.digikey.com"
DIGIKEY_TOKEN_URL = "https://api.digikey.com/v1/oauth2/token"
DIGIKEY_KEYWORD_SEARCH_PAGE = "https://www.digikey.com/en/products/result"
CATALOG_VENDOR_NAME = "DigiKey"
CATALOG_CURRENCY_SYMBOL = "$"

MAX_COMPONENTS_PER_CATEGORY = 4
MAX_OPTIONS_PER_COMPONENT = 4
MAX_SNIPPETS_PER_QUERY = 5

DATASHEET_SOURCES = (
    "digikey.com",
    "mouser.com",
    "ti.com",
    "st.com",
    "analog.com",
    "microchip.com",
    "nxp.com",
    "espressif.com",
    "adafruit.com",
    "sparkfun.com",
)

STEP_ANALYZE_REQUIREMENTS = "Analyzing project requirements"
STEP_SEARCH_PLAN = "Generating search plan"
STEP_ANALYZE_RESULTS = "Analyzing search results"
STEP_SYNTHESIZE_PARTS = "Synthesizing final parts list"
STEP_RECOMMEND_FINAL = "Recommending final parts list"
STEP_CATALOG_ENRICHMENT = "Verifying parts against catalog"
