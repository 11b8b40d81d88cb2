DOMAIN = "ONDC:TRV11"

# Correlation store keys
STOP_CODES_KEY = "stopCodesSet"
CATALOG_ITEMS_KEY = "onSearchItemArr"

ROUTE = "ROUTE"
TRIP = "TRIP"
TICKET = "TICKET"

TECHNICAL_CANCEL_CODE = "0"
