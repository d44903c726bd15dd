# API Route Constants

# Base API
API_BASE = '/api'

# Router prefixes
BOX_BASE = f'{API_BASE}/box'
ORDER_BASE = f'{API_BASE}/order'
STORE_ORDER_BASE = f'{API_BASE}/store/order'

# Identity headers set by the upstream auth gateway
CUSTOMER_ID_HEADER = 'X-Customer-Id'
STORE_ID_HEADER = 'X-Store-Id'
