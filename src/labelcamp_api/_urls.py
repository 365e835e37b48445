API_NETLOC = 'api.labelcamp.io'
API_BASE_URL = f'https://{API_NETLOC}'
TOKEN_URL = f'{API_BASE_URL}/oauth/token'

JSON_API_CONTENT_TYPE = 'application/vnd.api+json'
