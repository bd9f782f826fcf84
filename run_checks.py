"""
Smoke checks against the in-process app (mock store recommended):

    USE_MOCK_DB=true python run_checks.py
"""

from fastapi.testclient import TestClient
from app.main import app

client = TestClient(app)

print('ROOT:', client.get('/').text)
print('HEALTH:', client.get('/health').json())

resp = client.get('/health/db')
print('DB HEALTH:', resp.status_code, resp.json())

print('INTEGRATIONS:', client.get('/health/integrations').json())

resp = client.post('/reports', json={'location': '', 'description': ''})
print('\nBLANK SUBMIT:', resp.status_code, resp.json())

resp = client.get('/reports')
print('MY REPORTS:', resp.status_code, len(resp.json()))

resp = client.get('/admin/reports', headers={'Accept': 'text/html'}, follow_redirects=False)
print('\nADMIN (browser, no session):', resp.status_code, resp.headers.get('location'))

resp = client.get('/admin/reports', headers={'Accept': 'application/json'})
print('ADMIN (api, no session):', resp.status_code, resp.json())
