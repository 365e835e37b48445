from labelcamp_api import LabelcampAPI, Session
import keyring

app = keyring.get_credential('labelcamp-app:https://api.labelcamp.io', None)
cred = keyring.get_credential('api.labelcamp.io', None)
session = Session(app.username, app.password)
success = session.request_access_token(cred.username, cred.password)

if not success:
    raise ValueError('login failed')

api = LabelcampAPI(options={'auto_refresh': True}, session=session)

# api.artists.create_resource({'name': 'Test Artist'}, {'label': {'type': 'labels', 'id': '1'}})

artists = api.get_df('artists', page={'size': 50})
print(artists)
