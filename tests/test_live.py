"""
Checks against the real API, run with LABELCAMP_LIVE_TESTS=1 and keyring credentials
(see conftest.live_client).
"""
import pytest

from labelcamp_api import LabelcampAPI


def test_get_user(live_client: LabelcampAPI):
    body = live_client.users.get()
    assert 'data' in body
    assert live_client.get_last_response().status == 200


def test_reference_data(live_client: LabelcampAPI):
    currencies = live_client.currencies.get()
    assert currencies['data']
    assert live_client.currencies.get() == currencies


@pytest.mark.parametrize('name', ['genders', 'languages', 'product_types'])
def test_get_df(live_client: LabelcampAPI, name: str):
    df = live_client.get_df(name)
    assert not df.empty
